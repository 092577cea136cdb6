"""World generator — builds a fresh grid and runs the generation pipeline.

Usage
-----
>>> from hexworld import generate_world, GeneratorConfig
>>> result = generate_world(40, 30, seed=1234, config=GeneratorConfig(land_percentage=40))
>>> result.report.land_cells
>>> result.grid.get_cell_offset(10, 10).terrain_type_index

Every run draws all randomness from one ``random.Random`` seeded with
the run's seed; the process-wide :mod:`random` state is never touched,
so generation neither depends on nor perturbs unrelated randomness.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import structlog

from .config import GeneratorConfig
from .grid import HexGrid, create_grid
from .metrics import CHUNK_SIZE_X, CHUNK_SIZE_Z
from .noise import NoiseSource
from .pipeline import (
    GenerationContext,
    GenerationPipeline,
    GenerationStep,
    PipelineResult,
    default_steps,
)

logger = structlog.get_logger()

SEED_BITS = 31


@dataclass
class GenerationReport:
    """How closely a run met its stochastic budgets.

    Attributes
    ----------
    land_budget, land_budget_remaining : int
        Cells that should have been raised above water, and the part of
        that budget left unspent.
    land_cells : int
        Cells the land budget actually paid for.
    river_budget, river_budget_remaining : int
        River cells requested, and the part left unspent.
    warnings : list[str]
        Human-readable notes for every unmet budget.
    """

    land_budget: int = 0
    land_budget_remaining: int = 0
    land_cells: int = 0
    river_budget: int = 0
    river_budget_remaining: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.warnings


@dataclass
class GenerationResult:
    """Outcome of one :meth:`MapGenerator.generate` call."""

    grid: HexGrid
    seed: int
    config: GeneratorConfig
    report: GenerationReport
    elapsed: Dict[str, float] = field(default_factory=dict)
    moisture: Optional[np.ndarray] = None
    temperature: Optional[np.ndarray] = None


def new_seed() -> int:
    """Draw a fresh seed without touching the global random state."""
    return random.SystemRandom().getrandbits(SEED_BITS)


def _build_report(outcome: PipelineResult) -> GenerationReport:
    report = GenerationReport()
    land = outcome.step_results.get("land")
    if land is not None:
        report.land_budget = land.artefacts["initial_budget"]
        report.land_budget_remaining = land.artefacts["remaining_budget"]
        report.land_cells = land.artefacts["land_cells"]
        if report.land_budget_remaining > 0:
            report.warnings.append(
                f"Failed to use up land budget: {report.land_budget_remaining} "
                f"of {report.land_budget} cells left"
            )
    rivers = outcome.step_results.get("rivers")
    if rivers is not None:
        report.river_budget = rivers.artefacts["initial_budget"]
        report.river_budget_remaining = rivers.artefacts["remaining_budget"]
        if report.river_budget_remaining > 0:
            report.warnings.append(
                f"Failed to use up river budget: {report.river_budget_remaining} "
                f"of {report.river_budget} cells left"
            )
    return report


class MapGenerator:
    """Generates worlds from a :class:`GeneratorConfig`.

    Parameters
    ----------
    config : GeneratorConfig | None
        Tunables; defaults are used when omitted.
    steps : list[GenerationStep] | None
        Custom stage list; :func:`~hexworld.pipeline.default_steps` when
        omitted.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        steps: Optional[List[GenerationStep]] = None,
    ) -> None:
        self.config = config if config is not None else GeneratorConfig()
        self.pipeline = GenerationPipeline(
            steps if steps is not None else default_steps(),
            before=self._before_step,
            after=self._after_step,
        )

    @staticmethod
    def _before_step(name: str, index: int, total: int) -> None:
        logger.debug("Generation step started", step=name, index=index, total=total)

    @staticmethod
    def _after_step(name: str, index: int, total: int) -> None:
        logger.debug("Generation step finished", step=name, index=index, total=total)

    def generate(
        self,
        width: int,
        height: int,
        wrapping: bool = False,
        seed: Optional[int] = None,
        *,
        chunk_size_x: int = CHUNK_SIZE_X,
        chunk_size_z: int = CHUNK_SIZE_Z,
    ) -> GenerationResult:
        """Create a *width* × *height* grid and generate a world on it.

        Raises
        ------
        ConfigurationError
            If the dimensions are not positive multiples of the chunk
            sizes (nothing is built in that case).
        """
        grid = create_grid(
            width,
            height,
            wrapping,
            chunk_size_x=chunk_size_x,
            chunk_size_z=chunk_size_z,
            elevation_range=self.config.elevation_range,
        )
        if seed is None:
            seed = new_seed()
        return self.generate_into(grid, seed)

    def generate_into(self, grid: HexGrid, seed: int) -> GenerationResult:
        """Generate a world on an existing, freshly created *grid*."""
        config = self.config
        t0 = time.perf_counter()
        logger.info(
            "Starting world generation",
            seed=seed,
            width=grid.cell_count_x,
            height=grid.cell_count_z,
            wrapping=grid.wrapping,
        )

        grid.reset_search_phase()
        for cell in grid:
            cell.water_level = config.water_level

        context = GenerationContext(
            grid=grid,
            config=config,
            rng=random.Random(seed),
            noise=NoiseSource(seed),
        )
        outcome = self.pipeline.run(context)
        grid.reset_search_phase()

        report = _build_report(outcome)
        logger.info(
            "World generation complete",
            seed=seed,
            land_cells=report.land_cells,
            warnings=len(report.warnings),
            elapsed=round(time.perf_counter() - t0, 4),
        )
        return GenerationResult(
            grid=grid,
            seed=seed,
            config=config,
            report=report,
            elapsed=dict(outcome.elapsed),
            moisture=context.moisture,
            temperature=context.temperature,
        )


def generate_world(
    width: int,
    height: int,
    wrapping: bool = False,
    seed: Optional[int] = None,
    config: Optional[GeneratorConfig] = None,
    *,
    chunk_size_x: int = CHUNK_SIZE_X,
    chunk_size_z: int = CHUNK_SIZE_Z,
) -> GenerationResult:
    """One-shot convenience wrapper around :class:`MapGenerator`."""
    return MapGenerator(config).generate(
        width,
        height,
        wrapping,
        seed,
        chunk_size_x=chunk_size_x,
        chunk_size_z=chunk_size_z,
    )
