"""Generation pipeline — composable step-based world generation.

Provides :class:`GenerationStep` (protocol) and :class:`GenerationPipeline`
(sequencer) so that the generation stages (regions, land, erosion,
climate, rivers, biomes) are declared in order and run as one pass over
a shared :class:`GenerationContext`.

Usage
-----
>>> from hexworld.pipeline import GenerationPipeline, default_steps
>>> pipe = GenerationPipeline(default_steps())
>>> result = pipe.run(context)
>>> result.artefact("land", "remaining_budget")
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    runtime_checkable,
)

import numpy as np

from .biomes import classify_terrain
from .climate import CLIMATE_CYCLES, create_climate
from .config import GeneratorConfig
from .grid import HexGrid
from .land import create_land, erode_land
from .noise import NoiseSource
from .priority_queue import CellPriorityQueue
from .regions import MapRegion, create_regions
from .rivers import create_rivers


# ═══════════════════════════════════════════════════════════════════
# Shared state
# ═══════════════════════════════════════════════════════════════════


@dataclass
class GenerationContext:
    """Everything the steps of one generation run share.

    Attributes
    ----------
    grid : HexGrid
        Grid being generated; mutated in place.
    config : GeneratorConfig
    rng : random.Random
        The single random source of the run.
    noise : NoiseSource
        Seeded noise for temperature jitter.
    frontier : CellPriorityQueue
        Queue reused by every flood fill.
    regions, land_cells, moisture, temperature
        Filled in by the steps that produce them.
    """

    grid: HexGrid
    config: GeneratorConfig
    rng: random.Random
    noise: NoiseSource
    frontier: CellPriorityQueue = field(default_factory=CellPriorityQueue)
    regions: List[MapRegion] = field(default_factory=list)
    land_cells: int = 0
    moisture: Optional[np.ndarray] = None
    temperature: Optional[np.ndarray] = None


@dataclass
class StepResult:
    """Optional return value from a step, carrying artefacts.

    Steps attach budgets and counters here so the caller can report
    how well the stochastic targets were met.
    """

    artefacts: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class GenerationStep(Protocol):
    """Protocol for a world-generation step.

    Any object that satisfies this protocol can be added to a
    :class:`GenerationPipeline`.  The step mutates the context's grid in
    place and may return a :class:`StepResult`.
    """

    @property
    def name(self) -> str:
        """Human-readable name for logging."""
        ...

    def __call__(self, context: GenerationContext) -> Optional[StepResult]:
        """Execute the step."""
        ...


# ═══════════════════════════════════════════════════════════════════
# Pipeline
# ═══════════════════════════════════════════════════════════════════

Hook = Callable[[str, int, int], None]
"""Signature for before/after hooks: ``(step_name, step_index, total_steps)``."""


@dataclass
class PipelineResult:
    """Aggregate result of running a full pipeline.

    Attributes
    ----------
    step_results : dict[str, StepResult]
        Mapping of ``step.name → StepResult`` for every step that
        returned one.
    elapsed : dict[str, float]
        Mapping of ``step.name → seconds`` wall-clock time per step.
    """

    step_results: Dict[str, StepResult] = field(default_factory=dict)
    elapsed: Dict[str, float] = field(default_factory=dict)

    def artefact(self, step_name: str, key: str) -> Any:
        """Raises ``KeyError`` if the step or key is not present."""
        return self.step_results[step_name].artefacts[key]


class GenerationPipeline:
    """Ordered sequence of :class:`GenerationStep` instances.

    Parameters
    ----------
    steps : list[GenerationStep]
        Steps to execute in order.
    before, after : Hook | None
        Called around each step.
    """

    def __init__(
        self,
        steps: Optional[List[GenerationStep]] = None,
        *,
        before: Optional[Hook] = None,
        after: Optional[Hook] = None,
    ) -> None:
        self._steps: List[GenerationStep] = list(steps or [])
        self._before = before
        self._after = after

    def add(self, step: GenerationStep) -> "GenerationPipeline":
        """Append a step and return *self* for chaining."""
        self._steps.append(step)
        return self

    def insert(self, index: int, step: GenerationStep) -> "GenerationPipeline":
        self._steps.insert(index, step)
        return self

    def run(self, context: GenerationContext) -> PipelineResult:
        """Execute all steps in order, returning aggregate results."""
        result = PipelineResult()
        total = len(self._steps)

        for idx, step in enumerate(self._steps):
            sname = step.name
            if self._before:
                self._before(sname, idx, total)

            t0 = time.perf_counter()
            step_result = step(context)
            result.elapsed[sname] = time.perf_counter() - t0
            if step_result is not None:
                result.step_results[sname] = step_result

            if self._after:
                self._after(sname, idx, total)

        return result

    @property
    def step_names(self) -> List[str]:
        return [s.name for s in self._steps]

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        names = ", ".join(self.step_names)
        return f"GenerationPipeline([{names}])"


# ═══════════════════════════════════════════════════════════════════
# Built-in steps
# ═══════════════════════════════════════════════════════════════════


@dataclass
class RegionStep:
    """Partition the map into the regions land may be seeded in."""

    @property
    def name(self) -> str:
        return "regions"

    def __call__(self, context: GenerationContext) -> Optional[StepResult]:
        config = context.config
        context.regions = create_regions(
            context.grid,
            context.rng,
            region_count=config.region_count,
            map_border_x=config.map_border_x,
            map_border_z=config.map_border_z,
            region_border=config.region_border,
        )
        return StepResult(artefacts={"regions": list(context.regions)})


@dataclass
class LandStep:
    """Raise and sink land chunks until the land budget is spent."""

    @property
    def name(self) -> str:
        return "land"

    def __call__(self, context: GenerationContext) -> Optional[StepResult]:
        initial, remaining, land_cells = create_land(
            context.grid, context.rng, context.regions, context.config, context.frontier
        )
        context.land_cells = land_cells
        return StepResult(
            artefacts={
                "initial_budget": initial,
                "remaining_budget": remaining,
                "land_cells": land_cells,
            }
        )


@dataclass
class ErosionStep:
    """Flatten cliffs by moving elevation downhill."""

    @property
    def name(self) -> str:
        return "erosion"

    def __call__(self, context: GenerationContext) -> Optional[StepResult]:
        initial, remaining = erode_land(
            context.grid, context.rng, context.config.erosion_percentage
        )
        return StepResult(
            artefacts={"initial_erodible": initial, "remaining_erodible": remaining}
        )


@dataclass
class ClimateStep:
    """Simulate the water cycle to get per-cell moisture.

    Parameters
    ----------
    cycles : int
        Number of simulation rounds.
    """

    cycles: int = CLIMATE_CYCLES

    @property
    def name(self) -> str:
        return "climate"

    def __call__(self, context: GenerationContext) -> Optional[StepResult]:
        state = create_climate(context.grid, context.config, self.cycles)
        context.moisture = state.moisture
        return StepResult(artefacts={"moisture": state.moisture, "clouds": state.clouds})


@dataclass
class RiverStep:
    """Carve rivers; needs moisture from :class:`ClimateStep`."""

    @property
    def name(self) -> str:
        return "rivers"

    def __call__(self, context: GenerationContext) -> Optional[StepResult]:
        if context.moisture is None:
            raise RuntimeError("RiverStep requires moisture; run ClimateStep first")
        initial, remaining = create_rivers(
            context.grid, context.rng, context.moisture, context.land_cells, context.config
        )
        return StepResult(
            artefacts={"initial_budget": initial, "remaining_budget": remaining}
        )


@dataclass
class BiomeStep:
    """Classify terrain types and plant levels."""

    @property
    def name(self) -> str:
        return "biomes"

    def __call__(self, context: GenerationContext) -> Optional[StepResult]:
        if context.moisture is None:
            raise RuntimeError("BiomeStep requires moisture; run ClimateStep first")
        context.temperature = classify_terrain(
            context.grid, context.rng, context.moisture, context.config, context.noise
        )
        return StepResult(artefacts={"temperature": context.temperature})


@dataclass
class CustomStep:
    """Inline step from an arbitrary callable.

    Usage::

        step = CustomStep("flatten", lambda ctx: None)
        pipe = GenerationPipeline([step])
    """

    _name: str
    fn: Callable[[GenerationContext], Optional[StepResult]]

    @property
    def name(self) -> str:
        return self._name

    def __call__(self, context: GenerationContext) -> Optional[StepResult]:
        return self.fn(context)


def default_steps() -> List[GenerationStep]:
    """The standard stage order: regions → land → erosion → climate → rivers → biomes."""
    return [RegionStep(), LandStep(), ErosionStep(), ClimateStep(), RiverStep(), BiomeStep()]
