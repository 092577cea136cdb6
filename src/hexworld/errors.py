"""Exception types raised by hexworld."""

from __future__ import annotations


class HexWorldError(Exception):
    """Base class for all hexworld errors."""


class ConfigurationError(HexWorldError, ValueError):
    """Bad grid dimensions or generator parameters.

    Raised before any grid is created or mutated.
    """


class InvalidSearchError(HexWorldError, ValueError):
    """A path or visibility query that cannot be run as given."""


class MapFormatError(HexWorldError, ValueError):
    """A saved map payload that cannot be restored."""
