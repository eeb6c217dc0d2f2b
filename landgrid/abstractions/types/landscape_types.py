# landgrid/abstractions/types/landscape_types.py
"""Result records returned by terrain and stand queries."""

from dataclasses import dataclass
from typing import Any, NamedTuple


class SlopeAspect(NamedTuple):
    """Terrain at a point; slope as rise/run, aspect in degrees (0=N, 90=E)."""
    elevation: float
    slope: float
    aspect: float
    is_defined: bool


@dataclass
class ResourceUnitFraction:
    """Share of a resource unit's area covered by one polygon."""
    resource_unit: Any
    fraction: float
