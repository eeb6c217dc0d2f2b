# landgrid/abstractions/types/__init__.py
"""Type definitions for the abstractions layer."""

from .spatial_types import Point2D, CellIndex, CellRect, Extent, EMPTY_EXTENT
from .landscape_types import SlopeAspect, ResourceUnitFraction

__all__ = [
    'Point2D', 'CellIndex', 'CellRect', 'Extent', 'EMPTY_EXTENT',
    'SlopeAspect', 'ResourceUnitFraction',
]
