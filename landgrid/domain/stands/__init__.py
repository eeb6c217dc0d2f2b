"""Stand map and polygon spatial index."""

from .stand_grid import StandGrid, PolygonRecord

__all__ = ['StandGrid', 'PolygonRecord']
