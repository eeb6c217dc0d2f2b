"""Consistency validators for landscape grids."""

from .grid_alignment import GridAlignmentValidator

__all__ = ['GridAlignmentValidator']
