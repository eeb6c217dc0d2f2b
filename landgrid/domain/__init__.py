"""Landscape layers built on the grid systems."""

from .landscape import LandscapeGrids
from .stands import StandGrid
from .terrain import DigitalElevationModel

__all__ = ['LandscapeGrids', 'StandGrid', 'DigitalElevationModel']
