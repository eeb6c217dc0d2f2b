"""Grid systems: uniform grids, windowed traversal and coordinate transforms."""

from .coordinate_transform import CoordinateTransform
from .uniform_grid import UniformGrid
from .grid_window import GridWindow, INVALID_POSITION

__all__ = ['CoordinateTransform', 'UniformGrid', 'GridWindow', 'INVALID_POSITION']
