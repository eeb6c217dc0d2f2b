# landgrid/domain/landscape.py
"""Aligned light, height and resource-unit grids of one simulated landscape."""

from pathlib import Path
from typing import Any, Callable, Optional, Union

import numpy as np

from ..abstractions.exceptions import GridNotSetupError
from ..abstractions.interfaces import IResourceUnitLocator
from ..abstractions.types import CellIndex, Extent, Point2D
from ..config import Config, config as default_config
from ..grid_systems import CoordinateTransform, UniformGrid
from ..infrastructure.logging import LoggingContext, get_logger, log_stage
from .stands.stand_grid import StandGrid
from .terrain.dem import DigitalElevationModel
from .validators import GridAlignmentValidator

logger = get_logger(__name__)


class LandscapeGrids(IResourceUnitLocator):
    """
    The grids every landscape shares.

    - light grid (2 m) and height grid (10 m) cover the world plus a buffer
    - resource-unit grid (100 m) covers the unbuffered world and holds
      references to resource-unit objects

    All grids are anchored so coordinates inside the world are non-negative
    relative to every grid origin. The instance also acts as the
    resource-unit locator for stand indexing.
    """

    def __init__(self, config: Optional[Config] = None,
                 transform: Optional[CoordinateTransform] = None,
                 landscape_id: Optional[str] = None):
        self.config = config or default_config
        self.transform = transform or CoordinateTransform.from_config(self.config)
        self.logging_context = LoggingContext(landscape_id)

        self.light_grid = UniformGrid(dtype=np.float32, name='light_grid')
        self.height_grid = UniformGrid(dtype=np.float32, name='height_grid')
        self.resource_unit_grid = UniformGrid(dtype=object, name='resource_unit_grid')
        self.world_extent: Optional[Extent] = None
        self.dem: Optional[DigitalElevationModel] = None
        self.stands: Optional[StandGrid] = None

    @log_stage("grid_setup")
    def setup(self, world_extent: Extent, buffer: Optional[float] = None) -> 'LandscapeGrids':
        """Set up all grids for ``world_extent`` (project coordinates)."""
        grids = self.config.grids
        if buffer is None:
            buffer = grids.get('world_buffer', 60.0)

        self.world_extent = world_extent
        buffered = world_extent.buffer(buffer)
        self.light_grid.setup(buffered, grids.get('light_cell_size', 2.0))
        self.height_grid.setup(buffered, grids.get('height_cell_size', 10.0))
        self.resource_unit_grid.setup(world_extent, grids.get('resource_unit_size', 100.0))

        validator = GridAlignmentValidator()
        validator.require_aligned(self.light_grid, self.height_grid)
        validator.require_aligned(self.height_grid, self.resource_unit_grid)

        logger.info(
            f"Landscape grids: light {self.light_grid.cells_x}x{self.light_grid.cells_y}, "
            f"height {self.height_grid.cells_x}x{self.height_grid.cells_y}, "
            f"resource units {self.resource_unit_grid.cells_x}x{self.resource_unit_grid.cells_y}"
        )
        return self

    # --------------------------------------------------------- resource units

    @property
    def resource_unit_area(self) -> float:
        return self.resource_unit_grid.cell_size ** 2

    def get_resource_unit(self, point: Point2D) -> Optional[Any]:
        if not self.resource_unit_grid.is_setup() or not self.resource_unit_grid.contains_point(point):
            return None
        return self.resource_unit_grid[point]

    def set_resource_unit(self, cell: CellIndex, resource_unit: Any):
        self.resource_unit_grid[cell] = resource_unit

    def populate_resource_units(self, factory: Callable[[CellIndex, Extent], Any]):
        """Create one resource unit per resource-unit cell via ``factory(cell, extent)``."""
        grid = self.resource_unit_grid
        if not grid.is_setup():
            raise GridNotSetupError("Landscape grids have not been set up")
        for y in range(grid.cells_y):
            for x in range(grid.cells_x):
                cell = CellIndex(x, y)
                grid[cell] = factory(cell, grid.cell_extent(cell))

    # ------------------------------------------------------------------ layers

    @log_stage("dem_loading")
    def load_dem(self, path: Union[str, Path]) -> DigitalElevationModel:
        self.dem = DigitalElevationModel(self.config).load_from_file(
            path, self.height_grid, self.transform
        )
        return self.dem

    @log_stage("stand_indexing")
    def load_stand_grid(self, path: Union[str, Path]) -> StandGrid:
        self.stands = StandGrid(self.config).load_from_file(
            path,
            height_grid=self.height_grid,
            transform=self.transform,
            world_extent=self.world_extent,
            resource_units=self,
        )
        return self.stands

    def build(self, name: str, world_extent: Extent,
              dem_path: Optional[Union[str, Path]] = None,
              stand_path: Optional[Union[str, Path]] = None,
              resource_unit_factory: Optional[Callable[[CellIndex, Extent], Any]] = None
              ) -> 'LandscapeGrids':
        """Set up grids and load the optional layers inside one landscape logging context."""
        with self.logging_context.landscape(name, world=world_extent.bounds):
            self.setup(world_extent)
            if resource_unit_factory is not None:
                self.populate_resource_units(resource_unit_factory)
            if dem_path is not None:
                self.load_dem(dem_path)
            if stand_path is not None:
                self.load_stand_grid(stand_path)
        return self
