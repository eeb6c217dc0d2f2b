# landgrid/raster/raw_raster.py
"""In-memory raster as read from disk, still in GIS coordinates."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from ..abstractions.types import Extent, Point2D
from ..grid_systems.coordinate_transform import CoordinateTransform

# Returned by lookups outside the raster; never equal to a finite no-data value
OUT_OF_RANGE = float('nan')


@dataclass
class RasterHeader:
    """Georeferencing of a raster; origin is the lower-left corner in GIS coordinates."""
    columns: int
    rows: int
    origin_x: float
    origin_y: float
    cell_size: float
    no_data_value: float

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(west, south, east, north)"""
        return (self.origin_x, self.origin_y,
                self.origin_x + self.columns * self.cell_size,
                self.origin_y + self.rows * self.cell_size)

    @property
    def cell_count(self) -> int:
        return self.columns * self.rows


class RawRaster:
    """
    Values of a single-band raster in file order (northern row first).

    Holds no coordinate transform; lookups by project coordinate take the
    landscape's transform as an argument.
    """

    def __init__(self, header: RasterHeader, values: np.ndarray,
                 source: Optional[Path] = None):
        self.header = header
        self.values = np.asarray(values, dtype=np.float64).reshape(header.rows, header.columns)
        self.source = source
        self._update_range()

    def _update_range(self):
        valid = self.values[~self._no_data_mask()]
        if valid.size:
            self.min_value = float(valid.min())
            self.max_value = float(valid.max())
        else:
            self.min_value = self.max_value = float('nan')

    def _no_data_mask(self) -> np.ndarray:
        return self.values == self.header.no_data_value

    # Header shortcuts
    @property
    def columns(self) -> int:
        return self.header.columns

    @property
    def rows(self) -> int:
        return self.header.rows

    @property
    def cell_size(self) -> float:
        return self.header.cell_size

    @property
    def no_data_value(self) -> float:
        return self.header.no_data_value

    def is_no_data(self, value: float) -> bool:
        return value == self.header.no_data_value

    def as_array(self) -> np.ndarray:
        """``(rows, columns)`` view, row 0 is the northern row."""
        return self.values

    # ---------------------------------------------------------------- lookups

    def get_value(self, column: int, row: int) -> float:
        """Value at a file cell (row 0 = north); OUT_OF_RANGE outside the raster."""
        if 0 <= column < self.columns and 0 <= row < self.rows:
            return float(self.values[row, column])
        return OUT_OF_RANGE

    def cell_of_gis(self, point: Point2D) -> Optional[Tuple[int, int]]:
        """``(column, row)`` containing a GIS point, or None outside the raster."""
        dx = point.x - self.header.origin_x
        dy = point.y - self.header.origin_y
        if dx < 0 or dy < 0:
            return None
        column = int(dx / self.cell_size)
        row_from_south = int(dy / self.cell_size)
        if column >= self.columns or row_from_south >= self.rows:
            return None
        return column, self.rows - 1 - row_from_south

    def get_value_at(self, point: Point2D,
                     transform: Optional[CoordinateTransform] = None) -> float:
        """
        Value at a project coordinate.

        The point is mapped to GIS space through ``transform`` (identity when
        omitted). Returns OUT_OF_RANGE outside the raster and the raster's
        no-data value on no-data cells.
        """
        gis = transform.model_to_gis(point) if transform is not None else point
        cell = self.cell_of_gis(gis)
        if cell is None:
            return OUT_OF_RANGE
        return float(self.values[cell[1], cell[0]])

    def cell_centroid(self, column: int, row: int) -> Point2D:
        """Centroid of a file cell in GIS coordinates."""
        return Point2D(self.header.origin_x + (column + 0.5) * self.cell_size,
                       self.header.origin_y + (self.rows - 1 - row + 0.5) * self.cell_size)

    def cell_centroid_model(self, column: int, row: int,
                            transform: CoordinateTransform) -> Point2D:
        return transform.gis_to_model(self.cell_centroid(column, row))

    # ------------------------------------------------------------ whole raster

    def bounding_box(self) -> Extent:
        """Raster extent in GIS coordinates."""
        return Extent.from_bounds(*self.header.bounds)

    def model_bounding_box(self, transform: Optional[CoordinateTransform] = None) -> Extent:
        """Axis-aligned extent of the raster's corners in project coordinates."""
        west, south, east, north = self.header.bounds
        if transform is None:
            return Extent.from_bounds(west, south, east, north)
        xs, ys = transform.gis_to_model_xy(np.array([west, east, east, west]),
                                           np.array([south, south, north, north]))
        return Extent.from_bounds(float(xs.min()), float(ys.min()),
                                  float(xs.max()), float(ys.max()))

    def distinct_values(self) -> List[float]:
        """Sorted distinct values, no-data excluded."""
        return np.unique(self.values[~self._no_data_mask()]).tolist()

    def clip(self, extent: Extent, transform: Optional[CoordinateTransform] = None) -> int:
        """
        Set cells whose project-space centroid lies outside ``extent`` to no-data.

        Returns:
            Number of cells that were cleared
        """
        columns = np.arange(self.columns)
        rows = np.arange(self.rows)
        gis_x = self.header.origin_x + (columns + 0.5) * self.cell_size
        gis_y = self.header.origin_y + (self.rows - 1 - rows + 0.5) * self.cell_size
        grid_x, grid_y = np.meshgrid(gis_x, gis_y)
        if transform is not None:
            grid_x, grid_y = transform.gis_to_model_xy(grid_x, grid_y)

        outside = ~((grid_x >= extent.left) & (grid_x < extent.right) &
                    (grid_y >= extent.bottom) & (grid_y < extent.top))
        cleared = int(np.count_nonzero(outside & ~self._no_data_mask()))
        self.values[outside] = self.header.no_data_value
        self._update_range()
        return cleared

    def __repr__(self) -> str:
        return (f"RawRaster({self.columns}x{self.rows}, cell_size={self.cell_size}, "
                f"origin=({self.header.origin_x}, {self.header.origin_y}), source={self.source})")
