"""Uniform raster grid over a flat, row-major numpy buffer."""

import math
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..abstractions.exceptions import (
    GridConfigurationError, GridExtentError, GridIndexError,
    GridMismatchError, GridNotSetupError
)
from ..abstractions.types import CellIndex, CellRect, Extent, Point2D, EMPTY_EXTENT
from ..config import config
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)

CellKey = Union[int, Tuple[int, int], CellIndex, Point2D]

# Tolerance when an extent edge should coincide with a cell boundary
EDGE_EPSILON = 1e-9


class UniformGrid:
    """
    Rectangular grid of equally sized square cells.

    Cells live in one contiguous buffer addressed as ``y * cells_x + x``,
    row 0 being the southern row. The grid can be addressed by flat index,
    by ``(x, y)`` cell index or by metric ``Point2D``:

        grid = UniformGrid(dtype=np.float32)
        grid.setup(Extent(0, 0, 100, 50), cell_size=10)
        grid[3, 2] = 1.5
        grid[Point2D(35.0, 25.0)]   # -> 1.5
        grid[2 * grid.cells_x + 3]  # -> 1.5

    Setting the grid up again reuses the buffer when it is large enough.
    Cells are zeroed on every setup.
    """

    def __init__(self, dtype: Any = np.float32, name: Optional[str] = None,
                 index_checks: Optional[bool] = None):
        """
        Initialize an empty grid.

        Args:
            dtype: numpy dtype of the cells (``object`` for references)
            name: Label used in log messages
            index_checks: Range-check ``(x, y)`` and point access; defaults to
                ``grids.index_checks`` from config
        """
        self.dtype = np.dtype(dtype)
        self.name = name or 'grid'
        self.index_checks = (config.get('grids.index_checks', True)
                             if index_checks is None else index_checks)

        self.cell_size = 0.0
        self.cells_x = 0
        self.cells_y = 0
        self.project_extent = EMPTY_EXTENT
        self._buffer: Optional[np.ndarray] = None
        self._data: Optional[np.ndarray] = None

    # ------------------------------------------------------------------ setup

    def setup(self, extent: Extent, cell_size: float) -> 'UniformGrid':
        """
        Cover ``extent`` with cells of ``cell_size`` metres.

        The cell counts are rounded up so the grid is never smaller than the
        requested extent; the grid origin is the extent's lower-left corner.
        """
        if cell_size is None or cell_size <= 0:
            raise GridConfigurationError(f"{self.name}: cell size must be positive, got {cell_size}")
        if extent.width <= 0 or extent.height <= 0:
            raise GridConfigurationError(
                f"{self.name}: extent must have positive width and height, got {extent}"
            )

        cells_x = int(extent.width / cell_size)
        if extent.left + cell_size * cells_x < extent.right:
            cells_x += 1
        cells_y = int(extent.height / cell_size)
        if extent.bottom + cell_size * cells_y < extent.top:
            cells_y += 1

        return self.setup_cells(max(cells_x, 1), max(cells_y, 1), cell_size,
                                origin=Point2D(extent.left, extent.bottom))

    def setup_cells(self, cells_x: int, cells_y: int, cell_size: float,
                    origin: Point2D = Point2D(0.0, 0.0)) -> 'UniformGrid':
        """Set up ``cells_x`` x ``cells_y`` cells anchored at ``origin``."""
        if cell_size is None or cell_size <= 0:
            raise GridConfigurationError(f"{self.name}: cell size must be positive, got {cell_size}")
        if cells_x < 1 or cells_y < 1:
            raise GridConfigurationError(
                f"{self.name}: need at least one cell per axis, got {cells_x}x{cells_y}"
            )

        self.cell_size = float(cell_size)
        self.cells_x = int(cells_x)
        self.cells_y = int(cells_y)
        self.project_extent = Extent(origin.x, origin.y,
                                     self.cells_x * self.cell_size,
                                     self.cells_y * self.cell_size)

        count = self.cells_x * self.cells_y
        if self._buffer is None or self._buffer.size < count:
            self._buffer = np.zeros(count, dtype=self.dtype)
        self._data = self._buffer[:count]
        self.clear()

        logger.debug(
            f"{self.name}: set up {self.cells_x}x{self.cells_y} cells of {self.cell_size} m",
            extra={'context': {'grid': self.name, 'extent': self.project_extent.bounds}}
        )
        return self

    def setup_like(self, other: 'UniformGrid') -> 'UniformGrid':
        """Set up with the same extent and cell size as ``other``."""
        other._require_setup()
        return self.setup_cells(other.cells_x, other.cells_y, other.cell_size,
                                origin=Point2D(other.project_extent.x, other.project_extent.y))

    def is_setup(self) -> bool:
        return self._data is not None

    def _require_setup(self):
        if self._data is None:
            raise GridNotSetupError(f"{self.name} has not been set up")

    def clear(self):
        """Reset every cell to zero (``None`` for object grids)."""
        self._require_setup()
        self._data[:] = None if self.dtype == np.dtype(object) else 0

    @property
    def count(self) -> int:
        return self.cells_x * self.cells_y

    @property
    def capacity(self) -> int:
        return 0 if self._buffer is None else self._buffer.size

    @property
    def origin(self) -> Point2D:
        return Point2D(self.project_extent.x, self.project_extent.y)

    @property
    def data(self) -> np.ndarray:
        """Flat view of the live cells."""
        self._require_setup()
        return self._data

    def as_array(self) -> np.ndarray:
        """2-D ``(cells_y, cells_x)`` view; row 0 is the southern row."""
        self._require_setup()
        return self._data.reshape(self.cells_y, self.cells_x)

    def __len__(self) -> int:
        return self.count

    # ------------------------------------------------------- index conversion

    def flat_index(self, x: int, y: int) -> int:
        return y * self.cells_x + x

    def cell_index_from_flat(self, index: int) -> CellIndex:
        return CellIndex(index % self.cells_x, index // self.cells_x)

    def cell_index_of(self, point: Point2D) -> CellIndex:
        """
        Cell containing ``point``.

        Truncates ``(coord - origin) / cell_size`` toward zero. Points left of
        or below the origin are a caller error and raise GridIndexError while
        index checks are on; the result is not range-checked on the upper side.
        """
        self._require_setup()
        rel_x = point.x - self.project_extent.x
        rel_y = point.y - self.project_extent.y
        if self.index_checks and (rel_x < 0 or rel_y < 0):
            raise GridIndexError(f"{self.name}: point ({point.x}, {point.y}) lies before the grid origin")
        return CellIndex(int(rel_x / self.cell_size), int(rel_y / self.cell_size))

    def flat_index_of(self, point: Point2D) -> int:
        cell = self.cell_index_of(point)
        return self.flat_index(cell.x, cell.y)

    def cell_centroid(self, cell: Tuple[int, int]) -> Point2D:
        x, y = cell
        return Point2D(self.project_extent.x + (x + 0.5) * self.cell_size,
                       self.project_extent.y + (y + 0.5) * self.cell_size)

    def cell_extent(self, cell: Tuple[int, int]) -> Extent:
        x, y = cell
        return Extent(self.project_extent.x + x * self.cell_size,
                      self.project_extent.y + y * self.cell_size,
                      self.cell_size, self.cell_size)

    def contains_point(self, point: Point2D) -> bool:
        return self.project_extent.contains(point)

    def contains_cell(self, x: int, y: int) -> bool:
        return 0 <= x < self.cells_x and 0 <= y < self.cells_y

    def clamp_cell(self, cell: Tuple[int, int]) -> CellIndex:
        x, y = cell
        return CellIndex(min(max(x, 0), self.cells_x - 1),
                         min(max(y, 0), self.cells_y - 1))

    def cell_rect_of(self, extent: Extent) -> CellRect:
        """
        Cells overlapping ``extent``.

        Raises:
            GridExtentError: if the extent reaches beyond the grid
        """
        self._require_setup()
        origin = self.project_extent
        rel_left = (extent.left - origin.x) / self.cell_size
        rel_bottom = (extent.bottom - origin.y) / self.cell_size
        rel_right = (extent.right - origin.x) / self.cell_size
        rel_top = (extent.top - origin.y) / self.cell_size

        if rel_left < -EDGE_EPSILON or rel_bottom < -EDGE_EPSILON:
            raise GridExtentError(f"{self.name}: extent {extent.bounds} starts outside the grid")

        first_x = max(int(rel_left), 0)
        first_y = max(int(rel_bottom), 0)
        last_x = max(int(math.ceil(rel_right - EDGE_EPSILON)) - 1, first_x)
        last_y = max(int(math.ceil(rel_top - EDGE_EPSILON)) - 1, first_y)

        if last_x >= self.cells_x or last_y >= self.cells_y:
            raise GridExtentError(f"{self.name}: extent {extent.bounds} ends outside the grid")
        return CellRect.from_corners(CellIndex(first_x, first_y), CellIndex(last_x, last_y))

    def center_to_center_distance(self, a: Tuple[int, int], b: Tuple[int, int]) -> float:
        """Metric distance between the centroids of two cells."""
        return math.hypot(a[0] - b[0], a[1] - b[1]) * self.cell_size

    def coarse_flat_index(self, index: int, factor: int) -> int:
        """Flat index in an aligned grid whose cells are ``factor`` times larger."""
        x, y = self.cell_index_from_flat(index)
        coarse_cells_x = -(-self.cells_x // factor)
        return (y // factor) * coarse_cells_x + x // factor

    # ------------------------------------------------------------- accessors

    def _resolve(self, key: CellKey) -> int:
        self._require_setup()

        if isinstance(key, (int, np.integer)):
            index = int(key)
            if index < 0 or index >= self.count:
                raise GridIndexError(f"{self.name}: flat index {index} outside 0..{self.count - 1}")
            return index

        if isinstance(key, Point2D):
            if self.index_checks and not self.contains_point(key):
                raise GridIndexError(f"{self.name}: point ({key.x}, {key.y}) outside {self.project_extent.bounds}")
            x, y = self.cell_index_of(key)
        else:
            x, y = key

        if self.index_checks and not self.contains_cell(x, y):
            raise GridIndexError(f"{self.name}: cell ({x}, {y}) outside {self.cells_x}x{self.cells_y}")
        index = self.flat_index(x, y)
        if index < 0 or index >= self.count:
            raise GridIndexError(f"{self.name}: cell ({x}, {y}) maps to invalid index {index}")
        return index

    def __getitem__(self, key: CellKey):
        return self._data[self._resolve(key)]

    def __setitem__(self, key: CellKey, value):
        self._data[self._resolve(key)] = value

    def get_coarse(self, x: int, y: int, divisor: int):
        """Read with an index of an aligned grid whose cells are ``divisor`` times smaller."""
        return self[x // divisor, y // divisor]

    # ---------------------------------------------------- whole-grid operations

    def fill(self, value):
        self._require_setup()
        self._data[:] = value

    def fill_region(self, region: Union[CellRect, Extent], value):
        """Assign ``value`` to every cell of a cell rectangle or metric extent."""
        rect = self.cell_rect_of(region) if isinstance(region, Extent) else region
        if not (self.contains_cell(rect.x, rect.y) and
                self.contains_cell(rect.right - 1, rect.top - 1)):
            raise GridExtentError(f"{self.name}: region {rect} outside the grid")
        self.as_array()[rect.y:rect.top, rect.x:rect.right] = value

    def copy_from(self, other: 'UniformGrid'):
        """Copy cell values from a grid with identical cell size and dimensions."""
        self._require_setup()
        other._require_setup()
        if (other.cell_size != self.cell_size or other.cells_x != self.cells_x
                or other.cells_y != self.cells_y):
            raise GridMismatchError(
                f"Cannot copy {other.name} ({other.cells_x}x{other.cells_y} @ {other.cell_size} m) "
                f"into {self.name} ({self.cells_x}x{self.cells_y} @ {self.cell_size} m)"
            )
        self._data[:] = other._data

    def sum(self):
        self._require_setup()
        return self._data.sum()

    def max(self):
        self._require_setup()
        return self._data.max()

    def min(self):
        self._require_setup()
        return self._data.min()

    def limit(self, min_value, max_value):
        """Clamp every cell into ``[min_value, max_value]``."""
        self._require_setup()
        np.clip(self._data, min_value, max_value, out=self._data)

    def multiply(self, factor):
        self._require_setup()
        self._data *= factor

    def cell_index_of_value(self, value) -> CellIndex:
        """First cell (in flat order) holding ``value``, ``(-1, -1)`` if none."""
        self._require_setup()
        hits = np.flatnonzero(self._data == value)
        if hits.size == 0:
            return CellIndex(-1, -1)
        return self.cell_index_from_flat(int(hits[0]))

    # ----------------------------------------------------------------- export

    def to_dataframe(self) -> pd.DataFrame:
        """Long-format table of cell centroids and values in flat order."""
        self._require_setup()
        xs = self.project_extent.x + (np.arange(self.cells_x) + 0.5) * self.cell_size
        ys = self.project_extent.y + (np.arange(self.cells_y) + 0.5) * self.cell_size
        grid_x, grid_y = np.meshgrid(xs, ys)
        return pd.DataFrame({
            'x_m': grid_x.ravel(),
            'y_m': grid_y.ravel(),
            'value': self._data.copy(),
        })

    def to_csv(self, path: Union[str, Path]):
        frame = self.to_dataframe()
        frame.to_csv(path, index=False)
        logger.info(f"Wrote {len(frame)} cells of {self.name} to {path}")

    def __repr__(self) -> str:
        if not self.is_setup():
            return f"UniformGrid(name={self.name!r}, not set up)"
        return (f"UniformGrid(name={self.name!r}, cells={self.cells_x}x{self.cells_y}, "
                f"cell_size={self.cell_size}, extent={self.project_extent.bounds})")
