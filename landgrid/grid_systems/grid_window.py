"""Cursor over a rectangular window of a UniformGrid."""

from typing import Any, Iterator, List, Optional, Tuple

from ..abstractions.exceptions import GridExtentError, GridIndexError
from ..abstractions.types import CellIndex, CellRect, Extent, Point2D
from .uniform_grid import UniformGrid

INVALID_POSITION = -1

# (dx, dy) offsets in neighbor output order
NEIGHBORS_4 = ((0, 1), (1, 0), (-1, 0), (0, -1))                     # N, E, W, S
NEIGHBORS_8 = NEIGHBORS_4 + ((1, 1), (-1, 1), (1, -1), (-1, -1))     # + NE, NW, SE, SW


class GridWindow:
    """
    Row-major cursor over the cells of a grid window.

    The cursor starts before the first cell; ``move_next()`` walks the
    window south-to-north, west-to-east and returns False once the last
    cell has been passed:

        window = GridWindow.from_extent(grid, Extent(20, 20, 30, 10))
        while window.move_next():
            window.current += 1.0

    Neighbor lookups may reach outside the window but never outside the
    grid. The window holds a plain reference to the grid and must be
    re-created if the grid is set up again.
    """

    def __init__(self, grid: UniformGrid, rect: Optional[CellRect] = None):
        grid._require_setup()
        if rect is None:
            rect = CellRect(0, 0, grid.cells_x, grid.cells_y)
        if rect.width < 1 or rect.height < 1:
            raise GridExtentError(f"Window {rect} on {grid.name} is empty")
        if not (grid.contains_cell(rect.x, rect.y) and
                grid.contains_cell(rect.right - 1, rect.top - 1)):
            raise GridExtentError(
                f"Window {rect} reaches beyond {grid.name} ({grid.cells_x}x{grid.cells_y})"
            )

        self.grid = grid
        self.rect = rect
        self.first_index = grid.flat_index(rect.x, rect.y)
        self.last_index = grid.flat_index(rect.right - 1, rect.top - 1)
        self._columns_in_window = rect.width
        self._columns_not_in_window = grid.cells_x - rect.width
        self.reset()

    @classmethod
    def from_cell_rect(cls, grid: UniformGrid, rect: CellRect) -> 'GridWindow':
        return cls(grid, rect)

    @classmethod
    def from_extent(cls, grid: UniformGrid, extent: Extent) -> 'GridWindow':
        """Window over all cells overlapping a metric extent."""
        return cls(grid, grid.cell_rect_of(extent))

    # --------------------------------------------------------------- movement

    def reset(self):
        """Move back before the first cell."""
        self._index = INVALID_POSITION
        self._column = 0
        self._exhausted = False

    def move_next(self) -> bool:
        if self._exhausted:
            return False

        if self._index == INVALID_POSITION:
            self._index = self.first_index
            self._column = 0
        else:
            self._index += 1
            self._column += 1
            if self._column >= self._columns_in_window:
                self._index += self._columns_not_in_window
                self._column = 0

        if self._index > self.last_index:
            self._index = INVALID_POSITION
            self._exhausted = True
            return False
        return True

    def set_position(self, cell: Tuple[int, int]) -> bool:
        """
        Jump to a cell of the window; returns False and invalidates the cursor
        when the cell is outside the window.
        """
        x, y = cell
        if not self.rect.contains(x, y):
            self._index = INVALID_POSITION
            return False
        self._index = self.grid.flat_index(x, y)
        self._column = x - self.rect.x
        self._exhausted = False
        return True

    def is_valid(self) -> bool:
        return 0 <= self._index < self.grid.count

    # ---------------------------------------------------------------- current

    def _require_position(self):
        if not self.is_valid():
            raise GridIndexError(f"Window on {self.grid.name} is not positioned on a cell")

    @property
    def current_index(self) -> int:
        """Flat index of the current cell, ``-1`` when not positioned."""
        return self._index

    @property
    def current(self):
        self._require_position()
        return self.grid.data[self._index]

    @current.setter
    def current(self, value):
        self._require_position()
        self.grid.data[self._index] = value

    @property
    def current_cell(self) -> CellIndex:
        self._require_position()
        return self.grid.cell_index_from_flat(self._index)

    def current_coordinate(self) -> Point2D:
        """Centroid of the current cell in project coordinates."""
        return self.grid.cell_centroid(self.current_cell)

    # -------------------------------------------------------------- neighbors

    def _neighbors(self, offsets, out: Optional[List[Any]], default: Any) -> List[Any]:
        x, y = self.current_cell
        grid = self.grid
        data = grid.data
        values = out if out is not None else [default] * len(offsets)
        for slot, (dx, dy) in enumerate(offsets):
            nx, ny = x + dx, y + dy
            values[slot] = data[ny * grid.cells_x + nx] if grid.contains_cell(nx, ny) else default
        return values

    def neighbors4(self, out: Optional[List[Any]] = None, default: Any = None) -> List[Any]:
        """Values of the N, E, W, S neighbors; ``default`` outside the grid."""
        return self._neighbors(NEIGHBORS_4, out, default)

    def neighbors8(self, out: Optional[List[Any]] = None, default: Any = None) -> List[Any]:
        """Values of the N, E, W, S, NE, NW, SE, SW neighbors; ``default`` outside the grid."""
        return self._neighbors(NEIGHBORS_8, out, default)

    # -------------------------------------------------------------- iteration

    def __iter__(self) -> Iterator[Tuple[int, Any]]:
        """Restart the cursor and yield ``(flat_index, value)`` for each window cell."""
        self.reset()
        while self.move_next():
            yield self._index, self.grid.data[self._index]

    def __len__(self) -> int:
        return self.rect.count

    def __repr__(self) -> str:
        return f"GridWindow(grid={self.grid.name!r}, rect={self.rect}, index={self._index})"
