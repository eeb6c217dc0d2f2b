"""Tests for the grid window cursor."""

import numpy as np
import pytest

from landgrid.abstractions.exceptions import GridExtentError, GridIndexError
from landgrid.abstractions.types import CellIndex, CellRect, Extent, Point2D
from landgrid.grid_systems import INVALID_POSITION, GridWindow, UniformGrid


@pytest.fixture
def numbered_grid():
    """4 x 3 grid of 10 m cells whose values are their flat indices."""
    grid = UniformGrid(dtype=np.int64, name='numbered').setup_cells(4, 3, 10.0)
    grid.data[:] = np.arange(grid.count)
    return grid


class TestWindowTraversal:
    """Test cursor movement over full and partial windows."""

    def test_full_grid_order(self, numbered_grid):
        """Test that a full window visits every cell in flat order."""
        window = GridWindow(numbered_grid)
        visited = []
        while window.move_next():
            visited.append(window.current_index)

        assert visited == list(range(12))

    def test_sub_window_row_major(self, numbered_grid):
        """Test that rows of a sub-window skip the columns outside it."""
        window = GridWindow(numbered_grid, CellRect(1, 1, 2, 2))

        visited = [index for index, _ in window]

        assert visited == [5, 6, 9, 10]
        assert len(window) == 4

    def test_single_cell_window(self, numbered_grid):
        window = GridWindow(numbered_grid, CellRect(3, 2, 1, 1))

        assert window.move_next()
        assert window.current == 11
        assert not window.move_next()

    def test_exhausted_stays_exhausted(self, numbered_grid):
        """Test that further move_next calls keep returning False."""
        window = GridWindow(numbered_grid, CellRect(0, 0, 1, 2))
        while window.move_next():
            pass

        assert not window.move_next()
        assert not window.move_next()
        assert not window.is_valid()
        assert window.current_index == INVALID_POSITION

    def test_reset_restarts(self, numbered_grid):
        window = GridWindow(numbered_grid, CellRect(2, 0, 2, 1))
        first_pass = [index for index, _ in window]
        window.reset()

        assert window.move_next()
        assert window.current_index == first_pass[0]

    def test_iteration_yields_values(self, numbered_grid):
        numbered_grid[1, 0] = 99
        window = GridWindow(numbered_grid, CellRect(0, 0, 2, 1))

        assert list(window) == [(0, 0), (1, 99)]

    def test_from_extent(self, numbered_grid):
        """Test that a metric extent selects every overlapping cell."""
        window = GridWindow.from_extent(numbered_grid, Extent(15.0, 5.0, 10.0, 10.0))

        assert window.rect == CellRect(1, 0, 2, 2)
        assert [index for index, _ in window] == [1, 2, 5, 6]

    def test_from_cell_rect(self, numbered_grid):
        window = GridWindow.from_cell_rect(numbered_grid, CellRect(0, 2, 4, 1))

        assert [value for _, value in window] == [8, 9, 10, 11]


class TestWindowValidation:
    """Test rejection of windows that don't fit the grid."""

    def test_window_beyond_grid(self, numbered_grid):
        with pytest.raises(GridExtentError):
            GridWindow(numbered_grid, CellRect(3, 0, 2, 1))

    def test_empty_window(self, numbered_grid):
        with pytest.raises(GridExtentError):
            GridWindow(numbered_grid, CellRect(0, 0, 0, 1))

    def test_extent_outside_grid(self, numbered_grid):
        with pytest.raises(GridExtentError):
            GridWindow.from_extent(numbered_grid, Extent(30.0, 0.0, 20.0, 10.0))

    def test_current_before_first_move(self, numbered_grid):
        """Test that reading the current cell requires a position."""
        window = GridWindow(numbered_grid)

        with pytest.raises(GridIndexError):
            window.current


class TestWindowPositioning:
    """Test jumping to cells and writing through the cursor."""

    def test_set_position(self, numbered_grid):
        window = GridWindow(numbered_grid)

        assert window.set_position((2, 1))
        assert window.current == 6
        assert window.current_cell == CellIndex(2, 1)
        assert window.current_coordinate() == Point2D(25.0, 15.0)

    def test_set_position_outside(self, numbered_grid):
        """Test that an out-of-grid position invalidates the cursor."""
        window = GridWindow(numbered_grid)

        assert not window.set_position((4, 0))
        assert window.current_index == INVALID_POSITION
        assert not window.is_valid()

    def test_set_position_outside_window(self, numbered_grid):
        """Test that a grid cell outside the window is rejected and iteration stays inside."""
        window = GridWindow(numbered_grid, CellRect(1, 1, 2, 2))

        assert not window.set_position((0, 1))
        assert not window.is_valid()
        assert window.set_position((2, 1))
        assert window.move_next()
        assert window.current_cell == CellIndex(1, 2)
        assert window.move_next()
        assert window.current_cell == CellIndex(2, 2)
        assert not window.move_next()

    def test_write_through(self, numbered_grid):
        window = GridWindow(numbered_grid, CellRect(0, 0, 2, 2))
        while window.move_next():
            window.current = -1

        assert numbered_grid[0, 0] == -1
        assert numbered_grid[1, 1] == -1
        assert numbered_grid[2, 0] == 2


class TestNeighbors:
    """Test 4- and 8-neighborhoods."""

    def test_neighbors4_interior(self, numbered_grid):
        """Test N, E, W, S order."""
        window = GridWindow(numbered_grid)
        window.set_position((1, 1))

        assert window.neighbors4() == [9, 6, 4, 1]

    def test_neighbors8_interior(self, numbered_grid):
        """Test that the diagonals follow the 4-neighbors as NE, NW, SE, SW."""
        window = GridWindow(numbered_grid)
        window.set_position((1, 1))

        assert window.neighbors8() == [9, 6, 4, 1, 10, 8, 2, 0]

    def test_corner_uses_default(self, numbered_grid):
        """Test that neighbors outside the grid take the default value."""
        window = GridWindow(numbered_grid)
        window.set_position((0, 0))

        assert window.neighbors4(default=-1) == [4, 1, -1, -1]
        assert window.neighbors8(default=-1) == [4, 1, -1, -1, 5, -1, -1, -1]

    def test_neighbors_outside_window(self, numbered_grid):
        """Test that neighbors may lie outside the window but inside the grid."""
        window = GridWindow(numbered_grid, CellRect(1, 1, 1, 1))
        window.move_next()

        assert window.neighbors4() == [9, 6, 4, 1]

    def test_no_row_wrap(self, numbered_grid):
        """Test that the east neighbor of the last column is not the next row's first cell."""
        window = GridWindow(numbered_grid)
        window.set_position((3, 1))

        assert window.neighbors4(default=None)[1] is None

    def test_output_buffer_reused(self, numbered_grid):
        window = GridWindow(numbered_grid)
        window.set_position((2, 2))
        out = [0] * 4

        result = window.neighbors4(out=out, default=-1)

        assert result is out
        assert out == [-1, 11, 9, 6]
