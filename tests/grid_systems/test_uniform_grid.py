"""Tests for the flat-buffer uniform grid."""

import numpy as np
import pandas as pd
import pytest

from landgrid.abstractions.exceptions import (
    GridConfigurationError, GridExtentError, GridIndexError,
    GridMismatchError, GridNotSetupError
)
from landgrid.abstractions.types import CellIndex, CellRect, Extent, Point2D
from landgrid.grid_systems import UniformGrid


@pytest.fixture
def grid():
    """10 x 5 grid of 10 m cells anchored at (100, 200)."""
    return UniformGrid(dtype=np.float64, name='test').setup(Extent(100.0, 200.0, 100.0, 50.0), 10.0)


class TestGridSetup:
    """Test setup, padding and buffer reuse."""

    def test_exact_extent(self, grid):
        """Test cell counts for an extent that is a multiple of the cell size."""
        assert grid.cells_x == 10
        assert grid.cells_y == 5
        assert grid.count == 50
        assert grid.project_extent == Extent(100.0, 200.0, 100.0, 50.0)

    def test_extent_is_padded_up(self):
        """Test that a partial cell at the right/top edge adds a whole cell."""
        grid = UniformGrid().setup(Extent(0.0, 0.0, 101.0, 95.0), 10.0)

        assert grid.cells_x == 11
        assert grid.cells_y == 10
        assert grid.project_extent.width == 110.0
        assert grid.project_extent.height == 100.0

    def test_coverage_never_smaller_than_request(self):
        """Test padding for awkward floating point cell sizes."""
        requested = Extent(0.0, 0.0, 0.7, 0.3)
        grid = UniformGrid().setup(requested, 0.1)

        assert grid.project_extent.right >= requested.right
        assert grid.project_extent.top >= requested.top
        assert grid.cells_x == 7
        assert grid.cells_y == 3

    @pytest.mark.parametrize("cell_size", [0.0, -2.0])
    def test_invalid_cell_size(self, cell_size):
        """Test that non-positive cell sizes are rejected."""
        with pytest.raises(GridConfigurationError):
            UniformGrid().setup(Extent(0, 0, 10, 10), cell_size)

    def test_invalid_cell_counts(self):
        """Test that zero cells per axis are rejected."""
        with pytest.raises(GridConfigurationError):
            UniformGrid().setup_cells(0, 5, 10.0)

    def test_empty_extent(self):
        """Test that an extent without area is rejected."""
        with pytest.raises(GridConfigurationError):
            UniformGrid().setup(Extent(0, 0, 0, 10), 1.0)

    def test_buffer_reused_when_shrinking(self, grid):
        """Test that a smaller setup keeps the existing allocation."""
        capacity = grid.capacity
        grid.setup_cells(3, 3, 10.0)

        assert grid.count == 9
        assert grid.capacity == capacity
        assert len(grid.data) == 9

    def test_buffer_grows_when_needed(self, grid):
        """Test that a larger setup reallocates."""
        grid.setup_cells(20, 20, 5.0)

        assert grid.capacity >= 400
        assert grid.project_extent.width == 100.0

    def test_setup_zeroes_cells(self, grid):
        """Test that reused buffers don't leak old values."""
        grid.fill(7.0)
        grid.setup_cells(2, 2, 10.0)

        assert grid.sum() == 0.0

    def test_setup_like(self, grid):
        """Test copying geometry from another grid."""
        other = UniformGrid(dtype=np.int32).setup_like(grid)

        assert other.project_extent == grid.project_extent
        assert other.cell_size == grid.cell_size


class TestUnconfiguredGrid:
    """Test that an empty grid fails fast."""

    def test_is_setup(self):
        assert not UniformGrid().is_setup()

    @pytest.mark.parametrize("key", [0, (0, 0), Point2D(1.0, 1.0)])
    def test_access_raises(self, key):
        """Test that every accessor form refuses an unconfigured grid."""
        with pytest.raises(GridNotSetupError):
            UniformGrid()[key]

    def test_operations_raise(self):
        grid = UniformGrid()
        with pytest.raises(GridNotSetupError):
            grid.fill(1.0)
        with pytest.raises(GridNotSetupError):
            grid.sum()
        with pytest.raises(GridNotSetupError):
            grid.cell_index_of(Point2D(0.0, 0.0))


class TestIndexConversion:
    """Test flat index, cell index and coordinate conversions."""

    def test_row_major_layout(self, grid):
        """Test that flat index = y * cells_x + x."""
        grid[3, 2] = 1.5

        assert grid[2 * grid.cells_x + 3] == 1.5
        assert grid.flat_index(3, 2) == 23
        assert grid.cell_index_from_flat(23) == CellIndex(3, 2)

    def test_point_access(self, grid):
        """Test reading through a metric point."""
        grid[3, 2] = 4.0

        assert grid[Point2D(135.0, 225.0)] == 4.0
        assert grid[CellIndex(3, 2)] == 4.0

    def test_centroid_round_trip(self, grid):
        """Test that every cell maps back from its centroid."""
        for index in range(grid.count):
            cell = grid.cell_index_from_flat(index)
            assert grid.cell_index_of(grid.cell_centroid(cell)) == cell
            assert grid.flat_index_of(grid.cell_centroid(cell)) == index

    def test_truncation_at_cell_edges(self, grid):
        """Test that a point on a west/south cell edge belongs to that cell."""
        assert grid.cell_index_of(Point2D(110.0, 210.0)) == CellIndex(1, 1)
        assert grid.cell_index_of(Point2D(109.999, 209.999)) == CellIndex(0, 0)

    def test_negative_relative_coordinate_rejected(self, grid):
        """Test that points before the origin violate the precondition."""
        with pytest.raises(GridIndexError):
            grid.cell_index_of(Point2D(99.5, 205.0))

    def test_cell_extent(self, grid):
        assert grid.cell_extent((2, 1)) == Extent(120.0, 210.0, 10.0, 10.0)

    def test_contains(self, grid):
        """Test half-open point containment and cell containment."""
        assert grid.contains_point(Point2D(100.0, 200.0))
        assert not grid.contains_point(Point2D(200.0, 220.0))
        assert not grid.contains_point(Point2D(150.0, 250.0))
        assert grid.contains_cell(9, 4)
        assert not grid.contains_cell(10, 0)
        assert not grid.contains_cell(-1, 0)

    def test_out_of_range_cell_raises(self, grid):
        with pytest.raises(GridIndexError):
            grid[10, 0]
        with pytest.raises(GridIndexError):
            grid[Point2D(250.0, 210.0)]

    def test_negative_flat_index_never_wraps(self, grid):
        """Test that negative flat indices are rejected even with checks off."""
        grid.index_checks = False
        with pytest.raises(GridIndexError):
            grid[-1]

    def test_unchecked_access(self, grid):
        """Test that disabling checks lets a row overflow reach the next row."""
        grid.index_checks = False
        grid[0, 1] = 2.0

        assert grid[10, 0] == 2.0

    def test_coarse_access(self, grid):
        """Test reading with a finer aligned index."""
        grid[2, 1] = 9.0

        assert grid.get_coarse(11, 5, 5) == 9.0

    def test_coarse_flat_index(self):
        """Test mapping a 2 m index into the aligned 10 m grid."""
        fine = UniformGrid().setup_cells(50, 50, 2.0)
        coarse = UniformGrid().setup_cells(10, 10, 10.0)

        index = fine.flat_index(23, 17)

        assert fine.coarse_flat_index(index, 5) == coarse.flat_index(4, 3)

    def test_center_to_center_distance(self, grid):
        assert grid.center_to_center_distance((0, 0), (3, 4)) == pytest.approx(50.0)

    def test_clamp_cell(self, grid):
        assert grid.clamp_cell((-3, 12)) == CellIndex(0, 4)


class TestWholeGridOperations:
    """Test fill, copy and reductions."""

    def test_fill_and_sum(self, grid):
        grid.fill(2.0)

        assert grid.sum() == 100.0
        assert grid.max() == 2.0

    def test_fill_region_cells(self, grid):
        """Test filling a cell rectangle."""
        grid.fill_region(CellRect(1, 1, 2, 3), 1.0)

        assert grid.sum() == 6.0
        assert grid[1, 1] == 1.0 and grid[2, 3] == 1.0
        assert grid[3, 1] == 0.0

    def test_fill_region_extent(self, grid):
        """Test filling all cells overlapping a metric extent."""
        grid.fill_region(Extent(105.0, 200.0, 10.0, 10.0), 1.0)

        assert grid.sum() == 2.0
        assert grid[0, 0] == 1.0 and grid[1, 0] == 1.0

    def test_fill_region_outside(self, grid):
        with pytest.raises(GridExtentError):
            grid.fill_region(CellRect(8, 0, 4, 1), 1.0)

    def test_copy_from(self, grid):
        other = UniformGrid(dtype=np.float64).setup_like(grid)
        other[4, 4] = 3.0

        grid.copy_from(other)

        assert grid[4, 4] == 3.0

    def test_copy_from_mismatch(self, grid):
        other = UniformGrid(dtype=np.float64).setup_cells(5, 5, 10.0)

        with pytest.raises(GridMismatchError):
            grid.copy_from(other)

    def test_limit_and_multiply(self, grid):
        grid[0, 0] = -5.0
        grid[1, 0] = 50.0
        grid.limit(0.0, 10.0)
        grid.multiply(2.0)

        assert grid[0, 0] == 0.0
        assert grid[1, 0] == 20.0

    def test_cell_index_of_value(self, grid):
        grid[6, 3] = 42.0

        assert grid.cell_index_of_value(42.0) == CellIndex(6, 3)
        assert grid.cell_index_of_value(-1.0) == CellIndex(-1, -1)

    def test_as_array_is_view(self, grid):
        """Test that the 2-D view writes through, row 0 south."""
        grid.as_array()[1, 3] = 8.0

        assert grid[3, 1] == 8.0
        assert grid.as_array().shape == (5, 10)

    def test_object_grid(self):
        """Test holding references in an object grid."""
        grid = UniformGrid(dtype=object).setup_cells(2, 2, 100.0)
        marker = object()
        grid[1, 1] = marker

        assert grid[0, 0] is None
        assert grid[Point2D(150.0, 150.0)] is marker


class TestGridExport:
    """Test tabular export."""

    def test_to_dataframe(self, grid):
        grid[0, 0] = 1.0
        frame = grid.to_dataframe()

        assert isinstance(frame, pd.DataFrame)
        assert len(frame) == grid.count
        assert list(frame.columns) == ['x_m', 'y_m', 'value']
        assert frame.iloc[0].tolist() == [105.0, 205.0, 1.0]
        assert frame.iloc[10].tolist() == [105.0, 215.0, 0.0]

    def test_to_csv(self, grid, test_data_dir):
        path = test_data_dir / 'grid.csv'
        grid.fill(1.0)
        grid.to_csv(path)

        frame = pd.read_csv(path)
        assert len(frame) == 50
        assert frame['value'].sum() == 50.0
