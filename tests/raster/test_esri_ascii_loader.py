"""Tests for the ESRI ASCII raster loader."""

import numpy as np
import pytest

from landgrid.abstractions.exceptions import RasterFormatError
from landgrid.raster import EsriAsciiRasterLoader


@pytest.fixture
def loader():
    return EsriAsciiRasterLoader()


class TestHeaderParsing:
    """Test header keys, order and case handling."""

    def test_basic_raster(self, loader, asc_writer):
        """Test a well-formed 3 x 2 raster."""
        path = asc_writer('basic.asc', [[1, 2, 3], [4, 5, 6]], cell_size=5.0,
                          xllcorner=100.0, yllcorner=200.0)

        raster = loader.load_from_file(path)

        assert raster.columns == 3
        assert raster.rows == 2
        assert raster.cell_size == 5.0
        assert raster.header.origin_x == 100.0
        assert raster.header.origin_y == 200.0
        assert raster.no_data_value == -9999.0
        assert raster.values.tolist() == [[1, 2, 3], [4, 5, 6]]
        assert raster.source == path

    def test_upper_case_keys(self, loader, asc_writer):
        path = asc_writer('upper.asc', [[1, 2]], header_case='upper')

        assert loader.load_from_file(path).columns == 2

    def test_keys_in_any_order(self, loader, test_data_dir):
        """Test that header keys may appear in any order and mixed case."""
        path = test_data_dir / 'shuffled.asc'
        path.write_text(
            "CellSize 2\n"
            "NODATA_value -1\n"
            "yllcorner 10\n"
            "nrows 1\n"
            "XLLCORNER 5\n"
            "ncols 2\n"
            "7 8\n"
        )

        raster = loader.load_from_file(path)

        assert raster.header.bounds == (5.0, 10.0, 9.0, 12.0)
        assert raster.no_data_value == -1.0

    def test_missing_nodata_uses_default(self, loader, asc_writer):
        path = asc_writer('nonodata.asc', [[1]], nodata_value=None)

        assert loader.load_from_file(path).no_data_value == -9999.0

    def test_default_nodata_from_config(self, test_config, asc_writer):
        """Test that the fallback no-data value is read from configuration."""
        path = asc_writer('cfg.asc', [[1]], nodata_value=None)

        raster = EsriAsciiRasterLoader(test_config).load_from_file(path)

        assert raster.no_data_value == -1.0

    def test_comments_and_blank_lines(self, loader, test_data_dir):
        path = test_data_dir / 'comments.asc'
        path.write_text(
            "# exported from a GIS\n"
            "ncols 2\n"
            "nrows 2\n"
            "\n"
            "xllcorner 0\n"
            "yllcorner 0\n"
            "cellsize 1\n"
            "# data follows\n"
            "1 2\n"
            "\n"
            "3 4\n"
        )

        assert loader.load_from_file(path).values.tolist() == [[1, 2], [3, 4]]

    def test_negative_first_value(self, loader, asc_writer):
        """Test that a data row starting with a negative number ends the header."""
        path = asc_writer('negative.asc', [[-3.5, 2], [1, -9999]])

        raster = loader.load_from_file(path)

        assert raster.values[0, 0] == -3.5
        assert raster.min_value == -3.5

    def test_extract_metadata(self, loader, asc_writer):
        path = asc_writer('meta.asc', [[1, 2, 3]], cell_size=25.0)

        header = loader.extract_metadata(path)

        assert header.columns == 3
        assert header.cell_size == 25.0

    def test_can_handle(self, loader):
        assert loader.can_handle('dem.asc')
        assert loader.can_handle('STANDS.ASC')
        assert not loader.can_handle('dem.tif')


class TestMalformedRasters:
    """Test that malformed files raise RasterFormatError with a location."""

    def _write(self, test_data_dir, text):
        path = test_data_dir / 'bad.asc'
        path.write_text(text)
        return path

    def test_missing_file(self, loader, test_data_dir):
        with pytest.raises(RasterFormatError) as exc_info:
            loader.load_from_file(test_data_dir / 'absent.asc')

        assert isinstance(exc_info.value.original_exception, OSError)

    def test_missing_key(self, loader, test_data_dir):
        path = self._write(test_data_dir, "ncols 1\nnrows 1\nxllcorner 0\nyllcorner 0\n1\n")

        with pytest.raises(RasterFormatError, match="cellsize"):
            loader.load_from_file(path)

    def test_unknown_key(self, loader, test_data_dir):
        path = self._write(test_data_dir, "ncols 1\nnrows 1\nxllcenter 0\n")

        with pytest.raises(RasterFormatError) as exc_info:
            loader.load_from_file(path)

        assert exc_info.value.line == 3

    def test_duplicate_key(self, loader, test_data_dir):
        path = self._write(test_data_dir, "ncols 1\nNCOLS 2\n")

        with pytest.raises(RasterFormatError, match="Duplicate"):
            loader.load_from_file(path)

    def test_non_numeric_header(self, loader, test_data_dir):
        path = self._write(test_data_dir, "ncols abc\n")

        with pytest.raises(RasterFormatError):
            loader.load_from_file(path)

    def test_fractional_dimension(self, loader, test_data_dir):
        path = self._write(test_data_dir,
                           "ncols 1.5\nnrows 1\nxllcorner 0\nyllcorner 0\ncellsize 1\n1\n")

        with pytest.raises(RasterFormatError, match="integer"):
            loader.load_from_file(path)

    @pytest.mark.parametrize("cell_size", [0, -10])
    def test_non_positive_cell_size(self, loader, asc_writer, cell_size):
        path = asc_writer('cs.asc', [[1]], cell_size=cell_size)

        with pytest.raises(RasterFormatError):
            loader.load_from_file(path)

    def test_short_row(self, loader, asc_writer):
        """Test that a row with too few values reports its line."""
        path = asc_writer('short.asc', [[1, 2, 3], [4, 5]])

        with pytest.raises(RasterFormatError) as exc_info:
            loader.load_from_file(path)

        assert exc_info.value.line == 8

    def test_too_many_rows(self, loader, test_data_dir):
        path = self._write(test_data_dir,
                           "ncols 1\nnrows 1\nxllcorner 0\nyllcorner 0\ncellsize 1\n1\n2\n")

        with pytest.raises(RasterFormatError, match="More than"):
            loader.load_from_file(path)

    def test_too_few_rows(self, loader, test_data_dir):
        path = self._write(test_data_dir,
                           "ncols 1\nnrows 3\nxllcorner 0\nyllcorner 0\ncellsize 1\n1\n2\n")

        with pytest.raises(RasterFormatError, match="found 2"):
            loader.load_from_file(path)

    def test_non_numeric_value(self, loader, test_data_dir):
        """Test that the offending column is reported."""
        path = self._write(test_data_dir,
                           "ncols 3\nnrows 1\nxllcorner 0\nyllcorner 0\ncellsize 1\n1 2 x\n")

        with pytest.raises(RasterFormatError) as exc_info:
            loader.load_from_file(path)

        assert exc_info.value.line == 6
        assert exc_info.value.column == 3
        assert isinstance(exc_info.value.original_exception, ValueError)

    def test_error_message_names_file(self, loader, test_data_dir):
        path = self._write(test_data_dir, "ncols 1\n")

        with pytest.raises(RasterFormatError) as exc_info:
            loader.load_from_file(path)

        assert 'bad.asc' in str(exc_info.value)


class TestLoadedValues:
    """Test value statistics of a loaded raster."""

    def test_range_excludes_nodata(self, loader, asc_writer):
        path = asc_writer('range.asc', [[-9999, 5], [12, 7]])

        raster = loader.load_from_file(path)

        assert raster.min_value == 5.0
        assert raster.max_value == 12.0
        assert np.isclose(raster.values[0, 0], -9999.0)
