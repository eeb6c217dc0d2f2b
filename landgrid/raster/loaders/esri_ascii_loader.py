# landgrid/raster/loaders/esri_ascii_loader.py
"""ESRI ASCII grid (.asc) reader."""

from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from ...abstractions.exceptions import RasterFormatError
from ...config import Config
from ...infrastructure.logging import get_logger, log_operation
from ..raw_raster import RasterHeader, RawRaster
from .base_loader import BaseRasterLoader

logger = get_logger(__name__)

REQUIRED_KEYS = ('ncols', 'nrows', 'xllcorner', 'yllcorner', 'cellsize')
OPTIONAL_KEYS = ('nodata_value',)
INTEGER_KEYS = ('ncols', 'nrows')


def _starts_data(token: str) -> bool:
    if token.startswith('-'):
        return True
    try:
        float(token)
    except ValueError:
        return False
    return True


class EsriAsciiRasterLoader(BaseRasterLoader):
    """
    Loader for ESRI ASCII rasters.

    Header lines are ``key value`` pairs (``ncols``, ``nrows``, ``xllcorner``,
    ``yllcorner``, ``cellsize`` and optionally ``nodata_value``) in any order
    and any case. The header ends at the first line starting with a number;
    then ``nrows`` lines of ``ncols`` values follow, northern row first.
    Lines starting with the configured comment prefix are skipped.
    """

    def __init__(self, config: Optional[Config] = None):
        super().__init__(config)
        self.comment_prefix = self.config.get('raster.comment_prefix', '#')

    def can_handle(self, file_path: Path) -> bool:
        return Path(file_path).suffix.lower() in ('.asc', '.txt')

    def _content_lines(self, handle) -> Iterator[Tuple[int, List[str]]]:
        for line_number, line in enumerate(handle, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith(self.comment_prefix):
                continue
            yield line_number, stripped.split()

    def _parse_header(self, lines: Iterator[Tuple[int, List[str]]],
                      path: Path) -> Tuple[RasterHeader, Optional[Tuple[int, List[str]]]]:
        """Consume header lines; returns the header and the first data line (if any)."""
        values: Dict[str, float] = {}
        first_data_line = None

        for line_number, tokens in lines:
            if _starts_data(tokens[0]):
                first_data_line = (line_number, tokens)
                break

            key = tokens[0].lower()
            if key not in REQUIRED_KEYS and key not in OPTIONAL_KEYS:
                raise RasterFormatError(f"Unknown header key '{tokens[0]}'", path, line_number)
            if key in values:
                raise RasterFormatError(f"Duplicate header key '{tokens[0]}'", path, line_number)
            if len(tokens) != 2:
                raise RasterFormatError(f"Header key '{tokens[0]}' needs exactly one value",
                                        path, line_number)
            try:
                value = float(tokens[1])
            except ValueError as e:
                raise RasterFormatError(f"Non-numeric value '{tokens[1]}' for '{tokens[0]}'",
                                        path, line_number, original_exception=e)
            if key in INTEGER_KEYS and not value.is_integer():
                raise RasterFormatError(f"'{tokens[0]}' must be an integer, got {tokens[1]}",
                                        path, line_number)
            values[key] = value

        missing = [key for key in REQUIRED_KEYS if key not in values]
        if missing:
            raise RasterFormatError(f"Missing header keys: {', '.join(missing)}", path)

        header = RasterHeader(
            columns=int(values['ncols']),
            rows=int(values['nrows']),
            origin_x=values['xllcorner'],
            origin_y=values['yllcorner'],
            cell_size=values['cellsize'],
            no_data_value=values.get('nodata_value', self.default_nodata_value),
        )
        if header.columns <= 0 or header.rows <= 0:
            raise RasterFormatError(f"Raster dimensions must be positive, got "
                                    f"{header.columns}x{header.rows}", path)
        if header.cell_size <= 0:
            raise RasterFormatError(f"Cell size must be positive, got {header.cell_size}", path)
        return header, first_data_line

    def _open(self, path: Path):
        try:
            return open(path, 'r')
        except OSError as e:
            raise RasterFormatError(f"Cannot open raster: {e.strerror or e}", path,
                                    original_exception=e)

    def extract_metadata(self, file_path: Union[str, Path]) -> RasterHeader:
        path = Path(file_path)
        with self._open(path) as handle:
            header, _ = self._parse_header(self._content_lines(handle), path)
        return header

    @log_operation("load_esri_ascii", log_args=True)
    def load_from_file(self, file_path: Union[str, Path]) -> RawRaster:
        """
        Load an ESRI ASCII raster.

        Raises:
            RasterFormatError: on unreadable files, malformed headers, non-numeric
                values or rows/columns that don't match the header
        """
        path = Path(file_path)
        with self._open(path) as handle:
            lines = self._content_lines(handle)
            header, first_data_line = self._parse_header(lines, path)
            values = np.empty((header.rows, header.columns), dtype=np.float64)

            def data_lines():
                if first_data_line is not None:
                    yield first_data_line
                yield from lines

            row = 0
            for line_number, tokens in data_lines():
                if row >= header.rows:
                    raise RasterFormatError(f"More than nrows={header.rows} data rows",
                                            path, line_number)
                if len(tokens) != header.columns:
                    raise RasterFormatError(
                        f"Expected {header.columns} values, found {len(tokens)}",
                        path, line_number
                    )
                values[row] = self._parse_row(tokens, path, line_number)
                row += 1

        if row < header.rows:
            raise RasterFormatError(f"Expected {header.rows} data rows, found {row}", path)

        raster = RawRaster(header, values, source=path)
        logger.info(
            f"Loaded {path.name}: {header.columns}x{header.rows} cells of {header.cell_size} m, "
            f"values {raster.min_value}..{raster.max_value}",
            extra={'context': {'raster': str(path), 'bounds': header.bounds}}
        )
        return raster

    @staticmethod
    def _parse_row(tokens: List[str], path: Path, line_number: int) -> np.ndarray:
        try:
            return np.array(tokens, dtype=np.float64)
        except ValueError as e:
            for column, token in enumerate(tokens, start=1):
                try:
                    float(token)
                except ValueError:
                    raise RasterFormatError(f"Non-numeric value '{token}'",
                                            path, line_number, column, original_exception=e)
            raise RasterFormatError("Unparseable data row", path, line_number,
                                    original_exception=e)
