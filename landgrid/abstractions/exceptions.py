"""Exceptions raised by grid setup, raster loading and polygon indexing."""

from typing import Optional


class LandgridError(Exception):
    """Base landgrid error."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.original_exception = original_exception


class ConfigurationError(LandgridError):
    """Raised when setup parameters or input files are unusable."""
    pass


class GridConfigurationError(ConfigurationError):
    """Raised when a grid is set up with a non-positive cell size or extent."""
    pass


class GridMismatchError(ConfigurationError):
    """Raised when two grids are expected to share dimensions or alignment but don't."""
    pass


class GridExtentError(ConfigurationError):
    """Raised when a window or region reaches beyond the grid."""
    pass


class RasterFormatError(ConfigurationError):
    """Raised when a raster file cannot be parsed."""
    def __init__(self, message: str, path: Optional[str] = None,
                 line: Optional[int] = None, column: Optional[int] = None,
                 original_exception: Optional[Exception] = None):
        location = []
        if path is not None:
            location.append(str(path))
        if line is not None:
            location.append(f"line {line}")
        if column is not None:
            location.append(f"column {column}")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message, original_exception)
        self.path = path
        self.line = line
        self.column = column


class GridNotSetupError(LandgridError):
    """Raised when an unconfigured grid is accessed."""
    pass


class GridIndexError(LandgridError, IndexError):
    """Raised when a cell index or point lies outside the grid."""
    pass


class DataQualityError(LandgridError):
    """Raised when input data has holes that a computation cannot bridge."""
    pass


class UnknownPolygonError(LandgridError, KeyError):
    """Raised when a polygon ID has no entry in the spatial index."""
    def __init__(self, polygon_id: int):
        super().__init__(f"Polygon {polygon_id} is not in the index")
        self.polygon_id = polygon_id

    def __str__(self) -> str:
        return self.args[0]
