# landgrid/raster/loaders/base_loader.py
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from ...config import Config, config as default_config
from ..raw_raster import RasterHeader, RawRaster


class BaseRasterLoader(ABC):
    """Base class for loaders that read a whole single-band raster into memory."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or default_config
        self.default_nodata_value = float(self.config.get('raster.default_nodata_value', -9999.0))

    @abstractmethod
    def can_handle(self, file_path: Path) -> bool:
        """Check if this loader can handle the given file."""
        pass

    @abstractmethod
    def extract_metadata(self, file_path: Union[str, Path]) -> RasterHeader:
        """Read the georeferencing without loading cell values."""
        pass

    @abstractmethod
    def load_from_file(self, file_path: Union[str, Path]) -> RawRaster:
        """Load header and all cell values."""
        pass
