"""Raster input: file loaders and the in-memory raw raster."""

from .raw_raster import RawRaster, RasterHeader, OUT_OF_RANGE
from .loaders import EsriAsciiRasterLoader

__all__ = ['RawRaster', 'RasterHeader', 'OUT_OF_RANGE', 'EsriAsciiRasterLoader']
