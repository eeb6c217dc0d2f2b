"""Raster file loaders."""

from .base_loader import BaseRasterLoader
from .esri_ascii_loader import EsriAsciiRasterLoader

__all__ = ['BaseRasterLoader', 'EsriAsciiRasterLoader']
