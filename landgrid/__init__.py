"""Spatial raster and polygon-indexing engine for forest landscape simulation."""

__version__ = '0.1.0'
