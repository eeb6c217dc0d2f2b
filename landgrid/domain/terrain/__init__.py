"""Terrain layers."""

from .dem import DigitalElevationModel

__all__ = ['DigitalElevationModel']
