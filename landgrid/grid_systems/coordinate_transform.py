"""Translation and rotation between GIS raster coordinates and project coordinates."""

import math
from typing import Any, Tuple

from ..abstractions.types import Point2D


class CoordinateTransform:
    """Offset-then-rotate mapping from GIS space into the project system.

    GIS -> project subtracts the offsets, then rotates by ``rotation_angle``
    (degrees, counter-clockwise). Project -> GIS rotates by the negated angle
    and adds the offsets back. One instance is set up per landscape and
    passed to every loader that interprets rasters in project coordinates.
    """

    def __init__(self, offset_x: float = 0.0, offset_y: float = 0.0,
                 offset_z: float = 0.0, rotation_angle: float = 0.0):
        self.setup(offset_x, offset_y, offset_z, rotation_angle)

    def setup(self, offset_x: float, offset_y: float, offset_z: float, rotation_angle: float):
        """Store offsets and precompute sin/cos for both directions."""
        self.offset_x = float(offset_x)
        self.offset_y = float(offset_y)
        self.offset_z = float(offset_z)
        self.rotation_angle = float(rotation_angle)

        radians = math.radians(self.rotation_angle)
        self._sin = math.sin(radians)
        self._cos = math.cos(radians)
        self._sin_inverse = math.sin(-radians)
        self._cos_inverse = math.cos(-radians)

    @classmethod
    def from_config(cls, config: Any) -> 'CoordinateTransform':
        """Build from the ``coordinate_transform`` section of a Config."""
        return cls(
            offset_x=config.get('coordinate_transform.offset_x', 0.0),
            offset_y=config.get('coordinate_transform.offset_y', 0.0),
            offset_z=config.get('coordinate_transform.offset_z', 0.0),
            rotation_angle=config.get('coordinate_transform.rotation_angle', 0.0),
        )

    @property
    def is_identity(self) -> bool:
        return (self.offset_x == 0.0 and self.offset_y == 0.0 and
                self.offset_z == 0.0 and self.rotation_angle == 0.0)

    def gis_to_model_xy(self, x, y) -> Tuple[Any, Any]:
        """Transform raw coordinates; accepts scalars or numpy arrays."""
        dx = x - self.offset_x
        dy = y - self.offset_y
        return (dx * self._cos - dy * self._sin,
                dx * self._sin + dy * self._cos)

    def model_to_gis_xy(self, x, y) -> Tuple[Any, Any]:
        """Inverse of gis_to_model_xy; accepts scalars or numpy arrays."""
        rx = x * self._cos_inverse - y * self._sin_inverse
        ry = x * self._sin_inverse + y * self._cos_inverse
        return rx + self.offset_x, ry + self.offset_y

    def gis_to_model(self, point: Point2D) -> Point2D:
        return Point2D(*self.gis_to_model_xy(point.x, point.y))

    def model_to_gis(self, point: Point2D) -> Point2D:
        return Point2D(*self.model_to_gis_xy(point.x, point.y))

    def gis_to_model_3d(self, x: float, y: float, z: float) -> Tuple[float, float, float]:
        mx, my = self.gis_to_model_xy(x, y)
        return mx, my, z - self.offset_z

    def model_to_gis_3d(self, x: float, y: float, z: float) -> Tuple[float, float, float]:
        gx, gy = self.model_to_gis_xy(x, y)
        return gx, gy, z + self.offset_z

    def __repr__(self) -> str:
        return (f"CoordinateTransform(offset_x={self.offset_x}, offset_y={self.offset_y}, "
                f"offset_z={self.offset_z}, rotation_angle={self.rotation_angle})")
