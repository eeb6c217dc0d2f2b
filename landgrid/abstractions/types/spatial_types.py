# landgrid/abstractions/types/spatial_types.py
"""Point, cell index and rectangle types shared by grids and rasters."""

from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple
from shapely.geometry import Polygon, box


@dataclass(frozen=True)
class Point2D:
    """Metric point in GIS or project coordinates."""
    x: float
    y: float

    def __iter__(self):
        yield self.x
        yield self.y


class CellIndex(NamedTuple):
    """Integer (column, row) index of a grid cell; row 0 is the southern row."""
    x: int
    y: int


@dataclass(frozen=True)
class CellRect:
    """Integer rectangle of cells, origin at the lower-left cell."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        """Exclusive column bound."""
        return self.x + self.width

    @property
    def top(self) -> int:
        """Exclusive row bound."""
        return self.y + self.height

    @property
    def first(self) -> CellIndex:
        return CellIndex(self.x, self.y)

    @property
    def last(self) -> CellIndex:
        return CellIndex(self.right - 1, self.top - 1)

    @property
    def count(self) -> int:
        return self.width * self.height

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.top

    @classmethod
    def from_corners(cls, first: CellIndex, last: CellIndex) -> 'CellRect':
        """Build from inclusive lower-left and upper-right cells."""
        return cls(first.x, first.y, last.x - first.x + 1, last.y - first.y + 1)


@dataclass(frozen=True)
class Extent:
    """Axis-aligned metric rectangle anchored at its lower-left corner."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_bounds(cls, minx: float, miny: float, maxx: float, maxy: float) -> 'Extent':
        return cls(minx, miny, maxx - minx, maxy - miny)

    @property
    def left(self) -> float:
        return self.x

    @property
    def bottom(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(minx, miny, maxx, maxy)"""
        return (self.left, self.bottom, self.right, self.top)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def polygon(self) -> Polygon:
        """Get extent as polygon."""
        return box(*self.bounds)

    def contains(self, point: Point2D) -> bool:
        """Half-open containment: left/bottom edges inside, right/top edges outside."""
        return (self.left <= point.x < self.right and
                self.bottom <= point.y < self.top)

    def contains_extent(self, other: 'Extent') -> bool:
        return (self.left <= other.left and other.right <= self.right and
                self.bottom <= other.bottom and other.top <= self.top)

    def intersection(self, other: 'Extent') -> Optional['Extent']:
        """Get intersection of extents, None when they only touch or are disjoint."""
        overlap = self.polygon.intersection(other.polygon)
        if overlap.is_empty or overlap.area == 0:
            return None
        return Extent.from_bounds(*overlap.bounds)

    def buffer(self, distance: float) -> 'Extent':
        """Grow the extent by ``distance`` metres on every side."""
        return Extent(self.x - distance, self.y - distance,
                      self.width + 2 * distance, self.height + 2 * distance)


EMPTY_EXTENT = Extent(0.0, 0.0, 0.0, 0.0)
