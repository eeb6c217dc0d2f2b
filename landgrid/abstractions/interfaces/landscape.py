# landgrid/abstractions/interfaces/landscape.py
"""Collaborator interfaces supplied by the simulation around the grids."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from ..types import CellIndex, Point2D


class IResourceUnitLocator(ABC):
    """Resolves the resource unit (100 m simulation cell) covering a point."""

    @abstractmethod
    def get_resource_unit(self, point: Point2D) -> Optional[Any]:
        """
        Get the resource unit containing a project coordinate.

        Args:
            point: Point in project coordinates

        Returns:
            Resource unit object, or None where no resource unit exists
        """
        pass

    @property
    @abstractmethod
    def resource_unit_area(self) -> float:
        """Area of one resource unit in m²."""
        pass


class ITreeList(ABC):
    """Trees of one resource unit, addressed by position in the list."""

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def light_cell_index(self, tree_index: int) -> CellIndex:
        """Light-grid cell of the tree's stem position."""
        pass

    @abstractmethod
    def is_dead(self, tree_index: int) -> bool:
        pass


class ITreeSource(ABC):
    """Hands out the tree lists held by a resource unit."""

    @abstractmethod
    def tree_lists(self, resource_unit: Any) -> Iterable[ITreeList]:
        pass
