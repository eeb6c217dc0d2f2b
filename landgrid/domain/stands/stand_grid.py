# landgrid/domain/stands/stand_grid.py
"""Stand (polygon) map on the 10 m grid and its inverted spatial index."""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

import numpy as np
import pandas as pd

from ...abstractions.exceptions import GridNotSetupError, UnknownPolygonError
from ...abstractions.interfaces import IResourceUnitLocator, ITreeList, ITreeSource
from ...abstractions.types import CellIndex, CellRect, Extent, Point2D, ResourceUnitFraction
from ...config import Config, config as default_config
from ...grid_systems import CoordinateTransform, GridWindow, UniformGrid
from ...infrastructure.logging import get_logger, log_operation
from ...raster import EsriAsciiRasterLoader, RawRaster

logger = get_logger(__name__)


@dataclass
class PolygonRecord:
    """Index entry of one polygon ID."""
    polygon_id: int
    cell_rect: CellRect
    bounding_box: Extent
    cell_count: int
    area: float


class StandGrid:
    """
    Polygon IDs on a fixed-resolution grid plus per-ID lookups.

    After loading, ``create_index`` computes for each polygon ID its bounding
    box, covered area and the resource units it overlaps. The adjacency graph
    is built on the first ``neighbors_of`` call and cached until the grid is
    reloaded or reindexed.

        stands = StandGrid().load_from_file('stands.asc', height_grid=grids.height_grid,
                                            resource_units=grids)
        stands.area(17)                 # m²
        stands.grid_indices_of_polygon(17)
        stands.neighbors_of(17)
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or default_config
        self.no_polygon_id = int(self.config.get('stands.no_polygon_id', -1))
        self.cell_size = float(self.config.get('grids.stand_cell_size', 10.0))
        self.light_cell_size = float(self.config.get('grids.light_cell_size', 2.0))
        self.light_ratio = int(round(self.cell_size / self.light_cell_size))

        self.grid = UniformGrid(dtype=np.int64, name='stand_grid')
        self.source: Optional[Path] = None
        self.coverage = 0.0
        self._records: Dict[int, PolygonRecord] = {}
        self._fractions: Dict[int, List[ResourceUnitFraction]] = {}
        self._neighbors: Optional[Dict[int, Set[int]]] = None

    # ---------------------------------------------------------------- loading

    def load_from_file(self, path: Union[str, Path],
                       height_grid: Optional[UniformGrid] = None,
                       transform: Optional[CoordinateTransform] = None,
                       world_extent: Optional[Extent] = None,
                       resource_units: Optional[IResourceUnitLocator] = None,
                       create_index: bool = True) -> 'StandGrid':
        """Load an ESRI ASCII stand map; see ``load_from_raster``."""
        raster = EsriAsciiRasterLoader(self.config).load_from_file(path)
        return self.load_from_raster(raster, height_grid, transform, world_extent,
                                     resource_units, create_index)

    @log_operation("stand_grid_resample")
    def load_from_raster(self, raster: RawRaster,
                         height_grid: Optional[UniformGrid] = None,
                         transform: Optional[CoordinateTransform] = None,
                         world_extent: Optional[Extent] = None,
                         resource_units: Optional[IResourceUnitLocator] = None,
                         create_index: bool = True) -> 'StandGrid':
        """
        Resample a classification raster onto the stand grid.

        The stand grid covers ``height_grid`` (or, without one, the raster's
        extent in project coordinates). Each cell takes the raster value at its
        centroid; cells outside the raster, on no-data or outside
        ``world_extent`` get the no-polygon ID.
        """
        if height_grid is not None:
            if not height_grid.is_setup():
                raise GridNotSetupError(
                    f"Cannot size the stand grid: {height_grid.name} has not been set up"
                )
            self.grid.setup(height_grid.project_extent, self.cell_size)
        else:
            self.grid.setup(raster.model_bounding_box(transform), self.cell_size)
        self.source = raster.source
        self.coverage = self._raster_coverage(raster, transform)

        grid = self.grid
        xs = grid.project_extent.x + (np.arange(grid.cells_x) + 0.5) * grid.cell_size
        ys = grid.project_extent.y + (np.arange(grid.cells_y) + 0.5) * grid.cell_size
        model_x, model_y = np.meshgrid(xs, ys)
        gis_x, gis_y = (transform.model_to_gis_xy(model_x, model_y)
                        if transform is not None else (model_x, model_y))

        header = raster.header
        column = np.floor((gis_x - header.origin_x) / header.cell_size).astype(np.int64)
        row = raster.rows - 1 - np.floor((gis_y - header.origin_y) / header.cell_size).astype(np.int64)
        inside = (column >= 0) & (column < raster.columns) & (row >= 0) & (row < raster.rows)

        values = np.full(model_x.shape, float(self.no_polygon_id))
        values[inside] = raster.values[row[inside], column[inside]]
        valid = inside & (values != raster.no_data_value)
        if world_extent is not None:
            valid &= ((model_x >= world_extent.left) & (model_x < world_extent.right) &
                      (model_y >= world_extent.bottom) & (model_y < world_extent.top))

        grid.as_array()[:] = np.where(valid, values, self.no_polygon_id).astype(np.int64)
        self._clear_index()

        if create_index:
            self.create_index(resource_units)
        return self

    def create_empty_grid(self, height_grid: UniformGrid) -> 'StandGrid':
        """Stand grid over ``height_grid`` with every cell set to the no-polygon ID."""
        if not height_grid.is_setup():
            raise GridNotSetupError(
                f"Cannot size the stand grid: {height_grid.name} has not been set up"
            )
        self.grid.setup(height_grid.project_extent, self.cell_size)
        self.grid.fill(self.no_polygon_id)
        self.coverage = 0.0
        self._clear_index()
        return self

    def _raster_coverage(self, raster: RawRaster,
                         transform: Optional[CoordinateTransform]) -> float:
        """Share of the stand grid's extent inside the raster's bounding box."""
        target = self.grid.project_extent
        overlap = target.intersection(raster.model_bounding_box(transform))
        coverage = overlap.area / target.area if overlap is not None else 0.0
        if coverage < 1.0 - 1e-9:
            logger.warning(
                f"Stand map {raster.source} covers {coverage:.1%} of {self.grid.name} "
                f"{target.bounds}; uncovered cells get the no-polygon ID"
            )
        return coverage

    def _clear_index(self):
        self._records = {}
        self._fractions = {}
        self._neighbors = None

    # --------------------------------------------------------------- indexing

    def create_index(self, resource_units: Optional[IResourceUnitLocator] = None):
        """
        Rebuild bounding boxes, areas and resource-unit fractions for every polygon.

        Resource-unit fractions are only computed when a locator is given;
        each cell adds ``cell_area / resource_unit_area`` to the entry of the
        resource unit containing its centroid.
        """
        if not self.grid.is_setup():
            raise GridNotSetupError("Stand grid has not been loaded")
        start_time = time.time()
        self._clear_index()

        grid = self.grid
        ids = grid.as_array()
        cell_y, cell_x = np.nonzero(ids != self.no_polygon_id)
        cells = pd.DataFrame({'polygon_id': ids[cell_y, cell_x], 'x': cell_x, 'y': cell_y})

        summary = cells.groupby('polygon_id').agg(
            x_min=('x', 'min'), x_max=('x', 'max'),
            y_min=('y', 'min'), y_max=('y', 'max'),
            cell_count=('x', 'size'),
        )
        cell_area = grid.cell_size * grid.cell_size
        for polygon_id, row in summary.iterrows():
            rect = CellRect.from_corners(CellIndex(int(row.x_min), int(row.y_min)),
                                         CellIndex(int(row.x_max), int(row.y_max)))
            origin = grid.cell_extent(rect.first)
            self._records[int(polygon_id)] = PolygonRecord(
                polygon_id=int(polygon_id),
                cell_rect=rect,
                bounding_box=Extent(origin.x, origin.y,
                                    rect.width * grid.cell_size, rect.height * grid.cell_size),
                cell_count=int(row.cell_count),
                area=int(row.cell_count) * cell_area,
            )

        if resource_units is not None:
            self._index_resource_units(cells, resource_units, cell_area)

        logger.log_performance(
            'create_stand_index', time.time() - start_time,
            cells_processed=int(grid.count), polygons=len(self._records)
        )

    def _index_resource_units(self, cells: pd.DataFrame,
                              resource_units: IResourceUnitLocator, cell_area: float):
        share = cell_area / resource_units.resource_unit_area
        entries: Dict[int, Dict[int, ResourceUnitFraction]] = {}
        for polygon_id, x, y in cells.itertuples(index=False, name=None):
            resource_unit = resource_units.get_resource_unit(self.grid.cell_centroid((x, y)))
            if resource_unit is None:
                continue
            by_unit = entries.setdefault(int(polygon_id), {})
            entry = by_unit.get(id(resource_unit))
            if entry is None:
                entry = by_unit[id(resource_unit)] = ResourceUnitFraction(resource_unit, 0.0)
            entry.fraction += share

        self._fractions = {polygon_id: list(by_unit.values())
                           for polygon_id, by_unit in entries.items()}

    # ---------------------------------------------------------------- queries

    def _record(self, polygon_id: int) -> PolygonRecord:
        try:
            return self._records[polygon_id]
        except KeyError:
            raise UnknownPolygonError(polygon_id) from None

    def is_indexed(self, polygon_id: int) -> bool:
        return polygon_id in self._records

    def polygon_ids(self) -> List[int]:
        return sorted(self._records)

    def polygon_record(self, polygon_id: int) -> PolygonRecord:
        return self._record(polygon_id)

    def area(self, polygon_id: int) -> float:
        """Covered area in m², 0 for unknown IDs."""
        record = self._records.get(polygon_id)
        return record.area if record is not None else 0.0

    def bounding_box(self, polygon_id: int) -> Extent:
        """Union of the polygon's cell rectangles; raises UnknownPolygonError."""
        return self._record(polygon_id).bounding_box

    def resource_unit_fractions(self, polygon_id: int) -> List[ResourceUnitFraction]:
        """(resource unit, occupied fraction) pairs in first-seen order; empty when unknown."""
        return list(self._fractions.get(polygon_id, []))

    def resource_units_in_stand(self, polygon_id: int) -> List:
        return [entry.resource_unit for entry in self._fractions.get(polygon_id, [])]

    def grid_indices_of_polygon(self, polygon_id: int) -> List[int]:
        """Flat stand-grid indices of all cells carrying ``polygon_id``."""
        window = GridWindow.from_cell_rect(self.grid, self._record(polygon_id).cell_rect)
        return [index for index, value in window if value == polygon_id]

    def polygon_id_at(self, point: Point2D) -> int:
        """Polygon ID at a project coordinate; the no-polygon ID outside the grid."""
        if not self.grid.contains_point(point):
            return self.no_polygon_id
        return int(self.grid[point])

    def polygon_id_at_light_cell(self, light_cell: Tuple[int, int]) -> int:
        """Polygon ID at a light-grid cell of a light grid sharing the stand grid's origin."""
        x, y = light_cell
        return int(self.grid.get_coarse(x, y, self.light_ratio))

    def has_value(self, polygon_id: int, light_cell: Tuple[int, int]) -> bool:
        return self.polygon_id_at_light_cell(light_cell) == polygon_id

    # -------------------------------------------------------------- adjacency

    def neighbors_of(self, polygon_id: int) -> Set[int]:
        """IDs of polygons sharing a cell edge with ``polygon_id``; empty when unknown."""
        if self._neighbors is None:
            self._neighbors = self._build_neighbors()
        return set(self._neighbors.get(polygon_id, ()))

    def invalidate_neighbors(self):
        self._neighbors = None

    def _build_neighbors(self) -> Dict[int, Set[int]]:
        ids = self.grid.as_array()
        pairs = [
            np.stack([ids[:, :-1].ravel(), ids[:, 1:].ravel()], axis=1),   # west-east
            np.stack([ids[:-1, :].ravel(), ids[1:, :].ravel()], axis=1),   # south-north
        ]
        pairs = np.concatenate(pairs)
        keep = ((pairs[:, 0] != pairs[:, 1]) &
                (pairs[:, 0] != self.no_polygon_id) & (pairs[:, 1] != self.no_polygon_id))
        neighbors: Dict[int, Set[int]] = {}
        if not keep.any():
            return neighbors
        pairs = np.unique(pairs[keep], axis=0)

        for a, b in pairs.tolist():
            neighbors.setdefault(a, set()).add(b)
            neighbors.setdefault(b, set()).add(a)
        logger.debug(f"Built stand adjacency for {len(neighbors)} polygons")
        return neighbors

    # ------------------------------------------------------------------ trees

    def get_living_trees_in_stand(self, polygon_id: int,
                                  tree_source: ITreeSource) -> List[Tuple[ITreeList, int]]:
        """
        Living trees standing on ``polygon_id``.

        Returns:
            (tree list, index in list) pairs, walking the stand's resource units
            in first-seen order
        """
        trees = []
        for resource_unit in self.resource_units_in_stand(polygon_id):
            for tree_list in tree_source.tree_lists(resource_unit):
                for tree_index in range(len(tree_list)):
                    if tree_list.is_dead(tree_index):
                        continue
                    if self.has_value(polygon_id, tree_list.light_cell_index(tree_index)):
                        trees.append((tree_list, tree_index))
        return trees
