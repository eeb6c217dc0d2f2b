# landgrid/domain/terrain/dem.py
"""Digital elevation model resampled onto the height grid, with slope/aspect/hillshade."""

import math
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ...abstractions.exceptions import DataQualityError, GridNotSetupError
from ...abstractions.types import Point2D, SlopeAspect
from ...config import Config, config as default_config
from ...grid_systems import CoordinateTransform, UniformGrid
from ...infrastructure.logging import get_logger, log_operation
from ...raster import EsriAsciiRasterLoader, RawRaster

logger = get_logger(__name__)


class DigitalElevationModel:
    """
    Elevation on the cells of a target grid (usually the 10 m height grid).

    Values are interpolated bilinearly from the four raw DEM cell centroids
    surrounding each target cell centroid. Slope, aspect and hillshade grids
    are derived lazily on first access and dropped on reload.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or default_config
        self.sun_azimuth = float(self.config.get('dem.sun_azimuth', 315.0))
        self.sun_altitude = float(self.config.get('dem.sun_altitude', 45.0))

        self.grid = UniformGrid(dtype=np.float64, name='dem')
        self.source: Optional[Path] = None
        self._slope_grid: Optional[UniformGrid] = None
        self._aspect_grid: Optional[UniformGrid] = None
        self._view_grid: Optional[UniformGrid] = None

    # ---------------------------------------------------------------- loading

    def load_from_file(self, path: Union[str, Path], target_grid: UniformGrid,
                       transform: Optional[CoordinateTransform] = None) -> 'DigitalElevationModel':
        """
        Load an ESRI ASCII DEM and resample it onto ``target_grid``'s cells.

        Raises:
            GridNotSetupError: if ``target_grid`` has not been set up
            RasterFormatError: if the file cannot be parsed
            DataQualityError: if a target cell needs a no-data or missing DEM cell
        """
        if not target_grid.is_setup():
            raise GridNotSetupError(
                f"Cannot size the elevation model: {target_grid.name} has not been set up"
            )
        raster = EsriAsciiRasterLoader(self.config).load_from_file(path)
        return self.load_from_raster(raster, target_grid, transform)

    @log_operation("dem_resample")
    def load_from_raster(self, raster: RawRaster, target_grid: UniformGrid,
                         transform: Optional[CoordinateTransform] = None) -> 'DigitalElevationModel':
        """Resample an already loaded raster onto ``target_grid``'s cells."""
        if not target_grid.is_setup():
            raise GridNotSetupError(
                f"Cannot size the elevation model: {target_grid.name} has not been set up"
            )

        # nothing is committed until the resample succeeds
        elevation = self._interpolate(raster, target_grid, transform)

        self.grid.setup_like(target_grid)
        self.grid.as_array()[:] = elevation
        self.invalidate_derived_grids()
        self.source = raster.source

        logger.info(
            f"Elevation model: {self.grid.cells_x}x{self.grid.cells_y} cells, "
            f"{np.nanmin(elevation):.1f}..{np.nanmax(elevation):.1f} m",
            extra={'context': {'source': str(raster.source)}}
        )
        return self

    def _interpolate(self, raster: RawRaster, grid: UniformGrid,
                     transform: Optional[CoordinateTransform]) -> np.ndarray:
        cs = raster.cell_size
        header = raster.header

        xs = grid.project_extent.x + (np.arange(grid.cells_x) + 0.5) * grid.cell_size
        ys = grid.project_extent.y + (np.arange(grid.cells_y) + 0.5) * grid.cell_size
        px, py = np.meshgrid(xs, ys)
        if transform is not None:
            px, py = transform.model_to_gis_xy(px, py)

        dx = px - header.origin_x
        dy = py - header.origin_y
        column = np.floor(dx / cs).astype(np.int64)
        row_from_south = np.floor(dy / cs).astype(np.int64)
        row = raster.rows - 1 - row_from_south

        # centroid of the raw cell containing each target centroid
        cx = header.origin_x + (column + 0.5) * cs
        cy = header.origin_y + (row_from_south + 0.5) * cs

        north_half = py > cy
        west_half = px <= cx
        north_row = np.where(north_half, row - 1, row)
        south_row = north_row + 1
        west_col = np.where(west_half, column - 1, column)
        east_col = west_col + 1
        y_south = np.where(north_half, cy, cy - cs)
        x_west = np.where(west_half, cx - cs, cx)

        in_range = ((west_col >= 0) & (east_col < raster.columns) &
                    (north_row >= 0) & (south_row < raster.rows))
        if not in_range.all():
            self._raise_hole(raster, px, py, ~in_range, "lies outside the raster")

        values = raster.values
        z_nw = values[north_row, west_col]
        z_ne = values[north_row, east_col]
        z_sw = values[south_row, west_col]
        z_se = values[south_row, east_col]

        nodata = raster.no_data_value
        holes = (z_nw == nodata) | (z_ne == nodata) | (z_sw == nodata) | (z_se == nodata)
        if holes.any():
            self._raise_hole(raster, px, py, holes, "has no-data values in adjacent cells")

        dx_west = px - x_west
        dx_east = cs - dx_west
        dy_south = py - y_south
        dy_north = cs - dy_south
        return (z_sw * dx_east * dy_north + z_se * dx_west * dy_north +
                z_nw * dx_east * dy_south + z_ne * dx_west * dy_south) / (cs * cs)

    @staticmethod
    def _raise_hole(raster: RawRaster, px: np.ndarray, py: np.ndarray,
                    bad: np.ndarray, reason: str):
        first = np.argwhere(bad)[0]
        x, y = float(px[tuple(first)]), float(py[tuple(first)])
        raise DataQualityError(
            f"Elevation model {raster.source}: point ({x:.2f}, {y:.2f}) {reason} "
            f"({int(bad.sum())} cells affected)"
        )

    # ---------------------------------------------------------------- queries

    def get_elevation(self, point: Point2D) -> float:
        """Elevation of the cell containing ``point``; NaN outside the grid."""
        if not self.grid.contains_point(point):
            return float('nan')
        return float(self.grid[point])

    def get_slope_and_aspect(self, point: Point2D) -> SlopeAspect:
        """
        Slope and aspect at ``point`` from central differences of the
        four adjacent cells (Burrough & McDonnell 1998, p. 190).

        Slope is rise/run (1 = 45°). Aspect is the downslope direction in
        degrees: 0 north, 90 east, 180 south, 270 west. Border cells and cells
        next to missing elevations are not defined.
        """
        grid = self.grid
        if not grid.contains_point(point):
            return SlopeAspect(float('nan'), 0.0, 0.0, False)

        x, y = grid.cell_index_of(point)
        elevation = float(grid[x, y])
        if x < 1 or x >= grid.cells_x - 1 or y < 1 or y >= grid.cells_y - 1:
            return SlopeAspect(elevation, 0.0, 0.0, False)

        z_south = grid[x, y - 1]
        z_west = grid[x - 1, y]
        z_east = grid[x + 1, y]
        z_north = grid[x, y + 1]
        if np.isnan([z_south, z_west, z_east, z_north]).any():
            return SlopeAspect(elevation, 0.0, 0.0, False)

        g = (z_east - z_west) / (2.0 * grid.cell_size)
        h = (z_south - z_north) / (2.0 * grid.cell_size)
        slope = math.sqrt(g * g + h * h)
        # atan2 -> north -90, east 0, south 90; shift to compass degrees
        aspect = (math.degrees(math.atan2(-h, -g)) + 360.0 + 90.0) % 360.0
        return SlopeAspect(elevation, float(slope), float(aspect), True)

    def get_topographic_position_index(self, point: Point2D, radius: float) -> float:
        """
        Elevation at ``point`` minus the mean elevation within ``radius`` metres.

        Cells count when their index distance to the point's cell is at most
        ``int(radius / cell_size)``; missing elevations are ignored. Returns 0
        when no cell qualifies and NaN outside the grid.
        """
        grid = self.grid
        if not grid.contains_point(point):
            return float('nan')

        reach = int(radius / grid.cell_size)
        x, y = grid.cell_index_of(point)
        elevation = grid[x, y]

        x0, x1 = max(0, x - reach), min(grid.cells_x - 1, x + reach)
        y0, y1 = max(0, y - reach), min(grid.cells_y - 1, y + reach)
        window = grid.as_array()[y0:y1 + 1, x0:x1 + 1]
        iy, ix = np.ogrid[y0:y1 + 1, x0:x1 + 1]
        selected = ((ix - x) ** 2 + (iy - y) ** 2 <= reach * reach) & ~np.isnan(window)

        count = int(selected.sum())
        if count == 0:
            return 0.0
        return float(elevation - window[selected].mean())

    # --------------------------------------------------------- derived grids

    def invalidate_derived_grids(self):
        self._slope_grid = None
        self._aspect_grid = None
        self._view_grid = None

    @property
    def slope_grid(self) -> UniformGrid:
        self._calculate_derived_grids()
        return self._slope_grid

    @property
    def aspect_grid(self) -> UniformGrid:
        self._calculate_derived_grids()
        return self._aspect_grid

    @property
    def view_grid(self) -> UniformGrid:
        """Hillshade in [0, 1]; 0 where slope and aspect are undefined."""
        self._calculate_derived_grids()
        return self._view_grid

    def _calculate_derived_grids(self):
        if self._slope_grid is not None:
            return
        if not self.grid.is_setup():
            raise GridNotSetupError("Elevation model has not been loaded")

        z = self.grid.as_array()
        cs = self.grid.cell_size
        slope = np.zeros_like(z)
        aspect = np.zeros_like(z)
        view = np.zeros_like(z)

        if z.shape[0] >= 3 and z.shape[1] >= 3:
            z_east, z_west = z[1:-1, 2:], z[1:-1, :-2]
            z_north, z_south = z[2:, 1:-1], z[:-2, 1:-1]
            defined = ~(np.isnan(z_east) | np.isnan(z_west) | np.isnan(z_north) | np.isnan(z_south))

            with np.errstate(invalid='ignore'):
                g = (z_east - z_west) / (2.0 * cs)
                h = (z_south - z_north) / (2.0 * cs)
                inner_slope = np.sqrt(g * g + h * h)
                inner_aspect = np.mod(np.degrees(np.arctan2(-h, -g)) + 450.0, 360.0)

            slope[1:-1, 1:-1] = np.where(defined, inner_slope, 0.0)
            aspect[1:-1, 1:-1] = np.where(defined, inner_aspect, 0.0)
            view[1:-1, 1:-1] = np.where(defined, self._hillshade(inner_slope, inner_aspect), 0.0)

        self._slope_grid = self._derived('dem_slope', slope)
        self._aspect_grid = self._derived('dem_aspect', aspect)
        self._view_grid = self._derived('dem_view', view)
        logger.debug("Derived slope, aspect and view grids")

    def _hillshade(self, slope: np.ndarray, aspect: np.ndarray) -> np.ndarray:
        """Cosine between surface normal and sun direction, mapped from [-1, 1] to [0, 1]."""
        azimuth = math.radians(self.sun_azimuth)
        altitude = math.radians(self.sun_altitude)
        sun_east = math.cos(altitude) * math.sin(azimuth)
        sun_north = math.cos(altitude) * math.cos(azimuth)
        sun_up = math.sin(altitude)

        with np.errstate(invalid='ignore'):
            tilt = np.arctan(slope)
            facing = np.radians(aspect)
            cosine = (np.sin(tilt) * np.sin(facing) * sun_east +
                      np.sin(tilt) * np.cos(facing) * sun_north +
                      np.cos(tilt) * sun_up)
        return (cosine + 1.0) / 2.0

    def _derived(self, name: str, values: np.ndarray) -> UniformGrid:
        derived = UniformGrid(dtype=np.float64, name=name).setup_like(self.grid)
        derived.as_array()[:] = values
        return derived
