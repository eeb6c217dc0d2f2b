# landgrid/config/defaults.py
"""Default configuration values for grids, raster input and terrain derivatives"""

from pathlib import Path

# Project path
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / 'logs'

PATHS = {
    'project_root': str(PROJECT_ROOT),
    'logs_dir': str(LOGS_DIR),
}

# Cell sizes in metres; each coarser size must be an integer multiple of the finer one
GRIDS = {
    'light_cell_size': 2.0,
    'height_cell_size': 10.0,
    'stand_cell_size': 10.0,
    'resource_unit_size': 100.0,
    'world_buffer': 60.0,  # metres added around the world for light/height grids
    'index_checks': True,  # range-check (x, y) indices on every access
}

RASTER = {
    'default_nodata_value': -9999.0,
    'comment_prefix': '#',
}

DEM = {
    'sun_azimuth': 315.0,  # degrees, clockwise from north
    'sun_altitude': 45.0,  # degrees above horizon
}

STANDS = {
    'no_polygon_id': -1,
}

# GIS -> project coordinates; angle in degrees
COORDINATE_TRANSFORM = {
    'offset_x': 0.0,
    'offset_y': 0.0,
    'offset_z': 0.0,
    'rotation_angle': 0.0,
}

LOGGING = {
    'level': 'INFO',
    'format': 'human',  # human or json
    'file': None,
    'max_bytes': 10 * 1024 * 1024,
    'backup_count': 3,
}
