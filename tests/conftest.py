"""Shared fixtures for landgrid tests."""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Optional, Sequence

import yaml

from landgrid.config.config import Config
from landgrid.infrastructure.logging import landscape_context, node_context, stage_context


def write_esri_ascii(path: Path, rows: Sequence[Sequence[float]], cell_size: float = 10.0,
                     xllcorner: float = 0.0, yllcorner: float = 0.0,
                     nodata_value: Optional[float] = -9999, header_case: str = 'lower') -> Path:
    """Write ``rows`` (northern row first) as an ESRI ASCII raster."""
    header = [
        ('ncols', len(rows[0])),
        ('nrows', len(rows)),
        ('xllcorner', xllcorner),
        ('yllcorner', yllcorner),
        ('cellsize', cell_size),
    ]
    if nodata_value is not None:
        header.append(('nodata_value', nodata_value))

    lines = []
    for key, value in header:
        key = key.upper() if header_case == 'upper' else key
        lines.append(f"{key} {value}")
    lines.extend(' '.join(str(v) for v in row) for row in rows)
    path.write_text('\n'.join(lines) + '\n')
    return path


@pytest.fixture
def test_data_dir():
    """Create a temporary directory for test data."""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def asc_writer(test_data_dir):
    """Write an ESRI ASCII file into the test directory: ``asc_writer('name.asc', rows, ...)``."""
    def _write(name: str, rows, **kwargs) -> Path:
        return write_esri_ascii(test_data_dir / name, rows, **kwargs)
    return _write


@pytest.fixture
def test_config_file(test_data_dir):
    """Create a real test config file."""
    config_data = {
        'grids': {
            'world_buffer': 20.0,
            'index_checks': True,
        },
        'raster': {
            'default_nodata_value': -1.0,
        },
        'logging': {
            'level': 'DEBUG',
        },
    }

    config_path = test_data_dir / "landgrid.yml"
    with open(config_path, 'w') as f:
        yaml.dump(config_data, f)

    return config_path


@pytest.fixture
def test_config(test_config_file):
    """Create a real Config instance."""
    return Config(test_config_file)


@pytest.fixture(autouse=True)
def reset_logging_context():
    """Start every test without landscape/stage/node context."""
    landscape_context.set(None)
    stage_context.set(None)
    node_context.set(None)
    yield
