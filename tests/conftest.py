"""
Test fixtures for FastRegrid.

This module contains shared fixtures for point sets, configurations and
grid files used throughout the test suite.
"""

import pytest
import numpy as np

from fastregrid.config import RegridConfigBuilder
from fastregrid.types import DataLayout, SpatialData

MONTHLY_HEADERS = ["Lon", "Lat", "Year"] + [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
]


def make_point(lon, lat, time_step, values):
    """Shorthand for a SpatialData record."""
    return SpatialData.from_values(lon, lat, time_step, values)


def write_grid_file(path, headers, rows):
    """Write a whitespace-delimited grid file and return its path."""
    lines = [" ".join(headers)]
    for row in rows:
        lines.append(" ".join(str(token) for token in row))
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def nn_config():
    """Nearest neighbour, Haversine, annual layout."""
    return (
        RegridConfigBuilder()
        .set_interp_method("nn")
        .set_data_layout(DataLayout.YEAR_BY_YEAR)
        .build()
    )


@pytest.fixture
def idw_config():
    """IDW over two neighbours within 500 km, Haversine, annual layout."""
    return (
        RegridConfigBuilder()
        .set_interp_method("idw")
        .set_data_layout(DataLayout.YEAR_BY_YEAR)
        .set_radius(500.0)
        .set_power(2.0)
        .set_max_points(2)
        .set_min_points(2)
        .build()
    )


@pytest.fixture
def equator_sources():
    """Two sources one degree either side of (1, 0)."""
    return [
        make_point(0.0, 0.0, 1, [10.0]),
        make_point(2.0, 0.0, 1, [20.0]),
    ]


@pytest.fixture
def regular_sources():
    """A 5 x 5 one-degree grid with value lon + 10 * lat for two years."""
    points = []
    for year in (2000, 2001):
        for lat in np.arange(40.0, 45.0):
            for lon in np.arange(-5.0, 0.0):
                points.append(make_point(lon, lat, year, [lon + 10.0 * lat, float(year)]))
    return points


@pytest.fixture
def monthly_files(tmp_path):
    """Source and target grid files in GRID_BY_TIME layout."""
    source_rows = []
    for lon, lat in [(10.0, 50.0), (11.0, 50.0), (10.0, 51.0), (11.0, 51.0)]:
        for year in (2000, 2001):
            base = lon + lat + (year - 2000) * 100
            source_rows.append([lon, lat, year] + [base + month for month in range(12)])

    target_rows = []
    for lon, lat in [(10.0, 50.0), (10.5, 50.5)]:
        for year in (2000, 2001):
            target_rows.append([lon, lat, year] + [0.0] * 12)

    source = write_grid_file(tmp_path / "source.txt", MONTHLY_HEADERS, source_rows)
    target = write_grid_file(tmp_path / "target.txt", MONTHLY_HEADERS, target_rows)
    return source, target


@pytest.fixture
def reset_logging():
    """Remove the handlers installed by setup_logging after the test."""
    import logging
    from fastregrid import logger as fastregrid_logger

    yield
    for name in (fastregrid_logger.LOGGER_NAME, "py.warnings"):
        for handler in fastregrid_logger._handlers:
            logging.getLogger(name).removeHandler(handler)
    for handler in fastregrid_logger._handlers:
        handler.close()
    fastregrid_logger._handlers.clear()
    logging.getLogger(fastregrid_logger.LOGGER_NAME).setLevel(logging.NOTSET)
    logging.captureWarnings(False)
