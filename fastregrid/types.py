"""
Core data types for FastRegrid.

This module defines the point records consumed by the regridding engine,
the enumerations that select its behaviour, and the mapping rows produced
by the spatial mapper.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Sequence, Tuple, Union

import numpy as np

from fastregrid.exceptions import InvalidArgumentError


class _ConfigEnum(str, Enum):
    """String-valued enumeration that can be parsed from user input."""

    @classmethod
    def _aliases(cls):
        return {}

    @classmethod
    def from_string(cls, value: Union[str, "_ConfigEnum"]):
        """
        Parse an enumerator from its value, its name or a known alias.

        Parameters
        ----------
        value : str or enum member
            Case-insensitive textual representation

        Returns
        -------
        enum member

        Raises
        ------
        InvalidArgumentError
            If the value does not name any enumerator
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidArgumentError(
                f"Expected a string for {cls.__name__}, got {type(value)}"
            )
        key = value.strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        aliases = cls._aliases()
        if key in aliases:
            return cls(aliases[key])
        valid = [member.value for member in cls]
        raise InvalidArgumentError(
            f"Unknown {cls.__name__} '{value}', must be one of {valid}"
        )


class InterpolationMethod(_ConfigEnum):
    """Interpolation method options."""

    NEAREST_NEIGHBOR = "nn"
    INVERSE_DISTANCE_WEIGHTED = "idw"

    @classmethod
    def _aliases(cls):
        return {"nearest": "nn", "nearest_neighbour": "nn", "inverse_distance": "idw"}


class DistanceMetric(_ConfigEnum):
    """Distance metric options."""

    EUCLIDEAN = "euclidean"
    HAVERSINE = "haversine"

    @classmethod
    def _aliases(cls):
        return {"great_circle": "haversine", "planar": "euclidean"}


class DataLayout(_ConfigEnum):
    """Layout of the value columns in an input grid file."""

    # One record per grid cell and year, variable number of values
    YEAR_BY_YEAR = "year_by_year"
    # One record per grid cell and year, exactly 12 monthly values
    GRID_BY_TIME = "grid_by_time"

    @classmethod
    def _aliases(cls):
        return {"annual": "year_by_year", "monthly": "grid_by_time"}


# Number of monthly values carried by a GRID_BY_TIME record
MONTHS_PER_RECORD = 12

# Lon, Lat, Time
COORDINATE_COLUMNS = 3


class GridPoint(NamedTuple):
    """A geospatial point, longitude and latitude in decimal degrees."""

    longitude: float
    latitude: float


@dataclass(eq=False)
class SpatialData:
    """
    Data for a grid point at a specific time step.

    Attributes
    ----------
    grid_point : GridPoint
        Geospatial coordinates of the record
    time_step : int
        Opaque time identifier (e.g. a year)
    values : np.ndarray
        Data values (e.g. 12 monthly values), stored as float64
    """

    grid_point: GridPoint
    time_step: int
    values: np.ndarray = field(default_factory=lambda: np.empty(0))

    def __post_init__(self):
        if not isinstance(self.grid_point, GridPoint):
            self.grid_point = GridPoint(*self.grid_point)
        self.grid_point = GridPoint(float(self.grid_point.longitude),
                                    float(self.grid_point.latitude))
        if isinstance(self.time_step, (float, np.floating)) and not float(self.time_step).is_integer():
            raise InvalidArgumentError(f"Time step must be an integer, got {self.time_step}")
        self.time_step = int(self.time_step)
        self.values = np.asarray(self.values, dtype=np.float64).reshape(-1)

    @classmethod
    def from_values(cls, longitude: float, latitude: float, time_step: int,
                    values: Sequence[float]) -> "SpatialData":
        """Build a record from bare coordinates."""
        return cls(GridPoint(longitude, latitude), time_step, values)

    @property
    def longitude(self) -> float:
        return self.grid_point.longitude

    @property
    def latitude(self) -> float:
        return self.grid_point.latitude

    def __repr__(self):
        return (
            f"SpatialData(lon={self.longitude}, lat={self.latitude}, "
            f"time_step={self.time_step}, values={self.values.tolist()})"
        )


class NNMapping(NamedTuple):
    """Nearest-neighbour assignment of one target point."""

    target_lon: float
    target_lat: float
    source_lon: float
    source_lat: float
    distance_km: float
    target_index: int


class Neighbor(NamedTuple):
    """A source point participating in an IDW estimate."""

    source_lon: float
    source_lat: float
    distance_km: float


class IDWMapping(NamedTuple):
    """
    IDW neighbour set of one target point.

    ``neighbors`` is sorted by ascending distance. When ``is_fallback`` is
    true it holds exactly the nearest source.
    """

    target_lon: float
    target_lat: float
    neighbors: Tuple[Neighbor, ...]
    target_index: int
    is_fallback: bool
