"""
Geodesy primitives.

Degree/radian conversion, longitude normalization, km/degree conversion at
a given latitude and two-point distances under the Haversine (km) and
Euclidean (raw degrees) metrics. The vectorized variants are used by the
spatial mapper to scan all sources for one target at once.
"""

import math
from typing import Union

import numpy as np
from scipy.spatial.distance import cdist

from fastregrid.exceptions import InvalidArgumentError
from fastregrid.types import DistanceMetric

EARTH_RADIUS_KM = 6371.0

# Length of one degree of latitude
KM_PER_DEGREE = 111.32

# Floor on |cos(lat)| so that km_to_degrees saturates at the poles
MIN_COS_LATITUDE = 1e-10

MAX_ABS_LATITUDE = 90.0
MAX_ABS_LONGITUDE = 360.0

ArrayLike = Union[float, np.ndarray]


def to_radians(degrees: ArrayLike) -> ArrayLike:
    """Convert degrees to radians."""
    return degrees * math.pi / 180.0


def adjust_longitude(lon: ArrayLike) -> ArrayLike:
    """
    Normalize longitude to [-180, 180] degrees.

    Values are shifted by whole turns of 360 degrees; values already in
    range are returned unchanged, including both -180 and 180.
    """
    if np.ndim(lon) > 0:
        lon = np.array(lon, dtype=np.float64)
        if not np.all(np.isfinite(lon)):
            raise InvalidArgumentError("Longitudes must be finite")
        high = lon > 180.0
        lon[high] -= 360.0 * np.ceil((lon[high] - 180.0) / 360.0)
        low = lon < -180.0
        lon[low] += 360.0 * np.ceil((-180.0 - lon[low]) / 360.0)
        return lon

    lon = float(lon)
    if not math.isfinite(lon):
        raise InvalidArgumentError(f"Longitude must be finite, got {lon}")
    if lon > 180.0:
        lon -= 360.0 * math.ceil((lon - 180.0) / 360.0)
    elif lon < -180.0:
        lon += 360.0 * math.ceil((-180.0 - lon) / 360.0)
    return lon


def km_to_degrees(km: float, latitude: float) -> float:
    """
    Convert a distance in km to degrees at the given latitude.

    Uses 111.32 km per degree scaled by cos(latitude). Near the poles the
    cosine is floored at 1e-10, so the result saturates instead of
    dividing by zero.

    Raises
    ------
    InvalidArgumentError
        If ``km`` is negative or ``latitude`` lies outside [-90, 90]
    """
    if km < 0.0:
        raise InvalidArgumentError("Distance in km must be non-negative")
    if abs(latitude) > MAX_ABS_LATITUDE:
        raise InvalidArgumentError("Latitude must be in [-90, 90]")
    cos_lat = max(abs(math.cos(to_radians(latitude))), MIN_COS_LATITUDE)
    return km / (KM_PER_DEGREE * cos_lat)


def degrees_to_km(degrees: ArrayLike, latitude: float) -> ArrayLike:
    """Convert a Euclidean distance in degrees to km at the given latitude."""
    return degrees * KM_PER_DEGREE * math.cos(to_radians(latitude))


def validate_coordinates(lons: ArrayLike, lats: ArrayLike) -> None:
    """
    Check longitudes and latitudes against the accepted input ranges.

    Raises
    ------
    InvalidArgumentError
        If any coordinate is non-finite, |lat| > 90 or |lon| > 360
    """
    lons = np.asarray(lons, dtype=np.float64)
    lats = np.asarray(lats, dtype=np.float64)
    if not (np.all(np.isfinite(lons)) and np.all(np.isfinite(lats))):
        raise InvalidArgumentError("Coordinates must be finite")
    if np.any(np.abs(lats) > MAX_ABS_LATITUDE):
        raise InvalidArgumentError("Latitudes must be in [-90, 90]")
    if np.any(np.abs(lons) > MAX_ABS_LONGITUDE):
        raise InvalidArgumentError("Longitudes must be in [-360, 360]")


def _haversine(lon1, lat1, lon2, lat2):
    lat1_rad = to_radians(lat1)
    lat2_rad = to_radians(lat2)
    delta_lat = to_radians(lat2 - lat1)
    delta_lon = to_radians(lon2 - lon1)

    a = (np.sin(delta_lat / 2.0) ** 2
         + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(delta_lon / 2.0) ** 2)
    # Rounding can push a past 1 for near-antipodal points
    a = np.clip(a, 0.0, 1.0)
    c = 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
    return EARTH_RADIUS_KM * c


def compute_distance(lon1: float, lat1: float, lon2: float, lat2: float,
                     metric: DistanceMetric) -> float:
    """
    Distance between two points.

    Parameters
    ----------
    lon1, lat1, lon2, lat2 : float
        Coordinates in decimal degrees
    metric : DistanceMetric
        HAVERSINE for great-circle distance on a 6371 km sphere,
        EUCLIDEAN for the planar distance in degrees

    Returns
    -------
    float
        Distance in km (Haversine) or degrees (Euclidean). The Euclidean
        metric does not wrap across the antimeridian.
    """
    validate_coordinates([lon1, lon2], [lat1, lat2])

    if metric == DistanceMetric.HAVERSINE:
        return float(_haversine(lon1, lat1, lon2, lat2))
    elif metric == DistanceMetric.EUCLIDEAN:
        delta_lon = lon2 - lon1
        delta_lat = lat2 - lat1
        return math.sqrt(delta_lon * delta_lon + delta_lat * delta_lat)
    else:
        raise InvalidArgumentError(f"Unknown distance metric: {metric}")


def compute_distances(lon: float, lat: float, lons: np.ndarray, lats: np.ndarray,
                      metric: DistanceMetric) -> np.ndarray:
    """
    Distances from one point to an array of points.

    Same units and conventions as :func:`compute_distance`. The array
    coordinates are assumed to be validated already; the single point is
    validated here.
    """
    validate_coordinates(lon, lat)

    if metric == DistanceMetric.HAVERSINE:
        return _haversine(lon, lat, lons, lats)
    elif metric == DistanceMetric.EUCLIDEAN:
        points = np.column_stack([lons, lats])
        return cdist(np.array([[lon, lat]], dtype=np.float64), points)[0]
    else:
        raise InvalidArgumentError(f"Unknown distance metric: {metric}")
