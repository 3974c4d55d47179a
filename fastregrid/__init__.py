"""
FastRegrid: regridding of geospatial point data.

This library maps every target point onto nearby source points and
interpolates the source value vectors that share the target's time step:
- Nearest Neighbor and Inverse Distance Weighted interpolation
- Haversine (great-circle, km) and Euclidean (planar, degrees) distances
- Monthly (GRID_BY_TIME) and annual (YEAR_BY_YEAR) input layouts

The primary interfaces are the Regridder class for file-to-file regridding
and regrid_points for in-memory point sets.
"""

__version__ = "0.1.0"

from .types import (  # noqa: F401
    DataLayout,
    DistanceMetric,
    GridPoint,
    IDWMapping,
    InterpolationMethod,
    Neighbor,
    NNMapping,
    SpatialData,
)
from .exceptions import (  # noqa: F401
    EmptyInputError,
    FastRegridError,
    InvalidArgumentError,
    LayoutMismatchError,
    NoInterpolationError,
    NoSourceForTargetError,
    RegridWarning,
)
from .config import RegridConfig, RegridConfigBuilder  # noqa: F401
from .geodesy import adjust_longitude, compute_distance, km_to_degrees, to_radians  # noqa: F401
from .spatial_index import SpatialIndex  # noqa: F401
from .interpolation import Interpolator  # noqa: F401
from .io import InputReader, OutputWriter  # noqa: F401
from .conversion import points_from_dataframe, points_to_dataframe, points_to_dataset  # noqa: F401
from .core import Regridder, RegridResult, regrid_points, validate_headers  # noqa: F401
from .logger import setup_logging  # noqa: F401

# Dask is optional and only needed when RegridConfig.parallel is set
try:
    import dask  # noqa: F401
    HAS_DASK = True
except ImportError:
    HAS_DASK = False

# Public API
__all__ = [
    "DataLayout",
    "DistanceMetric",
    "GridPoint",
    "IDWMapping",
    "InterpolationMethod",
    "Neighbor",
    "NNMapping",
    "SpatialData",
    "EmptyInputError",
    "FastRegridError",
    "InvalidArgumentError",
    "LayoutMismatchError",
    "NoInterpolationError",
    "NoSourceForTargetError",
    "RegridWarning",
    "RegridConfig",
    "RegridConfigBuilder",
    "adjust_longitude",
    "compute_distance",
    "km_to_degrees",
    "to_radians",
    "SpatialIndex",
    "Interpolator",
    "InputReader",
    "OutputWriter",
    "points_from_dataframe",
    "points_to_dataframe",
    "points_to_dataset",
    "Regridder",
    "RegridResult",
    "regrid_points",
    "validate_headers",
    "setup_logging",
    "HAS_DASK",
]
