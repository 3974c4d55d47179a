"""
Configuration for regridding operations.

:class:`RegridConfig` holds every knob read by the engine and the file
collaborators. :class:`RegridConfigBuilder` constructs one with validation
of each setting as it is applied.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping

from fastregrid.exceptions import InvalidArgumentError
from fastregrid.types import DataLayout, DistanceMetric, InterpolationMethod


@dataclass
class RegridConfig:
    """
    Settings for a regrid.

    Attributes
    ----------
    interp_method : InterpolationMethod
        Interpolation method (default: IDW)
    distance_metric : DistanceMetric
        Distance metric (default: Haversine)
    data_layout : DataLayout
        Layout of the input files (default: GRID_BY_TIME)
    radius : float
        IDW search radius in km, converted to degrees for the Euclidean metric
    power : float
        IDW weighting power
    max_points : int
        Maximum number of source points used by IDW
    min_points : int
        Minimum number of source points for IDW; fewer triggers the
        nearest-neighbour fallback
    adjust_longitude : bool
        Normalize longitudes from [0, 360] to [-180, 180] when reading
    precision : int
        Decimal places of fixed-point output
    verbose : bool
        Emit progress messages and diagnostic warnings
    write_mappings : bool
        Write the NN and IDW mapping reports
    write_gridlists : bool
        Write the unique source and target coordinates
    nn_mappings_file, idw_mappings_file, output_file : str
        File names, relative to ``output_path``
    output_path : str
        Output directory for all files, created on demand
    chunk_size : int
        Number of targets per task when ``parallel`` is set
    parallel : bool
        Distribute the per-target loops with Dask
    """

    interp_method: InterpolationMethod = InterpolationMethod.INVERSE_DISTANCE_WEIGHTED
    distance_metric: DistanceMetric = DistanceMetric.HAVERSINE
    data_layout: DataLayout = DataLayout.GRID_BY_TIME
    radius: float = 100.0
    power: float = 2.0
    max_points: int = 5
    min_points: int = 5
    adjust_longitude: bool = True
    precision: int = 5
    verbose: bool = False
    write_mappings: bool = False
    write_gridlists: bool = True
    nn_mappings_file: str = "nn_mappings.txt"
    idw_mappings_file: str = "idw_mappings.txt"
    output_file: str = "regridded.txt"
    output_path: str = "./"
    chunk_size: int = 1000
    parallel: bool = False

    @classmethod
    def from_dict(cls, settings: Mapping[str, Any]) -> "RegridConfig":
        """
        Build a validated configuration from plain values.

        Enumerations may be given by name or value, case-insensitively
        (``"nn"``, ``"IDW"``, ``"haversine"``, ``"grid_by_time"`` ...).

        Parameters
        ----------
        settings : mapping
            Field names of :class:`RegridConfig` and their values

        Returns
        -------
        RegridConfig

        Raises
        ------
        InvalidArgumentError
            On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise InvalidArgumentError(f"Unknown configuration keys: {unknown}")

        builder = RegridConfigBuilder()
        # max_points must be applied before min_points, see set_max_points
        ordered = sorted(settings.items(), key=lambda item: item[0] != "max_points")
        for key, value in ordered:
            getattr(builder, f"set_{key}")(value)
        return builder.build()

    def to_dict(self) -> Dict[str, Any]:
        """Return the settings as plain values."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = value.value if hasattr(value, "value") else value
        return result


class RegridConfigBuilder:
    """Chained builder for :class:`RegridConfig` with argument validation."""

    def __init__(self):
        self._config = RegridConfig()

    def set_interp_method(self, method):
        self._config.interp_method = InterpolationMethod.from_string(method)
        return self

    # Spelling used throughout the documentation
    set_interpolation = set_interp_method

    def set_distance_metric(self, metric):
        self._config.distance_metric = DistanceMetric.from_string(metric)
        return self

    def set_data_layout(self, layout):
        self._config.data_layout = DataLayout.from_string(layout)
        return self

    def set_radius(self, radius: float):
        if radius < 0.0:
            raise InvalidArgumentError("Radius must be non-negative")
        self._config.radius = float(radius)
        return self

    def set_power(self, power: float):
        if power <= 0.0:
            raise InvalidArgumentError("Power must be positive")
        self._config.power = float(power)
        return self

    def set_max_points(self, max_points: int):
        if max_points <= 0:
            raise InvalidArgumentError("Max points must be positive")
        self._config.max_points = int(max_points)
        if self._config.min_points > max_points:
            self._config.min_points = int(max_points)
        return self

    def set_min_points(self, min_points: int):
        if min_points <= 0:
            raise InvalidArgumentError("Min points must be positive")
        if min_points > self._config.max_points:
            raise InvalidArgumentError("Min points cannot exceed max points")
        self._config.min_points = int(min_points)
        return self

    def set_adjust_longitude(self, adjust: bool):
        self._config.adjust_longitude = bool(adjust)
        return self

    def set_precision(self, precision: int):
        if precision < 0:
            raise InvalidArgumentError("Precision must be non-negative")
        self._config.precision = int(precision)
        return self

    def set_verbose(self, verbose: bool):
        self._config.verbose = bool(verbose)
        return self

    def set_write_mappings(self, write: bool):
        self._config.write_mappings = bool(write)
        return self

    def set_write_gridlists(self, write: bool):
        self._config.write_gridlists = bool(write)
        return self

    def set_nn_mappings_file(self, filename: str):
        if not filename:
            raise InvalidArgumentError("Nearest Neighbor mappings filename cannot be empty")
        self._config.nn_mappings_file = filename
        return self

    def set_idw_mappings_file(self, filename: str):
        if not filename:
            raise InvalidArgumentError("IDW mappings filename cannot be empty")
        self._config.idw_mappings_file = filename
        return self

    def set_output_file(self, filename: str):
        if not filename:
            raise InvalidArgumentError("Output filename cannot be empty")
        self._config.output_file = filename
        return self

    def set_output_path(self, path: str):
        self._config.output_path = str(path)
        return self

    def set_chunk_size(self, chunk_size: int):
        if chunk_size <= 0:
            raise InvalidArgumentError("Chunk size must be positive")
        self._config.chunk_size = int(chunk_size)
        return self

    def set_parallel(self, parallel: bool):
        self._config.parallel = bool(parallel)
        return self

    def build(self) -> RegridConfig:
        """Return a copy of the configuration built so far."""
        return RegridConfig(**{f.name: getattr(self._config, f.name)
                               for f in fields(RegridConfig)})
