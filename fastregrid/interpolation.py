"""
Interpolation of source values onto mapped target points.

The :class:`Interpolator` consumes the mappings produced by
:class:`~fastregrid.spatial_index.SpatialIndex` and the source value
vectors. Nearest neighbour copies the values of the mapped source;
Inverse Distance Weighting computes a weighted mean of the neighbours.
"""

import logging
import warnings
from typing import List, Optional, Sequence

import numpy as np

from fastregrid.config import RegridConfig
from fastregrid.exceptions import (
    EmptyInputError,
    InvalidArgumentError,
    LayoutMismatchError,
    NoInterpolationError,
    RegridWarning,
)
from fastregrid.types import IDWMapping, InterpolationMethod, NNMapping, SpatialData

logger = logging.getLogger(__name__)

# Coordinate tolerance, in degrees, when matching a mapping to a source record
COORDINATE_TOLERANCE = 1e-6

# Distances at or below this are treated as coincident
ZERO_DISTANCE = 1e-6

# Finite weight given to a coincident source
ZERO_DISTANCE_WEIGHT = 1e6


def idw_weights(distances: Sequence[float], power: float) -> np.ndarray:
    """
    Relative inverse distance weights.

    Each weight is ``1 / d**power``, or ``1e6`` for a coincident point
    (``d <= 1e-6``). The weights are evaluated in log space and scaled so
    that the largest is 1, which leaves the weighted mean unchanged and
    keeps large powers from overflowing.

    Parameters
    ----------
    distances : sequence of float
        Neighbour distances in km
    power : float
        Weighting power

    Returns
    -------
    np.ndarray
        Weights in [0, 1], largest equal to 1
    """
    distances = np.asarray(distances, dtype=np.float64)
    log_weights = np.full(distances.shape, np.log(ZERO_DISTANCE_WEIGHT))
    far = distances > ZERO_DISTANCE
    log_weights[far] = -power * np.log(distances[far])
    with np.errstate(under="ignore"):
        return np.exp(log_weights - log_weights.max())


class Interpolator:
    """
    Nearest-neighbour and IDW interpolation engine.

    Mappings only report source coordinates; the full source record is
    located by longitude, latitude and the time step of the target.
    """

    def __init__(self, source_points: Sequence[SpatialData], config: RegridConfig):
        """
        Initialize the Interpolator.

        Parameters
        ----------
        source_points : sequence of SpatialData
            Source records, all with the same number of values
        config : RegridConfig
            Reads ``interp_method``, ``power``, ``verbose``, ``parallel``
            and ``chunk_size``
        """
        if len(source_points) == 0:
            raise EmptyInputError("Source point list is empty")

        value_size = len(source_points[0].values)
        for point in source_points:
            if len(point.values) != value_size:
                raise LayoutMismatchError("Inconsistent value sizes in source points")

        self.source_points = source_points
        self.config = config
        self.value_size = value_size
        self._source_lons = np.array([p.longitude for p in source_points], dtype=np.float64)
        self._source_lats = np.array([p.latitude for p in source_points], dtype=np.float64)
        self._source_values = np.vstack([p.values for p in source_points])

        # Positions of the sources of each time step, in input order
        time_steps = np.array([p.time_step for p in source_points])
        self._by_time_step = {
            int(step): np.flatnonzero(time_steps == step) for step in np.unique(time_steps)
        }

    def interpolate(
        self,
        target_points: Sequence[SpatialData],
        nn_mappings: Optional[Sequence[NNMapping]] = None,
        idw_mappings: Optional[Sequence[IDWMapping]] = None,
    ) -> List[SpatialData]:
        """
        Interpolate source values to the target points.

        Parameters
        ----------
        target_points : sequence of SpatialData
            The targets the mappings refer to
        nn_mappings : sequence of NNMapping, optional
            Required when the configured method is nearest neighbour
        idw_mappings : sequence of IDWMapping, optional
            Required when the configured method is IDW

        Returns
        -------
        list of SpatialData
            One record per successfully resolved mapping
        """
        method = self.config.interp_method
        if method == InterpolationMethod.NEAREST_NEIGHBOR:
            if nn_mappings is None:
                raise InvalidArgumentError("Nearest Neighbor interpolation requires NN mappings")
            return self.interpolate_nearest_neighbor(target_points, nn_mappings)
        elif method == InterpolationMethod.INVERSE_DISTANCE_WEIGHTED:
            if idw_mappings is None:
                raise InvalidArgumentError("IDW interpolation requires IDW mappings")
            return self.interpolate_idw(target_points, idw_mappings)
        else:
            raise InvalidArgumentError(f"Unknown interpolation method: {method}")

    def interpolate_nearest_neighbor(
        self,
        target_points: Sequence[SpatialData],
        mappings: Sequence[NNMapping],
    ) -> List[SpatialData]:
        """Copy the values of the mapped source to each target."""
        def interpolate_one(_, mapping):
            target = self._target_for(target_points, mapping.target_index, "NN")
            return self._copy_source_values(target, mapping.source_lon, mapping.source_lat)

        result = self._collect(interpolate_one, mappings)
        if not result:
            raise NoInterpolationError("No points interpolated in NN mode")
        return result

    def interpolate_idw(
        self,
        target_points: Sequence[SpatialData],
        mappings: Sequence[IDWMapping],
    ) -> List[SpatialData]:
        """
        Weighted mean of the neighbour values of each target.

        Fallback mappings are treated as nearest neighbour. Neighbours whose
        source record cannot be found are skipped; a target none of whose
        neighbours resolve is omitted from the result.
        """
        def interpolate_one(_, mapping):
            target = self._target_for(target_points, mapping.target_index, "IDW")
            if mapping.is_fallback:
                if len(mapping.neighbors) != 1:
                    raise InvalidArgumentError(
                        "Invalid fallback mapping: expected one source point"
                    )
                neighbor = mapping.neighbors[0]
                return self._copy_source_values(target, neighbor.source_lon, neighbor.source_lat)
            return self._weighted_mean(target, mapping)

        result = self._collect(interpolate_one, mappings)
        if not result:
            raise NoInterpolationError("No points interpolated in IDW mode")
        return result

    def _collect(self, interpolate_one, mappings) -> List[SpatialData]:
        if self.config.parallel:
            from fastregrid.dask import ParallelProcessor

            processor = ParallelProcessor(chunk_size=self.config.chunk_size)
            records = processor.map_targets(interpolate_one, mappings)
        else:
            records = [interpolate_one(i, mapping) for i, mapping in enumerate(mappings)]
        result = [record for record in records if record is not None]
        logger.debug("Interpolated %d of %d mapped targets", len(result), len(mappings))
        return result

    @staticmethod
    def _target_for(target_points, target_index: int, mode: str) -> SpatialData:
        if not 0 <= target_index < len(target_points):
            raise InvalidArgumentError(f"Invalid target index in {mode} mapping: {target_index}")
        return target_points[target_index]

    def find_source(self, longitude: float, latitude: float, time_step: int) -> Optional[int]:
        """
        Locate a source record by coordinates and time step.

        Returns
        -------
        int or None
            Position of the first matching source, or None if no source
            lies within 1e-6 degrees with the same time step
        """
        candidates = self._by_time_step.get(int(time_step))
        if candidates is None:
            return None
        matches = candidates[
            (np.abs(self._source_lons[candidates] - longitude) < COORDINATE_TOLERANCE)
            & (np.abs(self._source_lats[candidates] - latitude) < COORDINATE_TOLERANCE)
        ]
        if matches.size == 0:
            return None
        return int(matches[0])

    def _copy_source_values(self, target: SpatialData, source_lon: float,
                            source_lat: float) -> Optional[SpatialData]:
        index = self.find_source(source_lon, source_lat, target.time_step)
        if index is None:
            if self.config.verbose:
                warnings.warn(
                    f"No source point found for target ({target.longitude}, {target.latitude}, "
                    f"{target.time_step}) at source ({source_lon}, {source_lat})",
                    RegridWarning,
                )
            return None
        return SpatialData(target.grid_point, target.time_step, self._source_values[index].copy())

    def _weighted_mean(self, target: SpatialData, mapping: IDWMapping) -> Optional[SpatialData]:
        indices = []
        distances = []
        for neighbor in mapping.neighbors:
            index = self.find_source(neighbor.source_lon, neighbor.source_lat, target.time_step)
            if index is None:
                if self.config.verbose:
                    warnings.warn(
                        f"No source point found for ({neighbor.source_lon}, {neighbor.source_lat}, "
                        f"{target.time_step}) in IDW interpolation",
                        RegridWarning,
                    )
                continue
            indices.append(index)
            distances.append(neighbor.distance_km)

        if not indices:
            if self.config.verbose:
                warnings.warn(
                    f"No valid source points for target ({mapping.target_lon}, "
                    f"{mapping.target_lat}, {target.time_step}) in IDW interpolation",
                    RegridWarning,
                )
            return None

        weights = idw_weights(distances, self.config.power)
        values = weights @ self._source_values[indices] / weights.sum()
        return SpatialData(target.grid_point, target.time_step, values)
