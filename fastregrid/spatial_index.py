"""
Spatial mapping of target points onto source points.

The :class:`SpatialIndex` performs an exact search over all source points
for every target. It produces nearest-neighbour mappings and IDW neighbour
sets; the latter fall back to the nearest neighbour when too few sources
lie within the search radius.
"""

import logging
import warnings
from typing import Callable, List, Sequence, Tuple, TypeVar

import numpy as np

from fastregrid.config import RegridConfig
from fastregrid.exceptions import EmptyInputError, NoSourceForTargetError, RegridWarning
from fastregrid.geodesy import compute_distances, degrees_to_km, km_to_degrees, validate_coordinates
from fastregrid.types import DistanceMetric, IDWMapping, Neighbor, NNMapping, SpatialData

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SpatialIndex:
    """
    Exhaustive nearest-neighbour and radius search over a source point set.

    The source sequence is borrowed and never modified. Both search
    operations are pure functions of their inputs and the configuration.
    """

    def __init__(self, source_points: Sequence[SpatialData], config: RegridConfig):
        """
        Initialize the spatial index.

        Parameters
        ----------
        source_points : sequence of SpatialData
            The source points to search
        config : RegridConfig
            Reads ``distance_metric``, ``radius``, ``min_points``,
            ``max_points``, ``verbose``, ``parallel`` and ``chunk_size``
        """
        if len(source_points) == 0:
            raise EmptyInputError("Source point list is empty")

        self.source_points = source_points
        self.config = config
        self._source_lons = np.array([p.longitude for p in source_points], dtype=np.float64)
        self._source_lats = np.array([p.latitude for p in source_points], dtype=np.float64)
        validate_coordinates(self._source_lons, self._source_lats)

    def __len__(self):
        return len(self.source_points)

    def find_nearest_neighbors(self, target_points: Sequence[SpatialData]) -> List[NNMapping]:
        """
        Find the nearest source point of every target point.

        Parameters
        ----------
        target_points : sequence of SpatialData
            Targets to map

        Returns
        -------
        list of NNMapping
            One mapping per target, in target order. Distances are in km
            regardless of the metric.
        """
        return self._map_targets(self._map_nearest, target_points)

    def find_idw_neighbors(self, target_points: Sequence[SpatialData]) -> List[IDWMapping]:
        """
        Find up to ``max_points`` sources within ``radius`` of every target.

        Targets with fewer than ``min_points`` sources in range fall back
        to their nearest neighbour and are flagged with ``is_fallback``.

        Parameters
        ----------
        target_points : sequence of SpatialData
            Targets to map

        Returns
        -------
        list of IDWMapping
            One mapping per target, in target order. Neighbour distances
            are in km regardless of the metric.

        Raises
        ------
        NoSourceForTargetError
            If a target ends up with no neighbour at all
        """
        return self._map_targets(self._map_idw, target_points)

    def _map_targets(self, map_func: Callable[[int, SpatialData], T],
                     target_points: Sequence[SpatialData]) -> List[T]:
        logger.debug("Mapping %d target points onto %d source points",
                     len(target_points), len(self.source_points))
        if self.config.parallel:
            from fastregrid.dask import ParallelProcessor

            processor = ParallelProcessor(chunk_size=self.config.chunk_size)
            return processor.map_targets(map_func, target_points)
        return [map_func(t_idx, target) for t_idx, target in enumerate(target_points)]

    def _distances_to(self, target: SpatialData) -> np.ndarray:
        return compute_distances(target.longitude, target.latitude,
                                 self._source_lons, self._source_lats,
                                 self.config.distance_metric)

    def _to_km(self, distance, latitude: float):
        if self.config.distance_metric == DistanceMetric.HAVERSINE:
            return distance
        return degrees_to_km(distance, latitude)

    def _nearest(self, distances: np.ndarray) -> Tuple[int, float]:
        # argmin returns the first occurrence, ties go to the first-seen source
        index = int(np.argmin(distances))
        return index, float(distances[index])

    def _map_nearest(self, t_idx: int, target: SpatialData) -> NNMapping:
        distances = self._distances_to(target)
        index, distance = self._nearest(distances)
        dist_km = float(self._to_km(distance, target.latitude))

        if self.config.verbose and dist_km > self.config.radius:
            warnings.warn(
                f"Nearest source point for target ({target.longitude}, {target.latitude}) "
                f"is at distance {dist_km} km, exceeding radius {self.config.radius} km",
                RegridWarning,
            )

        return NNMapping(
            target.longitude, target.latitude,
            float(self._source_lons[index]), float(self._source_lats[index]),
            dist_km, t_idx,
        )

    def _map_idw(self, t_idx: int, target: SpatialData) -> IDWMapping:
        config = self.config
        distances = self._distances_to(target)

        if config.distance_metric == DistanceMetric.EUCLIDEAN:
            limit = km_to_degrees(config.radius, target.latitude)
        else:
            limit = config.radius
        candidates = np.flatnonzero(distances <= limit)

        if candidates.size < config.min_points:
            if config.verbose:
                warnings.warn(
                    f"Only {candidates.size} points found within radius {config.radius} km "
                    f"for target ({target.longitude}, {target.latitude}); falling back to "
                    f"Nearest Neighbor (min_points = {config.min_points})",
                    RegridWarning,
                )
            is_fallback = True
            index, distance = self._nearest(distances)
            neighbors = (
                Neighbor(float(self._source_lons[index]), float(self._source_lats[index]),
                         float(self._to_km(distance, target.latitude))),
            )
        else:
            is_fallback = False
            order = np.argsort(distances[candidates], kind="stable")
            selected = candidates[order][:config.max_points]
            dist_km = self._to_km(distances[selected], target.latitude)
            neighbors = tuple(
                Neighbor(float(self._source_lons[i]), float(self._source_lats[i]), float(d))
                for i, d in zip(selected, dist_km)
            )

        if not neighbors:
            raise NoSourceForTargetError(target.longitude, target.latitude)

        return IDWMapping(target.longitude, target.latitude, neighbors, t_idx, is_fallback)
