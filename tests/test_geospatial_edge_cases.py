"""
Geospatial Edge Cases Test for FastRegrid.

This module contains tests for geospatial edge cases in the regridding library:
1. Data at or near the North and South Poles, where all longitudes converge
2. Regridding across the 180 degree longitude line (antimeridian/dateline)
3. Longitudes given in [0, 360] instead of [-180, 180]
"""

import pytest
import numpy as np

from conftest import make_point
from fastregrid.config import RegridConfigBuilder
from fastregrid.core import regrid_points
from fastregrid.geodesy import adjust_longitude
from fastregrid.spatial_index import SpatialIndex


def nn(metric="haversine"):
    return RegridConfigBuilder().set_interp_method("nn").set_distance_metric(metric).build()


class TestPolesEdgeCases:
    """Test regridding near the poles (North and South)."""

    def test_pole_longitude_convergence(self):
        """All longitudes at the pole are the same location under Haversine."""
        sources = [make_point(lon, 90.0, 1, [10.0]) for lon in (0.0, 90.0, 180.0, -90.0)]
        mapping = SpatialIndex(sources, nn()).find_nearest_neighbors([make_point(45.0, 90.0, 1, [0.0])])[0]
        assert mapping.distance_km == pytest.approx(0.0, abs=1e-6)

    def test_near_pole_nearest_across_longitudes(self):
        """Close to the pole the nearest source can be on the far side in longitude."""
        sources = [make_point(0.0, 80.0, 1, [1.0]), make_point(180.0, 89.0, 1, [2.0])]
        targets = [make_point(0.0, 89.5, 1, [0.0])]
        result = regrid_points(sources, targets, nn())
        assert result.points[0].values[0] == 2.0

    def test_south_pole_idw(self):
        sources = [make_point(lon, -89.0, 1, [5.0]) for lon in (0.0, 90.0, 180.0, -90.0)]
        config = (
            RegridConfigBuilder().set_radius(200.0).set_max_points(4).set_min_points(4).build()
        )
        result = regrid_points(sources, [make_point(0.0, -90.0, 1, [0.0])], config)

        assert result.idw_mappings[0].is_fallback is False
        assert result.points[0].values[0] == pytest.approx(5.0)

    def test_euclidean_radius_at_pole_saturates(self):
        """At the pole the converted Euclidean radius admits every source."""
        sources = [make_point(-100.0, 10.0, 1, [1.0]), make_point(100.0, -10.0, 1, [3.0])]
        config = (
            RegridConfigBuilder().set_distance_metric("euclidean").set_radius(1.0)
            .set_max_points(2).set_min_points(2).build()
        )
        mapping = SpatialIndex(sources, config).find_idw_neighbors([make_point(0.0, 90.0, 1, [0.0])])[0]
        assert mapping.is_fallback is False
        assert len(mapping.neighbors) == 2


class TestAntimeridianEdgeCases:
    """Test regridding across the 180 degree longitude line."""

    def test_haversine_crosses_dateline(self):
        """179.9W is closer to 179.9E than to 179.5W under Haversine."""
        sources = [make_point(179.9, 0.0, 1, [1.0]), make_point(-179.5, 0.0, 1, [2.0])]
        result = regrid_points(sources, [make_point(-179.9, 0.0, 1, [0.0])], nn())
        assert result.points[0].values[0] == 1.0
        assert result.nn_mappings[0].distance_km == pytest.approx(22.24, abs=0.01)

    def test_euclidean_does_not_wrap(self):
        sources = [make_point(179.9, 0.0, 1, [1.0]), make_point(-179.5, 0.0, 1, [2.0])]
        result = regrid_points(sources, [make_point(-179.9, 0.0, 1, [0.0])], nn("euclidean"))
        assert result.points[0].values[0] == 2.0

    def test_idw_neighbors_on_both_sides(self):
        sources = [make_point(179.5, 0.0, 1, [10.0]), make_point(-179.5, 0.0, 1, [30.0])]
        config = RegridConfigBuilder().set_radius(100.0).set_max_points(2).set_min_points(2).build()
        result = regrid_points(sources, [make_point(180.0, 0.0, 1, [0.0])], config)

        assert result.idw_mappings[0].is_fallback is False
        assert result.points[0].values[0] == pytest.approx(20.0)


class TestAntipodalPoints:
    """Sources on the opposite side of the globe from the target."""

    TARGET = (31.004303332583817, 9.628109386841672)

    def sources(self):
        lon, lat = self.TARGET
        return [make_point(lon - 180.0, -lat, 1, [1.0]), make_point(lon + 0.1, lat, 1, [2.0])]

    def test_nearest_is_not_the_antipode(self):
        lon, lat = self.TARGET
        result = regrid_points(self.sources(), [make_point(lon, lat, 1, [0.0])], nn())

        mapping = result.nn_mappings[0]
        assert result.points[0].values[0] == 2.0
        assert np.isfinite(mapping.distance_km)
        assert mapping.distance_km == pytest.approx(10.96, abs=0.01)

    def test_idw_fallback_ignores_the_antipode(self):
        lon, lat = self.TARGET
        config = RegridConfigBuilder().set_radius(1.0).set_max_points(2).set_min_points(2).build()
        mapping = SpatialIndex(self.sources(), config).find_idw_neighbors([make_point(lon, lat, 1, [0.0])])[0]

        assert mapping.is_fallback is True
        assert mapping.neighbors[0].source_lon == pytest.approx(lon + 0.1)
        assert np.isfinite(mapping.neighbors[0].distance_km)

    def test_antipode_admitted_by_global_radius(self):
        lon, lat = self.TARGET
        config = RegridConfigBuilder().set_radius(20100.0).set_max_points(2).set_min_points(2).build()
        mapping = SpatialIndex(self.sources(), config).find_idw_neighbors([make_point(lon, lat, 1, [0.0])])[0]

        assert mapping.is_fallback is False
        assert [n.source_lon for n in mapping.neighbors] == pytest.approx([lon + 0.1, lon - 180.0])
        assert np.all(np.isfinite([n.distance_km for n in mapping.neighbors]))


class TestLongitudeConventions:
    def test_zero_to_360_sources(self):
        """Normalized sources from a [0, 360] grid match [-180, 180] targets."""
        raw = np.array([350.0, 10.0])
        sources = [make_point(lon, 0.0, 1, [value]) for lon, value in zip(adjust_longitude(raw), [1.0, 2.0])]
        result = regrid_points(sources, [make_point(-9.0, 0.0, 1, [0.0])], nn())
        assert result.points[0].values[0] == 1.0

    def test_unadjusted_longitudes_accepted(self):
        """Longitudes in (180, 360] are valid input even without normalization."""
        sources = [make_point(350.0, 0.0, 1, [1.0]), make_point(10.0, 0.0, 1, [2.0])]
        result = regrid_points(sources, [make_point(-9.0, 0.0, 1, [0.0])], nn())
        # Haversine is periodic in longitude
        assert result.points[0].values[0] == 1.0
