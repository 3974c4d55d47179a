"""
Tests for core module functionality.
This module contains tests for the Regridder pipeline and regrid_points.
"""

import pytest
import numpy as np

from conftest import MONTHLY_HEADERS, make_point, write_grid_file
from fastregrid.config import RegridConfig, RegridConfigBuilder
from fastregrid.core import (
    SOURCE_GRIDLIST_FILE,
    TARGET_GRIDLIST_FILE,
    Regridder,
    RegridResult,
    regrid_points,
    validate_headers,
)
from fastregrid.exceptions import (
    EmptyInputError,
    InvalidArgumentError,
    LayoutMismatchError,
    NoInterpolationError,
)
from fastregrid.io import InputReader
from fastregrid.types import DataLayout


class TestValidateHeaders:
    def test_matching_monthly(self):
        validate_headers(MONTHLY_HEADERS, MONTHLY_HEADERS, DataLayout.GRID_BY_TIME)

    def test_matching_annual(self):
        headers = ["Lon", "Lat", "Year", "Total", "Max"]
        validate_headers(headers, headers, DataLayout.YEAR_BY_YEAR)

    def test_too_few_columns(self):
        with pytest.raises(LayoutMismatchError, match="Invalid headers"):
            validate_headers(["Lon", "Lat"], ["Lon", "Lat", "Year"], DataLayout.YEAR_BY_YEAR)

    def test_monthly_requires_fifteen_columns(self):
        headers = ["Lon", "Lat", "Year", "Total"]
        with pytest.raises(LayoutMismatchError, match="12 monthly value columns"):
            validate_headers(headers, headers, DataLayout.GRID_BY_TIME)

    def test_column_count_mismatch(self):
        with pytest.raises(LayoutMismatchError, match="different number of columns"):
            validate_headers(["Lon", "Lat", "Year", "A"], ["Lon", "Lat", "Year", "A", "B"],
                             DataLayout.YEAR_BY_YEAR)


class TestRegridPoints:
    """In-memory regridding."""

    def test_default_config(self, equator_sources):
        targets = [make_point(0.001, 0.0, 1, [0.0])]
        result = regrid_points(equator_sources, targets,
                               RegridConfigBuilder().set_max_points(1).build())

        assert isinstance(result, RegridResult)
        assert len(result) == 1
        assert result.nn_mappings == []
        assert len(result.idw_mappings) == 1
        assert result.points[0].values[0] == pytest.approx(10.0)

    def test_nn_only_computes_nn_mappings(self, nn_config, equator_sources):
        result = regrid_points(equator_sources, [make_point(0.4, 0.0, 1, [0.0])], nn_config)
        assert len(result.nn_mappings) == 1
        assert result.idw_mappings == []

    def test_write_mappings_computes_both(self, equator_sources):
        config = RegridConfigBuilder().set_interp_method("nn").set_write_mappings(True).build()
        result = regrid_points(equator_sources, [make_point(0.4, 0.0, 1, [0.0])], config)
        assert len(result.nn_mappings) == 1
        assert len(result.idw_mappings) == 1

    def test_sources_not_modified(self, idw_config, regular_sources):
        before = [(p.longitude, p.latitude, p.time_step, p.values.copy()) for p in regular_sources]
        targets = [make_point(-2.5, 42.5, 2000, [0.0, 0.0]), make_point(-1.2, 40.1, 2001, [0.0, 0.0])]
        regrid_points(regular_sources, targets, idw_config)

        for point, (lon, lat, time_step, values) in zip(regular_sources, before):
            assert (point.longitude, point.latitude, point.time_step) == (lon, lat, time_step)
            np.testing.assert_array_equal(point.values, values)

    def test_empty_inputs(self, nn_config, equator_sources):
        with pytest.raises(EmptyInputError):
            regrid_points([], equator_sources, nn_config)
        with pytest.raises(EmptyInputError):
            regrid_points(equator_sources, [], nn_config)

    def test_headers_carried(self, nn_config, equator_sources):
        result = regrid_points(equator_sources, [make_point(0.0, 0.0, 1, [0.0])], nn_config,
                               headers=("Lon", "Lat", "Year", "Total"))
        assert result.headers == ["Lon", "Lat", "Year", "Total"]
        assert list(result.to_dataframe().columns) == ["Lon", "Lat", "Year", "Total"]


class TestRegridder:
    """File-to-file pipeline."""

    def test_empty_path(self):
        with pytest.raises(InvalidArgumentError):
            Regridder("", "target.txt")

    def test_nearest_neighbor_pipeline(self, monthly_files, tmp_path):
        source, target = monthly_files
        config = RegridConfigBuilder().set_interp_method("nn") \
            .set_output_path(str(tmp_path / "out")).build()
        result = Regridder(source, target, config).regrid()

        assert len(result) == 4
        assert result.headers == MONTHLY_HEADERS
        # (10, 50) coincides with a source
        np.testing.assert_allclose(result.points[0].values, [60.0 + m for m in range(12)])
        np.testing.assert_allclose(result.points[1].values, [160.0 + m for m in range(12)])

        assert set(result.output_files) == {"source_gridlist", "target_gridlist", "regridded"}
        assert result.output_files["source_gridlist"].name == SOURCE_GRIDLIST_FILE
        assert result.output_files["target_gridlist"].name == TARGET_GRIDLIST_FILE
        for path in result.output_files.values():
            assert path.exists()

    def test_idw_pipeline(self, monthly_files, tmp_path):
        source, target = monthly_files
        config = (
            RegridConfigBuilder()
            .set_radius(200.0)
            .set_max_points(4)
            .set_min_points(4)
            .set_output_path(str(tmp_path / "out"))
            .build()
        )
        result = Regridder(source, target, config).regrid()

        assert len(result) == 4
        assert not any(m.is_fallback for m in result.idw_mappings)
        # Target (10.5, 50.5) lies inside the four source cells
        centre = result.points[2].values
        assert np.all(centre >= 60.0) and np.all(centre <= 62.0 + 11)

    def test_output_file_read_back(self, monthly_files, tmp_path):
        source, target = monthly_files
        config = RegridConfigBuilder().set_interp_method("nn") \
            .set_output_path(str(tmp_path / "out")).set_output_file("result.txt").build()
        result = Regridder(source, target, config).regrid()

        path = result.output_files["regridded"]
        assert path.name == "result.txt"
        reader = InputReader(path, config)
        assert reader.read_headers() == MONTHLY_HEADERS
        read = reader.read_grid()
        assert len(read) == len(result.points)
        for written, expected in zip(read, result.points):
            assert written.time_step == expected.time_step
            np.testing.assert_allclose(written.values, expected.values, atol=1e-5)

    def test_mapping_files_written(self, monthly_files, tmp_path):
        source, target = monthly_files
        config = RegridConfigBuilder().set_write_mappings(True).set_write_gridlists(False) \
            .set_output_path(str(tmp_path / "out")).build()
        result = Regridder(source, target, config).regrid()

        assert set(result.output_files) == {"nn_mappings", "idw_mappings", "regridded"}
        assert result.output_files["nn_mappings"].name == "nn_mappings.txt"
        assert result.output_files["idw_mappings"].name == "idw_mappings.txt"
        nn_lines = result.output_files["nn_mappings"].read_text().splitlines()
        # Header, separator, and a row plus separator per target
        assert len(nn_lines) == 2 + 2 * 4

    def test_header_mismatch(self, monthly_files, tmp_path):
        source, _ = monthly_files
        target = write_grid_file(tmp_path / "short.txt", ["Lon", "Lat", "Year", "Total"],
                                 [[10.0, 50.0, 2000, 1.0]])
        config = RegridConfig(data_layout=DataLayout.YEAR_BY_YEAR, output_path=str(tmp_path / "out"))
        with pytest.raises(LayoutMismatchError, match="different number of columns"):
            Regridder(source, target, config).regrid()

    def test_no_matching_time_steps(self, monthly_files, tmp_path):
        source, _ = monthly_files
        target = write_grid_file(tmp_path / "future.txt", MONTHLY_HEADERS,
                                 [[10.0, 50.0, 2050] + [0.0] * 12])
        config = RegridConfigBuilder().set_interp_method("nn") \
            .set_output_path(str(tmp_path / "out")).build()
        with pytest.raises(NoInterpolationError):
            Regridder(source, target, config).regrid()

    def test_verbose_progress_logged(self, monthly_files, tmp_path, caplog):
        source, target = monthly_files
        config = RegridConfigBuilder().set_interp_method("nn").set_verbose(True) \
            .set_output_path(str(tmp_path / "out")).build()
        with caplog.at_level("INFO", logger="fastregrid"):
            Regridder(source, target, config).regrid()
        assert "Regridding completed successfully." in caplog.text
