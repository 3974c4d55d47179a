"""
Tests for the point records.
"""

import pytest
import numpy as np

from fastregrid.exceptions import InvalidArgumentError
from fastregrid.types import GridPoint, SpatialData


class TestSpatialData:
    def test_from_values(self):
        point = SpatialData.from_values(1, 2, 2000, [1, 2])
        assert point.grid_point == GridPoint(1.0, 2.0)
        assert point.time_step == 2000
        assert point.values.dtype == np.float64

    @pytest.mark.parametrize("time_step", [2000.0, np.float64(2000.0), np.int32(2000)])
    def test_integral_time_step_accepted(self, time_step):
        point = SpatialData.from_values(0.0, 0.0, time_step, [1.0])
        assert point.time_step == 2000
        assert isinstance(point.time_step, int)

    @pytest.mark.parametrize("time_step", [2000.7, np.float64(-0.5), float("nan")])
    def test_fractional_time_step_rejected(self, time_step):
        with pytest.raises(InvalidArgumentError, match="Time step must be an integer"):
            SpatialData.from_values(0.0, 0.0, time_step, [1.0])
