"""
Conversion of point sets to and from pandas and xarray objects.

Columns follow the grid-file convention: longitude, latitude and time step
first, then one column per value.
"""

from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
import xarray as xr

from fastregrid.exceptions import EmptyInputError, LayoutMismatchError
from fastregrid.types import COORDINATE_COLUMNS, SpatialData

DEFAULT_COORDINATE_NAMES = ["Lon", "Lat", "Time"]


def _column_names(n_values: int, headers: Optional[Sequence[str]]) -> List[str]:
    if headers is None:
        return DEFAULT_COORDINATE_NAMES + [f"V{i + 1}" for i in range(n_values)]
    headers = list(headers)
    if len(headers) != COORDINATE_COLUMNS + n_values:
        raise LayoutMismatchError(
            f"Expected {COORDINATE_COLUMNS + n_values} headers, got {len(headers)}"
        )
    return headers


def points_to_dataframe(points: Sequence[SpatialData],
                        headers: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Convert records to a DataFrame with one row per record.

    Parameters
    ----------
    points : sequence of SpatialData
        Records with a uniform number of values
    headers : sequence of str, optional
        Column names; defaults to Lon, Lat, Time, V1 ... Vk

    Returns
    -------
    pandas.DataFrame
    """
    if not len(points):
        return pd.DataFrame(columns=list(headers) if headers is not None else DEFAULT_COORDINATE_NAMES)

    columns = _column_names(len(points[0].values), headers)
    values = np.vstack([p.values for p in points])
    df = pd.DataFrame(values, columns=columns[COORDINATE_COLUMNS:])
    df.insert(0, columns[0], [p.longitude for p in points])
    df.insert(1, columns[1], [p.latitude for p in points])
    df.insert(2, columns[2], np.array([p.time_step for p in points], dtype=np.int64))
    return df


def points_from_dataframe(df: pd.DataFrame) -> List[SpatialData]:
    """
    Convert a DataFrame laid out as by :func:`points_to_dataframe`.

    The first three columns are longitude, latitude and time step; every
    further column is a value.
    """
    if len(df.columns) <= COORDINATE_COLUMNS:
        raise LayoutMismatchError("DataFrame needs Lon, Lat, Time and at least one value column")
    if df.empty:
        raise EmptyInputError("DataFrame has no rows")

    coords = df.iloc[:, :COORDINATE_COLUMNS].to_numpy()
    values = df.iloc[:, COORDINATE_COLUMNS:].to_numpy(dtype=np.float64)
    return [
        SpatialData.from_values(lon, lat, time_step, row)
        for (lon, lat, time_step), row in zip(coords, values)
    ]


def points_to_dataset(points: Sequence[SpatialData],
                      headers: Optional[Sequence[str]] = None) -> xr.Dataset:
    """
    Convert records to a Dataset along a ``point`` dimension.

    The values are stored in a ``values`` variable of shape
    (point, value); the value column names label the ``value`` dimension.
    """
    if not len(points):
        raise EmptyInputError("No points to convert")
    n_values = len(points[0].values)
    columns = _column_names(n_values, headers)

    return xr.Dataset(
        {"values": (["point", "value"], np.vstack([p.values for p in points]))},
        coords={
            "lon": ("point", np.array([p.longitude for p in points])),
            "lat": ("point", np.array([p.latitude for p in points])),
            "time_step": ("point", np.array([p.time_step for p in points], dtype=np.int64)),
            "value": columns[COORDINATE_COLUMNS:],
        },
    )
