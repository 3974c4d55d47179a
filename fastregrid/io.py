"""
Input/output of grid files, gridlists and mapping reports.

Grid files are whitespace-delimited text: a header line followed by
``<lon> <lat> <time_step> <v1> ... <vk>`` records. All output is written
in fixed-point notation with the configured precision.
"""

import logging
import warnings
from pathlib import Path
from typing import List, Sequence, Union

import pandas as pd

from fastregrid.config import RegridConfig
from fastregrid.exceptions import (
    EmptyInputError,
    InvalidArgumentError,
    LayoutMismatchError,
    RegridWarning,
)
from fastregrid.geodesy import MAX_ABS_LATITUDE, MAX_ABS_LONGITUDE, adjust_longitude
from fastregrid.types import (
    COORDINATE_COLUMNS,
    MONTHS_PER_RECORD,
    DataLayout,
    GridPoint,
    IDWMapping,
    NNMapping,
    SpatialData,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

COORDINATE_WIDTH = 10
VALUE_WIDTH = 12
FALLBACK_WIDTH = 8
NN_SEPARATOR = "-" * 68
IDW_SEPARATOR = "-" * 80


def ensure_directory(path: PathLike) -> Path:
    """Create ``path`` and any missing parents; return it as a Path."""
    path = Path(path)
    if not path.is_dir():
        logger.debug("Creating directory: %s", path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _parse_time_step(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        value = float(token)
        if not value.is_integer():
            raise
        return int(value)


class InputReader:
    """
    Reader for one whitespace-delimited grid file.
    """

    def __init__(self, filename: PathLike, config: RegridConfig):
        self.filename = Path(filename)
        self.config = config

    def read_headers(self) -> List[str]:
        """Return the tokens of the header line."""
        with open(self.filename, "r") as f:
            return f.readline().split()

    def read_grid(self) -> List[SpatialData]:
        """
        Read all records of the file.

        Returns
        -------
        list of SpatialData
            Records in file order

        Raises
        ------
        InvalidArgumentError
            If a record has |lat| > 90 or |lon| > 360
        LayoutMismatchError
            If the values of a record do not match the configured layout
        EmptyInputError
            If the file holds no records
        """
        points = []
        value_count = None

        with open(self.filename, "r") as f:
            next(f, None)  # header
            for line_num, line in enumerate(f, start=2):
                tokens = line.split()
                if not tokens:
                    continue
                try:
                    lon = float(tokens[0])
                    lat = float(tokens[1])
                    time_step = _parse_time_step(tokens[2])
                except (IndexError, ValueError):
                    if self.config.verbose:
                        warnings.warn(
                            f"Skipping malformed line {line_num} in file: {self.filename}",
                            RegridWarning,
                        )
                    continue

                if not (abs(lat) <= MAX_ABS_LATITUDE and abs(lon) <= MAX_ABS_LONGITUDE):
                    raise InvalidArgumentError(
                        f"Invalid coordinates at line {line_num} in file: {self.filename}"
                    )
                if self.config.adjust_longitude:
                    lon = adjust_longitude(lon)

                values = self._parse_values(tokens[COORDINATE_COLUMNS:], line_num)
                if value_count is None:
                    value_count = len(values)
                elif len(values) != value_count:
                    raise LayoutMismatchError(
                        f"Expected {value_count} values but found {len(values)} "
                        f"at line {line_num} in file: {self.filename}"
                    )
                points.append(SpatialData(GridPoint(lon, lat), time_step, values))

        if not points:
            raise EmptyInputError(f"Empty input file: {self.filename}")
        logger.debug("Read %d records from %s", len(points), self.filename)
        return points

    def _parse_values(self, tokens: Sequence[str], line_num: int) -> List[float]:
        layout = self.config.data_layout
        try:
            values = [float(token) for token in tokens]
        except ValueError:
            raise LayoutMismatchError(
                f"Non-numeric value at line {line_num} in file: {self.filename}"
            ) from None

        if layout == DataLayout.GRID_BY_TIME:
            if len(values) != MONTHS_PER_RECORD:
                raise LayoutMismatchError(
                    f"Missing monthly values at line {line_num} in file: {self.filename} "
                    f"(expected {MONTHS_PER_RECORD}, found {len(values)})"
                )
        elif layout == DataLayout.YEAR_BY_YEAR:
            if not values:
                raise LayoutMismatchError(
                    f"No values found at line {line_num} in file: {self.filename}"
                )
        else:
            raise InvalidArgumentError(f"Unknown data layout: {layout}")
        return values


class OutputWriter:
    """
    Writer for regridded data, gridlists and mapping reports.

    All files are written below ``config.output_path``, which is created
    when the writer is constructed.
    """

    def __init__(self, config: RegridConfig):
        self.config = config
        self.output_path = ensure_directory(config.output_path or "./")

    def _fixed(self, value: float, width: int) -> str:
        return f"{value:{width}.{self.config.precision}f}"

    def write_regridded_data(self, points: Sequence[SpatialData], filename: str,
                             headers: Sequence[str]) -> Path:
        """
        Write regridded records under the given column headers.

        Returns
        -------
        Path
            The file written
        """
        path = self.output_path / filename
        with open(path, "w") as f:
            f.write("".join(
                f"{header:>{COORDINATE_WIDTH if i < COORDINATE_COLUMNS else VALUE_WIDTH}}"
                for i, header in enumerate(headers)
            ))
            f.write("\n")
            for point in points:
                f.write(self._fixed(point.longitude, COORDINATE_WIDTH))
                f.write(self._fixed(point.latitude, COORDINATE_WIDTH))
                f.write(f"{point.time_step:{COORDINATE_WIDTH}d}")
                f.write("".join(self._fixed(value, VALUE_WIDTH) for value in point.values))
                f.write("\n")
        logger.debug("Wrote %d regridded records to %s", len(points), path)
        return path

    def write_gridlist(self, points: Sequence[SpatialData], filename: str) -> Path:
        """Write the unique (lon, lat) pairs of ``points``, sorted ascending."""
        coords = pd.DataFrame(
            {"lon": [p.longitude for p in points], "lat": [p.latitude for p in points]}
        )
        coords = coords.drop_duplicates().sort_values(["lon", "lat"])

        path = self.output_path / filename
        with open(path, "w") as f:
            f.write("Lon\t Lat\n")
            for lon, lat in coords.itertuples(index=False):
                f.write(self._fixed(lon, COORDINATE_WIDTH))
                f.write(self._fixed(lat, COORDINATE_WIDTH))
                f.write("\n")
        return path

    def write_nn_mappings(self, mappings: Sequence[NNMapping]) -> Path:
        """Write the nearest-neighbour mapping report."""
        path = self.output_path / self.config.nn_mappings_file
        with open(path, "w") as f:
            f.write("Target_Lon Target_Lat Source_Lon Source_Lat Distance(km) Target_Index\n")
            f.write(NN_SEPARATOR + "\n")
            for mapping in mappings:
                f.write(self._fixed(mapping.target_lon, COORDINATE_WIDTH))
                f.write(self._fixed(mapping.target_lat, COORDINATE_WIDTH))
                f.write(self._fixed(mapping.source_lon, COORDINATE_WIDTH))
                f.write(self._fixed(mapping.source_lat, COORDINATE_WIDTH))
                f.write(self._fixed(mapping.distance_km, VALUE_WIDTH))
                f.write(f"{mapping.target_index:{VALUE_WIDTH}d}\n")
                f.write(NN_SEPARATOR + "\n")
        return path

    def write_idw_mappings(self, mappings: Sequence[IDWMapping]) -> Path:
        """Write the IDW mapping report, one row per target and neighbour."""
        path = self.output_path / self.config.idw_mappings_file
        with open(path, "w") as f:
            f.write("Target_Lon Target_Lat Source_Lon Source_Lat Distance(km) "
                    "Target_Index Fallback\n")
            f.write(IDW_SEPARATOR + "\n")
            for mapping in mappings:
                fallback = "NN" if mapping.is_fallback else ""
                for neighbor in mapping.neighbors:
                    f.write(self._fixed(mapping.target_lon, COORDINATE_WIDTH))
                    f.write(self._fixed(mapping.target_lat, COORDINATE_WIDTH))
                    f.write(self._fixed(neighbor.source_lon, COORDINATE_WIDTH))
                    f.write(self._fixed(neighbor.source_lat, COORDINATE_WIDTH))
                    f.write(self._fixed(neighbor.distance_km, VALUE_WIDTH))
                    f.write(f"{mapping.target_index:{VALUE_WIDTH}d}")
                    f.write(f"{fallback:>{FALLBACK_WIDTH}}\n")
                f.write(IDW_SEPARATOR + "\n")
        return path
