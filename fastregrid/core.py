"""
Core FastRegrid classes.

This module contains the pipeline coordinator:
- Regridder: file-to-file regridding, from reading the inputs to writing
  the mapping reports and the regridded data
- regrid_points: the same mapping and interpolation phases on in-memory
  point sets
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from fastregrid.config import RegridConfig
from fastregrid.conversion import points_to_dataframe, points_to_dataset
from fastregrid.exceptions import EmptyInputError, InvalidArgumentError, LayoutMismatchError
from fastregrid.interpolation import Interpolator
from fastregrid.io import InputReader, OutputWriter
from fastregrid.spatial_index import SpatialIndex
from fastregrid.types import (
    COORDINATE_COLUMNS,
    MONTHS_PER_RECORD,
    DataLayout,
    IDWMapping,
    InterpolationMethod,
    NNMapping,
    SpatialData,
)

logger = logging.getLogger(__name__)

SOURCE_GRIDLIST_FILE = "source_gridlist.txt"
TARGET_GRIDLIST_FILE = "target_gridlist.txt"


@dataclass
class RegridResult:
    """
    Outcome of a regrid.

    Attributes
    ----------
    points : list of SpatialData
        Interpolated records, in target order
    nn_mappings : list of NNMapping
        Computed when the method is nearest neighbour or mappings are written
    idw_mappings : list of IDWMapping
        Computed when the method is IDW or mappings are written
    headers : list of str, optional
        Column headers of the source data
    output_files : dict
        Files written by the pipeline, keyed by role
    """

    points: List[SpatialData]
    nn_mappings: List[NNMapping] = field(default_factory=list)
    idw_mappings: List[IDWMapping] = field(default_factory=list)
    headers: Optional[List[str]] = None
    output_files: Dict[str, Path] = field(default_factory=dict)

    def __len__(self):
        return len(self.points)

    def to_dataframe(self):
        """Interpolated records as a pandas DataFrame."""
        return points_to_dataframe(self.points, self.headers)

    def to_dataset(self):
        """Interpolated records as an xarray Dataset."""
        return points_to_dataset(self.points, self.headers)


def validate_headers(source_headers: Sequence[str], target_headers: Sequence[str],
                     layout: DataLayout) -> None:
    """
    Check that source and target column layouts agree.

    Raises
    ------
    LayoutMismatchError
        If either header has fewer than three columns, a GRID_BY_TIME
        source does not have Lon, Lat, Time and 12 value columns, or the
        column counts differ
    """
    if len(source_headers) < COORDINATE_COLUMNS or len(target_headers) < COORDINATE_COLUMNS:
        raise LayoutMismatchError("Invalid headers in source or target file")
    if (layout == DataLayout.GRID_BY_TIME
            and len(source_headers) != COORDINATE_COLUMNS + MONTHS_PER_RECORD):
        raise LayoutMismatchError(
            "GRID_BY_TIME requires 12 monthly value columns plus Lon, Lat, Year"
        )
    if len(source_headers) != len(target_headers):
        raise LayoutMismatchError("Source and target files have different number of columns")


def compute_mappings(
    index: SpatialIndex,
    target_points: Sequence[SpatialData],
    config: RegridConfig,
) -> Tuple[List[NNMapping], List[IDWMapping]]:
    """
    Compute the mappings needed by the configured method.

    Both kinds are computed when ``config.write_mappings`` is set.
    """
    nn_mappings = []
    idw_mappings = []
    if config.interp_method == InterpolationMethod.NEAREST_NEIGHBOR or config.write_mappings:
        nn_mappings = index.find_nearest_neighbors(target_points)
    if config.interp_method == InterpolationMethod.INVERSE_DISTANCE_WEIGHTED or config.write_mappings:
        idw_mappings = index.find_idw_neighbors(target_points)
    return nn_mappings, idw_mappings


def regrid_points(
    source_points: Sequence[SpatialData],
    target_points: Sequence[SpatialData],
    config: Optional[RegridConfig] = None,
    headers: Optional[Sequence[str]] = None,
) -> RegridResult:
    """
    Regrid in-memory point sets.

    Parameters
    ----------
    source_points : sequence of SpatialData
        Points to interpolate from
    target_points : sequence of SpatialData
        Points to interpolate to; their values are ignored
    config : RegridConfig, optional
        Defaults to ``RegridConfig()``
    headers : sequence of str, optional
        Column headers carried into the result

    Returns
    -------
    RegridResult
    """
    config = config if config is not None else RegridConfig()
    if len(source_points) == 0:
        raise EmptyInputError("Source point list is empty")
    if len(target_points) == 0:
        raise EmptyInputError("Target point list is empty")

    if config.verbose:
        logger.info("Computing spatial mappings...")
    index = SpatialIndex(source_points, config)
    nn_mappings, idw_mappings = compute_mappings(index, target_points, config)

    if config.verbose:
        logger.info("Interpolating values...")
    interpolator = Interpolator(source_points, config)
    points = interpolator.interpolate(target_points, nn_mappings, idw_mappings)

    return RegridResult(
        points=points,
        nn_mappings=nn_mappings,
        idw_mappings=idw_mappings,
        headers=list(headers) if headers is not None else None,
    )


class Regridder:
    """
    File-to-file regridding pipeline.

    Reads the source and target grid files, validates that their layouts
    agree, maps and interpolates, then writes the results below
    ``config.output_path``.
    """

    def __init__(
        self,
        source_file: Union[str, Path],
        target_file: Union[str, Path],
        config: Optional[RegridConfig] = None,
    ):
        """
        Initialize the Regridder.

        Parameters
        ----------
        source_file : str or Path
            Grid file with the data to interpolate from
        target_file : str or Path
            Grid file with the points to interpolate to
        config : RegridConfig, optional
            Defaults to ``RegridConfig()``
        """
        if not str(source_file) or not str(target_file):
            raise InvalidArgumentError("Source or target file path is empty")
        self.source_file = Path(source_file)
        self.target_file = Path(target_file)
        self.config = config if config is not None else RegridConfig()

    def regrid(self) -> RegridResult:
        """
        Execute the regridding pipeline.

        Returns
        -------
        RegridResult
            Interpolated records, the mappings and the files written
        """
        config = self.config

        # Step 1: read source and target data
        source_reader = InputReader(self.source_file, config)
        target_reader = InputReader(self.target_file, config)
        if config.verbose:
            logger.info("Reading source data from: %s", self.source_file)
            logger.info("Reading target data from: %s", self.target_file)

        source_points = source_reader.read_grid()
        target_points = target_reader.read_grid()
        headers = source_reader.read_headers()
        target_headers = target_reader.read_headers()

        # Step 2: validate headers
        validate_headers(headers, target_headers, config.data_layout)

        writer = OutputWriter(config)
        output_files = {}
        if config.write_gridlists:
            output_files["source_gridlist"] = writer.write_gridlist(source_points, SOURCE_GRIDLIST_FILE)
            output_files["target_gridlist"] = writer.write_gridlist(target_points, TARGET_GRIDLIST_FILE)

        # Steps 3 and 4: mappings and interpolation
        result = regrid_points(source_points, target_points, config, headers)

        # Step 5: outputs
        if config.verbose:
            logger.info("Writing outputs to: %s", writer.output_path)
        if config.write_mappings:
            if result.nn_mappings:
                output_files["nn_mappings"] = writer.write_nn_mappings(result.nn_mappings)
            if result.idw_mappings:
                output_files["idw_mappings"] = writer.write_idw_mappings(result.idw_mappings)
        output_files["regridded"] = writer.write_regridded_data(
            result.points, config.output_file, headers
        )
        result.output_files = output_files

        if config.verbose:
            logger.info("Regridding completed successfully.")
        return result
