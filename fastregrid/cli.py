#!/usr/bin/env python3
"""
Command-line interface for FastRegrid.

Regrids a source grid file onto the points of a target grid file and
writes the results below the output directory.
"""

import argparse
import logging
import sys
from typing import List, Optional

from fastregrid import __version__
from fastregrid.config import RegridConfigBuilder
from fastregrid.core import Regridder
from fastregrid.exceptions import FastRegridError
from fastregrid.logger import setup_logging
from fastregrid.types import DataLayout, DistanceMetric, InterpolationMethod

logger = logging.getLogger("fastregrid.cli")


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fastregrid",
        description="Regrid point data with Nearest Neighbor or Inverse Distance Weighting",
    )
    parser.add_argument("source", help="Source grid file")
    parser.add_argument("target", help="Target grid file")
    parser.add_argument("--method", default=InterpolationMethod.INVERSE_DISTANCE_WEIGHTED.value,
                        help="Interpolation method: nn or idw (default: idw)")
    parser.add_argument("--metric", default=DistanceMetric.HAVERSINE.value,
                        help="Distance metric: haversine or euclidean (default: haversine)")
    parser.add_argument("--layout", default=DataLayout.GRID_BY_TIME.value,
                        help="Input layout: grid_by_time or year_by_year (default: grid_by_time)")
    parser.add_argument("--radius", type=float, default=100.0,
                        help="IDW search radius in km (default: 100)")
    parser.add_argument("--power", type=float, default=2.0,
                        help="IDW weighting power (default: 2)")
    parser.add_argument("--max-points", type=int, default=5,
                        help="Maximum source points for IDW (default: 5)")
    parser.add_argument("--min-points", type=int, default=None,
                        help="Minimum source points for IDW before falling back to "
                             "Nearest Neighbor (default: 5, capped at max points)")
    parser.add_argument("--precision", type=int, default=5,
                        help="Output decimal places (default: 5)")
    parser.add_argument("--output-path", default="./",
                        help="Output directory (default: current directory)")
    parser.add_argument("--output-file", default="regridded.txt",
                        help="Name of the regridded data file (default: regridded.txt)")
    parser.add_argument("--write-mappings", action="store_true",
                        help="Write nn_mappings.txt and idw_mappings.txt")
    parser.add_argument("--no-gridlists", action="store_true",
                        help="Do not write the source and target gridlists")
    parser.add_argument("--no-adjust-longitude", action="store_true",
                        help="Keep longitudes as read instead of normalizing to [-180, 180]")
    parser.add_argument("--parallel", action="store_true",
                        help="Distribute the per-target loops with Dask")
    parser.add_argument("--chunk-size", type=int, default=1000,
                        help="Targets per parallel task (default: 1000)")
    parser.add_argument("--log-dir", default=None,
                        help="Directory for the logs folder (default: output path)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print progress messages and diagnostics")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line; return the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        builder = (
            RegridConfigBuilder()
            .set_interp_method(args.method)
            .set_distance_metric(args.metric)
            .set_data_layout(args.layout)
            .set_radius(args.radius)
            .set_power(args.power)
            .set_max_points(args.max_points)
            .set_precision(args.precision)
            .set_output_path(args.output_path)
            .set_output_file(args.output_file)
            .set_write_mappings(args.write_mappings)
            .set_write_gridlists(not args.no_gridlists)
            .set_adjust_longitude(not args.no_adjust_longitude)
            .set_parallel(args.parallel)
            .set_chunk_size(args.chunk_size)
            .set_verbose(args.verbose)
        )
        if args.min_points is not None:
            builder.set_min_points(args.min_points)
        config = builder.build()

        setup_logging(args.log_dir or config.output_path,
                      logging.DEBUG if args.verbose else logging.INFO)
        if config.verbose:
            logger.info("Starting FastRegrid with source: %s, target: %s, output: %s",
                        args.source, args.target, config.output_path)

        result = Regridder(args.source, args.target, config).regrid()
    except (FastRegridError, OSError) as e:
        logger.error("Error: %s", e)
        return 1

    logger.info("Regridding completed successfully. %d points written to: %s",
                len(result), result.output_files["regridded"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
