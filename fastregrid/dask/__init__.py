"""
Dask integration module for FastRegrid.

This module provides Dask-based parallel execution of the per-target
mapping and interpolation loops.
"""
try:
    from .parallel_processing import ParallelProcessor
except ImportError as exc:
    raise ImportError(
        "Parallel regridding requires Dask to be installed. "
        "Install with `pip install fastregrid[dask]`"
    ) from exc

__all__ = ['ParallelProcessor']
