"""
Logging setup for FastRegrid.

Modules log through ``logging.getLogger(__name__)`` and stay silent until
an application calls :func:`setup_logging`, which writes a timestamped log
file below ``<base_dir>/logs`` and echoes records to the console.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Union

from fastregrid.io import ensure_directory

LOGGER_NAME = "fastregrid"
LOG_FORMAT = "[FastRegrid][%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handlers = []


def setup_logging(base_dir: Union[str, Path] = "./", level: int = logging.INFO) -> Path:
    """
    Configure the ``fastregrid`` logger.

    Handlers installed by a previous call are closed and replaced.
    Warnings, including :class:`~fastregrid.exceptions.RegridWarning`
    diagnostics, are routed to the log as well.

    Parameters
    ----------
    base_dir : str or Path
        Directory under which the ``logs`` directory is created
    level : int
        Minimum level written to the log file and the console

    Returns
    -------
    Path
        The log file
    """
    log_dir = ensure_directory(Path(base_dir) / "logs")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"fastregrid_{timestamp}.log"

    logger = logging.getLogger(LOGGER_NAME)
    warnings_logger = logging.getLogger("py.warnings")
    for handler in _handlers:
        logger.removeHandler(handler)
        warnings_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    file_handler = logging.FileHandler(log_file, mode="a")
    console_handler = logging.StreamHandler(sys.stderr)
    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)
        warnings_logger.addHandler(handler)
        _handlers.append(handler)

    logger.setLevel(level)
    logging.captureWarnings(True)

    logger.info("FastRegrid Logger initialized [Log file: %s]", log_file)
    return log_file
