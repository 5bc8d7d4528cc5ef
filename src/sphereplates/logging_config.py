"""Console and file logging for the ``sphereplates`` package.

Modules log through ``logging.getLogger(__name__)``; nothing is printed
until an application (the CLI, a script) calls :func:`setup_logging`.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

PACKAGE_LOGGER = "sphereplates"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%H:%M:%S"


def _handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    return handlers


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Attach output handlers to the package logger.

    Parameters
    ----------
    level : int
        Threshold for the logger and every handler it gets.
    log_file : str, optional
        Also write records here (the file is truncated).

    Returns
    -------
    logging.Logger
        The ``sphereplates`` logger.  Calling again replaces its handlers
        rather than adding to them.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    package_logger.handlers.clear()

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)
    for handler in _handlers(log_file):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.debug("Logging initialised at level %s", logging.getLevelName(level))
    return package_logger
