"""Logging configuration for library-collections."""

import os
import sys
from typing import TextIO

from loguru import logger

LOG_LEVEL_ENV = "LIBRARY_COLLECTIONS_LOG_LEVEL"


def configure_logging(*, verbose: bool = False, sink: TextIO | None = None) -> None:
    """Configure loguru for the collection tools.

    The level comes from LIBRARY_COLLECTIONS_LOG_LEVEL when set, else from ``verbose``.
    """
    logger.remove()
    level = os.environ.get(LOG_LEVEL_ENV) or ("DEBUG" if verbose else "INFO")
    logger.add(
        sink if sink is not None else sys.stderr,
        level=level.upper(),
        format="{level.icon} {message}",
    )
