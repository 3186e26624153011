"""Logging setup shared by the library and the CLI.

Library modules only ever call :func:`get_logger`; handlers are installed by
the CLI through :func:`configure_logging`.
"""

from __future__ import annotations

import logging
from typing import Optional

PACKAGE_LOGGER_NAME = "nsenum"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging level based on CLI flags.

    Precedence:
    - quiet → ERROR
    - debug → DEBUG
    - verbose → INFO
    - default → WARNING
    """

    if quiet:
        level = logging.ERROR
    elif debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist, so pin the package level too.
    logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger, defaulting to the package logger."""

    return logging.getLogger(name if name is not None else PACKAGE_LOGGER_NAME)
