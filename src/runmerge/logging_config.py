"""Logging configuration for the runmerge package."""

import logging
import sys
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers kept at WARNING whatever the package level is
QUIET_LOGGERS = ("h5py",)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
) -> None:
    """
    Configure console and optional file logging for a merge run.

    The runmerge loggers follow `level`; the root logger stays at WARNING
    or above so that debug output of other libraries does not flood a
    verbose run.

    Args:
        level: Level of the runmerge loggers (e.g. logging.DEBUG)
        log_file: Optional path of a log file written next to the console output
        format_string: Optional custom format string for log messages
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=max(level, logging.WARNING),
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers,
        force=True,
    )

    logging.getLogger("runmerge").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
