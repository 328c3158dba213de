"""
Progress reporting for the merge walk.

The orchestrator calls a progress callback with (current, total) after each
top-level object. Anything with that call signature can be used.
"""

import logging
from typing import Callable, Optional

from tqdm import tqdm

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def null_progress(current: int, total: int) -> None:
    """Progress callback that does nothing."""
    return None


class TqdmProgressReporter:
    """Progress bar on the terminal, created lazily once the total is known."""

    def __init__(self, desc: str = "Merging", unit: str = "obj", disable: bool = False):
        self.desc = desc
        self.unit = unit
        self.disable = disable
        self._bar: Optional[tqdm] = None
        self._last = 0

    def __call__(self, current: int, total: int) -> None:
        if self._bar is None:
            self._bar = tqdm(total=total, desc=self.desc, unit=self.unit, disable=self.disable)
        self._bar.update(current - self._last)
        self._last = current

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
            self._last = 0


class LoggingProgressReporter:
    """Writes one log line per update."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def __call__(self, current: int, total: int) -> None:
        percent = int(100.0 * current / total) if total else 100
        logger.log(self.level, f"Processed {current}/{total} objects ({percent} %)")
