"""Utility helpers for runmerge."""

from .progress import LoggingProgressReporter, ProgressCallback, TqdmProgressReporter, null_progress

__all__ = ["LoggingProgressReporter", "ProgressCallback", "TqdmProgressReporter", "null_progress"]
