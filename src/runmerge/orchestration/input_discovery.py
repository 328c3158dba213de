"""
Input discovery for per-run output files.

Each run of the pipeline writes its output into its own sub-directory under
a common scan directory, always with the same file name.
"""

import logging
from pathlib import Path
from typing import List, Union

from ..exceptions import FileSystemError

logger = logging.getLogger(__name__)


def discover_inputs(scan_directory: Union[str, Path], input_file_name: str) -> List[Path]:
    """
    Find ``input_file_name`` inside every immediate sub-directory.

    Args:
        scan_directory: Directory whose sub-directories are searched
        input_file_name: File name expected in each sub-directory

    Returns:
        Paths of the files found, ordered by sub-directory name

    Raises:
        FileSystemError: When scan_directory is not a directory
    """
    root = Path(scan_directory)
    if not root.is_dir():
        raise FileSystemError(f"Scan directory does not exist: {root}")

    found = []
    for subdir in sorted(p for p in root.iterdir() if p.is_dir()):
        candidate = subdir / input_file_name
        if candidate.is_file():
            logger.debug(f"File {candidate} is found.")
            found.append(candidate)
        else:
            logger.warning(f"File {candidate} not found!")

    logger.info(f"Discovered {len(found)} input files under {root}")
    return found
