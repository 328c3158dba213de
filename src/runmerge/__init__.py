"""
runmerge: merge structurally identical per-run HDF5 outputs into one file.

Histograms are averaged bin by bin with the spread across runs as error,
tables are concatenated and scalar parameters are summed. The namespace
hierarchy of the first input is reproduced in the output.
"""

from .exceptions import MergeError, NoInputsError, OutputCreationError
from .orchestration import NamespaceMergeOrchestrator, discover_inputs
from .types import MergeConfig, MergeSummary

__version__ = "0.1.0"

__all__ = [
    "MergeConfig",
    "MergeError",
    "MergeSummary",
    "NamespaceMergeOrchestrator",
    "NoInputsError",
    "OutputCreationError",
    "discover_inputs",
]
