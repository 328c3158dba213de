"""
Orchestration module for runmerge.

Provides input discovery and the recursive namespace merge.
"""

from .input_discovery import discover_inputs
from .namespace_merge_orchestrator import NamespaceMergeOrchestrator

__all__ = ["NamespaceMergeOrchestrator", "discover_inputs"]
