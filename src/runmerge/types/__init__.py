"""Pydantic configuration and outcome types."""

from .merge_types import DiscoveryConfig, MergeConfig, MergeSummary, OperationOutcome

__all__ = ["DiscoveryConfig", "MergeConfig", "MergeSummary", "OperationOutcome"]
