"""
Merging module for combining typed objects across inputs.

This module provides:
- DistributionMerger: Per-bin mean and standard deviation of histograms
- TableMerger: Row concatenation of tables
- ScalarMerger: Summation of scalar parameters
"""

from .distribution_merger import DistributionMerger
from .scalar_merger import ScalarMerger
from .table_merger import TableMerger

__all__ = ["DistributionMerger", "ScalarMerger", "TableMerger"]
