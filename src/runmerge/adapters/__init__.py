"""
Storage adapters for namespace-tree files.

This module provides:
- NamespaceTreeReader: Read-only lookups into one input file
- InputSet: Ordered collection of open inputs, reference first
- OutputTree / OutputNode: Write-only merged output
"""

from .hdf5_io_adapter import (
    InputSet,
    NamespaceTreeReader,
    OutputNode,
    OutputTree,
    TableWriter,
    classify,
    join_path,
    open_input_set,
    write_distribution,
    write_parameter,
    write_table,
)

__all__ = [
    "InputSet",
    "NamespaceTreeReader",
    "OutputNode",
    "OutputTree",
    "TableWriter",
    "classify",
    "join_path",
    "open_input_set",
    "write_distribution",
    "write_parameter",
    "write_table",
]
