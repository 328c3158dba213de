"""
Object model for namespace-tree files.

This module provides:
- ObjectKind: Closed set of object kinds
- Distribution, Table, Scalar, Opaque: Typed objects read from an input
- NamespaceEntry: One row of a namespace listing
"""

from .objects import (
    Distribution,
    NamespaceEntry,
    ObjectKind,
    Opaque,
    Scalar,
    Table,
    TypedObject,
)

__all__ = [
    "Distribution",
    "NamespaceEntry",
    "ObjectKind",
    "Opaque",
    "Scalar",
    "Table",
    "TypedObject",
]
