"""
Typed objects found inside a namespace tree.

Every child of a namespace is classified once, at read time, into the closed
set of kinds in ObjectKind. Mergers dispatch on that kind rather than on the
concrete storage class.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, Tuple, Union

import numpy as np

# Attribute carrying the object kind tag on every typed dataset
KIND_ATTR = "kind"

# Bin layout of a stored distribution
DISTRIBUTION_DTYPE = np.dtype([("content", "<f8"), ("error", "<f8")])
MAX_DISTRIBUTION_DIMS = 3


class ObjectKind(enum.Enum):
    """Kinds of object a namespace can hold."""

    NAMESPACE = "namespace"
    DISTRIBUTION = "distribution"
    TABLE = "table"
    SCALAR = "parameter"
    OPAQUE = "opaque"

    @property
    def label(self) -> str:
        return {
            ObjectKind.NAMESPACE: "Namespace",
            ObjectKind.DISTRIBUTION: "Histogram",
            ObjectKind.TABLE: "Table",
            ObjectKind.SCALAR: "Parameter",
            ObjectKind.OPAQUE: "Object",
        }[self]


@dataclass
class NamespaceEntry:
    """One row of a namespace listing."""

    name: str
    kind: ObjectKind


@dataclass
class Distribution:
    """
    Binned distribution with one content and one error value per bin.

    The arrays include the underflow and overflow bin of every axis, so an
    axis declared with n bins has n + 2 entries.
    """

    name: str
    contents: np.ndarray
    errors: np.ndarray
    attrs: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[ObjectKind] = ObjectKind.DISTRIBUTION

    def __post_init__(self):
        self.contents = np.asarray(self.contents, dtype=np.float64)
        self.errors = np.asarray(self.errors, dtype=np.float64)
        if self.contents.shape != self.errors.shape:
            raise ValueError(
                f"Distribution {self.name}: contents shape {self.contents.shape} "
                f"does not match errors shape {self.errors.shape}"
            )
        if not 1 <= self.contents.ndim <= MAX_DISTRIBUTION_DIMS:
            raise ValueError(
                f"Distribution {self.name} has {self.contents.ndim} dimensions, "
                f"expected 1 to {MAX_DISTRIBUTION_DIMS}"
            )

    @property
    def ndim(self) -> int:
        return self.contents.ndim

    @property
    def bin_counts(self) -> Tuple[int, ...]:
        """Declared bin count per axis, boundary bins excluded."""
        return tuple(n - 2 for n in self.contents.shape)

    def empty_like(self) -> "Distribution":
        """Copy with the same geometry and metadata and every bin reset to zero."""
        return Distribution(
            name=self.name,
            contents=np.zeros_like(self.contents),
            errors=np.zeros_like(self.errors),
            attrs=dict(self.attrs),
        )


@dataclass
class Table:
    """Reference to an on-disk row dataset; rows are only read in chunks."""

    name: str
    source: Any

    kind: ClassVar[ObjectKind] = ObjectKind.TABLE

    @property
    def num_rows(self) -> int:
        return int(self.source.shape[0])

    @property
    def dtype(self) -> np.dtype:
        return self.source.dtype

    @property
    def attrs(self) -> Dict[str, Any]:
        return dict(self.source.attrs)

    def iter_chunks(self, chunk_rows: int) -> Iterator[np.ndarray]:
        for start in range(0, self.num_rows, chunk_rows):
            yield self.source[start:start + chunk_rows]


@dataclass
class Scalar:
    """Single named numeric value, always held as a float."""

    name: str
    value: float
    attrs: Dict[str, Any] = field(default_factory=dict)

    kind: ClassVar[ObjectKind] = ObjectKind.SCALAR

    def __post_init__(self):
        self.value = float(self.value)


@dataclass
class Opaque:
    """Object of a kind the mergers do not understand; copied as-is."""

    name: str
    source: Any

    kind: ClassVar[ObjectKind] = ObjectKind.OPAQUE


TypedObject = Union[Distribution, Table, Scalar, Opaque]
