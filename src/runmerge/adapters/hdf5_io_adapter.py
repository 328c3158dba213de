"""
Adapter for HDF5 namespace-tree file I/O.

Groups are namespaces. Typed objects are datasets carrying a ``kind``
attribute: ``distribution`` (compound content/error bins), ``table``
(1-D structured rows) or ``parameter`` (0-d number). Anything else is
treated as opaque.
"""

import logging
import posixpath
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import h5py
import numpy as np

from runmerge.exceptions import (
    InputUnavailableError,
    NoInputsError,
    ObjectReadError,
    OutputCreationError,
    OutputWriteError,
)
from runmerge.model.objects import (
    DISTRIBUTION_DTYPE,
    KIND_ATTR,
    MAX_DISTRIBUTION_DIMS,
    Distribution,
    NamespaceEntry,
    ObjectKind,
    Opaque,
    Scalar,
    Table,
    TypedObject,
)

logger = logging.getLogger(__name__)

ROOT_PATH = "/"


def join_path(path: str, name: str) -> str:
    """Join a namespace path and a child name."""
    return posixpath.join(path or ROOT_PATH, name)


def _kind_tag(obj) -> Optional[str]:
    tag = obj.attrs.get(KIND_ATTR)
    if isinstance(tag, bytes):
        tag = tag.decode("utf-8", errors="replace")
    return tag


def classify(obj) -> ObjectKind:
    """
    Determine the kind of an HDF5 object.

    A dataset whose tag does not match its layout is opaque rather than
    being merged with the wrong semantics.
    """
    if isinstance(obj, h5py.Group):
        return ObjectKind.NAMESPACE
    if not isinstance(obj, h5py.Dataset):
        return ObjectKind.OPAQUE

    tag = _kind_tag(obj)
    names = obj.dtype.names or ()

    if tag == ObjectKind.DISTRIBUTION.value:
        if "content" in names and "error" in names and 1 <= obj.ndim <= MAX_DISTRIBUTION_DIMS:
            return ObjectKind.DISTRIBUTION
    elif tag == ObjectKind.TABLE.value:
        if obj.ndim == 1 and names:
            return ObjectKind.TABLE
    elif tag == ObjectKind.SCALAR.value:
        if obj.shape == () and obj.dtype.kind in "biuf":
            return ObjectKind.SCALAR

    return ObjectKind.OPAQUE


def _is_readable(dataset: h5py.Dataset) -> bool:
    try:
        dataset[()]
    except (OSError, RuntimeError):
        return False
    return True


def _dataset_options(compression: Optional[str], compression_opts: Optional[int]) -> Dict[str, Any]:
    if compression is None:
        return {}
    options = {"compression": compression, "shuffle": True}
    if compression == "gzip" and compression_opts is not None:
        options["compression_opts"] = compression_opts
    return options


def write_distribution(
    group: h5py.Group,
    name: str,
    contents: np.ndarray,
    errors: Optional[np.ndarray] = None,
    attrs: Optional[Dict[str, Any]] = None,
    **dataset_kwargs,
) -> h5py.Dataset:
    """
    Store a distribution under ``group``.

    Args:
        group: Namespace to write into
        name: Object name
        contents: Bin contents including underflow/overflow bins, 1-3 dimensions
        errors: Bin errors, same shape as contents; zeros when omitted
        attrs: Extra metadata such as axis edges or a title
        **dataset_kwargs: Passed on to ``create_dataset`` (compression etc.)

    Returns:
        The created dataset
    """
    contents = np.asarray(contents, dtype=np.float64)
    if not 1 <= contents.ndim <= MAX_DISTRIBUTION_DIMS:
        raise ValueError(f"Distribution {name} must have 1 to 3 dimensions, got {contents.ndim}")
    if errors is None:
        errors = np.zeros_like(contents)

    data = np.zeros(contents.shape, dtype=DISTRIBUTION_DTYPE)
    data["content"] = contents
    data["error"] = errors

    dset = group.create_dataset(name, data=data, **dataset_kwargs)
    for key, value in (attrs or {}).items():
        dset.attrs[key] = value
    dset.attrs[KIND_ATTR] = ObjectKind.DISTRIBUTION.value
    return dset


def write_table(
    group: h5py.Group,
    name: str,
    rows: np.ndarray,
    attrs: Optional[Dict[str, Any]] = None,
    **dataset_kwargs,
) -> h5py.Dataset:
    """Store a 1-D structured row array as a resizable table."""
    rows = np.asarray(rows)
    if rows.ndim != 1 or rows.dtype.names is None:
        raise ValueError(f"Table {name} must be a 1-D structured array")

    dset = group.create_dataset(name, data=rows, maxshape=(None,), chunks=True, **dataset_kwargs)
    for key, value in (attrs or {}).items():
        dset.attrs[key] = value
    dset.attrs[KIND_ATTR] = ObjectKind.TABLE.value
    return dset


def write_parameter(
    group: h5py.Group,
    name: str,
    value: Union[int, float],
    dtype: Union[str, np.dtype] = "f8",
    attrs: Optional[Dict[str, Any]] = None,
) -> h5py.Dataset:
    """Store a scalar parameter; merged parameters are always written as float64."""
    dset = group.create_dataset(name, data=np.asarray(value, dtype=dtype))
    for key, val in (attrs or {}).items():
        dset.attrs[key] = val
    dset.attrs[KIND_ATTR] = ObjectKind.SCALAR.value
    return dset


class NamespaceTreeReader:
    """
    Read-only view of one input file.

    Lookups never raise for missing objects or namespaces; they return None
    and the caller decides how to report it.
    """

    def __init__(self, handle: h5py.File, label: Optional[str] = None):
        self._file = handle
        self.label = label or handle.filename

    @classmethod
    def open(cls, path: Union[str, Path]) -> "NamespaceTreeReader":
        """
        Open an input file for reading.

        Raises:
            InputUnavailableError: When the file is missing or is not readable HDF5
        """
        path = Path(path)

        if not path.exists():
            raise InputUnavailableError(f"File {path} not found")
        if not path.is_file():
            raise InputUnavailableError(f"Path is not a file: {path}")

        try:
            handle = h5py.File(path, "r")
        except OSError as e:
            raise InputUnavailableError(f"File {path} is corrupted or unreadable: {e}") from e

        logger.info(f"File {path} is found and opened successfully.")
        return cls(handle, label=str(path))

    def _resolve_namespace(self, path: str) -> Optional[h5py.Group]:
        if path in ("", ROOT_PATH):
            return self._file
        try:
            node = self._file.get(path)
        except (KeyError, OSError, RuntimeError) as e:
            logger.debug(f"Cannot resolve namespace {path} in {self.label}: {e}")
            return None
        if isinstance(node, h5py.Group):
            return node
        return None

    def has_namespace(self, path: str) -> bool:
        return self._resolve_namespace(path) is not None

    def namespace_attrs(self, path: str) -> Dict[str, Any]:
        group = self._resolve_namespace(path)
        if group is None:
            return {}
        return dict(group.attrs)

    def list_children(self, path: str = ROOT_PATH) -> List[NamespaceEntry]:
        """
        List the children of a namespace in storage order.

        Storage order is creation order when the group tracks it, otherwise
        name order. Entries that cannot be resolved (dangling links) are
        skipped with a warning.
        """
        group = self._resolve_namespace(path)
        if group is None:
            return []

        entries = []
        for name in group.keys():
            try:
                obj = group[name]
            except (KeyError, OSError, RuntimeError) as e:
                logger.warning(f"Skipping unreadable entry {join_path(path, name)} in {self.label}: {e}")
                continue
            entries.append(NamespaceEntry(name=name, kind=classify(obj)))
        return entries

    def get_raw(self, path: str, name: str):
        """Underlying h5py object at (path, name), or None."""
        group = self._resolve_namespace(path)
        if group is None:
            return None
        try:
            return group.get(name)
        except (KeyError, OSError, RuntimeError) as e:
            logger.debug(f"Lookup of {join_path(path, name)} failed in {self.label}: {e}")
            return None

    def get_object(
        self, path: str, name: str, expected_kind: Optional[ObjectKind] = None
    ) -> Optional[TypedObject]:
        """
        Fetch a typed object by (path, name).

        Args:
            path: Namespace path, "/" for the top level
            name: Object name within the namespace
            expected_kind: If given, an object of another kind counts as not found

        Returns:
            The typed object, or None when this input lacks it
        """
        obj = self.get_raw(path, name)
        if obj is None:
            return None

        kind = classify(obj)
        if kind is ObjectKind.NAMESPACE:
            return None
        if expected_kind is not None and kind is not expected_kind:
            logger.debug(
                f"{join_path(path, name)} in {self.label} is a {kind.value}, expected {expected_kind.value}"
            )
            return None

        try:
            if kind is ObjectKind.DISTRIBUTION:
                data = obj[()]
                return Distribution(
                    name=name,
                    contents=data["content"],
                    errors=data["error"],
                    attrs=dict(obj.attrs),
                )
            if kind is ObjectKind.TABLE:
                return Table(name=name, source=obj)
            if kind is ObjectKind.SCALAR:
                return Scalar(name=name, value=obj[()], attrs=dict(obj.attrs))
            return Opaque(name=name, source=obj)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to read {join_path(path, name)} from {self.label}: {e}")
            return None

    def close(self):
        if self._file.id.valid:
            self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class InputSet:
    """
    Ordered, non-empty collection of open inputs.

    The first reader is the reference whose tree shape defines the output.
    """

    def __init__(self, readers: Sequence[NamespaceTreeReader]):
        if not readers:
            raise NoInputsError("No files found for merging.")
        self._readers = list(readers)

    @property
    def reference(self) -> NamespaceTreeReader:
        return self._readers[0]

    @property
    def labels(self) -> List[str]:
        return [reader.label for reader in self._readers]

    def __len__(self) -> int:
        return len(self._readers)

    def __iter__(self) -> Iterator[NamespaceTreeReader]:
        return iter(self._readers)

    def close_all(self):
        for reader in self._readers:
            reader.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close_all()


def open_input_set(paths: Sequence[Union[str, Path]]) -> InputSet:
    """
    Open every readable input, skipping the ones that cannot be opened.

    Raises:
        NoInputsError: When not a single input could be opened
    """
    readers = []
    for path in paths:
        try:
            readers.append(NamespaceTreeReader.open(path))
        except InputUnavailableError as e:
            logger.warning(str(e))

    if not readers:
        raise NoInputsError("No files found for merging.")

    logger.info(f"Opened {len(readers)} of {len(paths)} input files")
    return InputSet(readers)


class TableWriter:
    """Append-only writer for a resizable output table."""

    def __init__(self, dataset: h5py.Dataset):
        self._dataset = dataset
        self.num_rows = 0

    @property
    def name(self) -> str:
        return self._dataset.name

    def append(self, rows: np.ndarray) -> None:
        n = len(rows)
        if n == 0:
            return
        try:
            self._dataset.resize((self.num_rows + n,))
            self._dataset[self.num_rows:self.num_rows + n] = rows
        except (OSError, RuntimeError) as e:
            raise OutputWriteError(f"Failed to append {n} rows to {self.name}: {e}") from e
        self.num_rows += n


class OutputNode:
    """
    Write handle scoped to one namespace of the output tree.

    Handles are only created by the OutputTree and by create_namespace, so
    every write lands under the namespace the handle stands for.
    """

    def __init__(self, group: h5py.Group, dataset_options: Dict[str, Any]):
        self._group = group
        self._dataset_options = dataset_options

    @property
    def path(self) -> str:
        return self._group.name

    def __contains__(self, name: str) -> bool:
        return name in self._group

    def set_attrs(self, attrs: Dict[str, Any]) -> None:
        try:
            for key, value in attrs.items():
                self._group.attrs[key] = value
        except (OSError, RuntimeError, TypeError) as e:
            raise OutputWriteError(f"Failed to write attributes of {self.path}: {e}") from e

    def create_namespace(self, name: str) -> "OutputNode":
        try:
            group = self._group.create_group(name, track_order=True)
        except (ValueError, OSError, RuntimeError) as e:
            raise OutputWriteError(f"Failed to create namespace {join_path(self.path, name)}: {e}") from e
        return OutputNode(group, self._dataset_options)

    def write_distribution(self, distribution: Distribution) -> None:
        try:
            write_distribution(
                self._group,
                distribution.name,
                distribution.contents,
                distribution.errors,
                attrs=distribution.attrs,
                **self._dataset_options,
            )
        except (ValueError, OSError, RuntimeError, TypeError) as e:
            raise OutputWriteError(
                f"Failed to write histogram {join_path(self.path, distribution.name)}: {e}"
            ) from e

    def write_parameter(self, scalar: Scalar) -> None:
        try:
            write_parameter(self._group, scalar.name, scalar.value, dtype="f8", attrs=scalar.attrs)
        except (ValueError, OSError, RuntimeError, TypeError) as e:
            raise OutputWriteError(
                f"Failed to write parameter {join_path(self.path, scalar.name)}: {e}"
            ) from e

    def create_table(self, name: str, dtype: np.dtype, attrs: Optional[Dict[str, Any]] = None) -> TableWriter:
        try:
            dset = self._group.create_dataset(
                name, shape=(0,), maxshape=(None,), dtype=dtype, chunks=True, **self._dataset_options
            )
            for key, value in (attrs or {}).items():
                dset.attrs[key] = value
            dset.attrs[KIND_ATTR] = ObjectKind.TABLE.value
        except (ValueError, OSError, RuntimeError, TypeError) as e:
            raise OutputWriteError(f"Failed to create table {join_path(self.path, name)}: {e}") from e
        return TableWriter(dset)

    def copy_object(self, source, name: str) -> None:
        """
        Copy an object from an input file verbatim, attributes included.

        Raises:
            ObjectReadError: When the source object itself cannot be read
            OutputWriteError: When the copy cannot be written
        """
        try:
            self._group.copy(source, self._group, name=name)
        except (ValueError, OSError, RuntimeError, TypeError) as e:
            if isinstance(source, h5py.Dataset) and not _is_readable(source):
                raise ObjectReadError(f"Failed to read {source.name} from {source.file.filename}: {e}") from e
            raise OutputWriteError(f"Failed to copy {join_path(self.path, name)}: {e}") from e

    def discard_object(self, name: str) -> None:
        """Remove a partially written object so it can be written again."""
        if name in self._group:
            del self._group[name]


class OutputTree:
    """
    Write-only destination file mirroring the reference namespace tree.

    Finalized exactly once with close(); discard() removes the file instead.
    """

    def __init__(
        self,
        path: Union[str, Path],
        overwrite: bool = False,
        compression: Optional[str] = "gzip",
        compression_opts: Optional[int] = 4,
    ):
        self.path = Path(path)

        if self.path.exists() and not overwrite:
            raise OutputCreationError(f"Output file {self.path} already exists")
        if self.path.is_dir():
            raise OutputCreationError(f"Output path {self.path} is a directory")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = h5py.File(self.path, "w", track_order=True)
        except OSError as e:
            raise OutputCreationError(f"Failed to create the output file {self.path}: {e}") from e

        self._closed = False
        self.root = OutputNode(self._file, _dataset_options(compression, compression_opts))
        logger.info(f"Created output file {self.path}")

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._file.flush()
        self._file.close()
        self._closed = True
        logger.info(f"Finalized output file {self.path}")

    def discard(self) -> None:
        """Close and delete the output, leaving no partial artifact behind."""
        if not self._closed:
            self._file.close()
            self._closed = True
        if self.path.exists():
            self.path.unlink()
        logger.info(f"Removed incomplete output file {self.path}")
