"""
NamespaceMergeOrchestrator implementation for merging per-run output files.

Walks the namespace tree of the reference (first) input and, for every
object found there:
- Histograms: per-bin mean and standard deviation across inputs
- Tables: row concatenation in input order
- Parameters: summed across inputs
- Namespaces: mirrored in the output and walked recursively
- Anything else: copied verbatim from the reference
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..adapters.hdf5_io_adapter import (
    ROOT_PATH,
    InputSet,
    OutputNode,
    OutputTree,
    join_path,
    open_input_set,
)
from ..exceptions import (
    ConfigurationError,
    MergeDepthError,
    NoInputsError,
    ObjectReadError,
    OutputWriteError,
)
from ..merging.distribution_merger import DistributionMerger
from ..merging.scalar_merger import ScalarMerger
from ..merging.table_merger import TableMerger
from ..model.objects import NamespaceEntry, ObjectKind, TypedObject
from ..types.merge_types import MergeConfig, MergeSummary
from ..utils.progress import ProgressCallback, null_progress

logger = logging.getLogger(__name__)


class NamespaceMergeOrchestrator:
    """
    Merges N structurally identical namespace-tree files into one.

    The reference input's objects define the output completely: objects
    only present in other inputs are ignored, and every object of the
    reference yields exactly one output object at the same path. Missing
    objects in other inputs are reported and skipped; only an empty input
    set, an output that cannot be created or a failed output write stop
    the merge.
    """

    def __init__(self, config: Optional[MergeConfig] = None, progress: Optional[ProgressCallback] = None):
        """
        Initialize the orchestrator.

        Args:
            config: Merge configuration, defaults to MergeConfig()
            progress: Callback receiving (current, total) after each top-level object
        """
        self.config = config or MergeConfig()
        self.progress = progress or null_progress
        self.distribution_merger = DistributionMerger()
        self.table_merger = TableMerger(chunk_rows=self.config.table_chunk_rows)
        self.scalar_merger = ScalarMerger()

    def run(self, input_paths: Sequence[Union[str, Path]], output_path: Union[str, Path]) -> MergeSummary:
        """
        Open the inputs, merge them into output_path and close everything.

        Args:
            input_paths: Input files, reference first
            output_path: Destination file

        Returns:
            MergeSummary of the run

        Raises:
            NoInputsError: When there are no inputs or none can be opened
            ConfigurationError: When the output path is also an input
            OutputCreationError: When the output file cannot be created
            OutputWriteError: When a merged object cannot be written
        """
        input_paths = [Path(p) for p in input_paths]
        output_path = Path(output_path)

        if not input_paths:
            raise NoInputsError("No files found for merging.")
        self._validate_output_path(input_paths, output_path)

        input_set = open_input_set(input_paths)
        try:
            output_tree = OutputTree(
                output_path,
                overwrite=self.config.overwrite,
                compression=self.config.output_compression,
                compression_opts=self.config.output_compression_opts,
            )

            logger.info(f"Merging files into {output_path}...")
            try:
                summary = self.merge(input_set, output_tree)
            except Exception:
                output_tree.discard()
                raise
            output_tree.close()
        finally:
            input_set.close_all()

        summary.output_file = str(output_path)
        logger.info(
            f"Merging completed successfully: {summary.distributions} histograms, "
            f"{summary.tables} trees, {summary.parameters} parameters, {summary.copied} copied"
        )
        if summary.missing_lookups or summary.failed_objects:
            logger.warning(
                f"{summary.missing_lookups} missing lookups and "
                f"{len(summary.failed_objects)} failed objects during merge"
            )
        return summary

    def _validate_output_path(self, input_paths: List[Path], output_path: Path):
        resolved_output = output_path.resolve()
        for path in input_paths:
            if path.resolve() == resolved_output:
                raise ConfigurationError(f"Output file {output_path} is also an input file")

    def merge(self, input_set: InputSet, output_tree: OutputTree) -> MergeSummary:
        """
        Walk the reference tree and write merged objects into output_tree.

        The caller owns both the inputs and the output and closes them.
        """
        summary = MergeSummary(input_files=input_set.labels)

        output_tree.root.set_attrs(input_set.reference.namespace_attrs(ROOT_PATH))

        entries = input_set.reference.list_children(ROOT_PATH)
        total = len(entries)
        logger.info(f"Reference file {input_set.reference.label} holds {total} top-level objects")

        for count, entry in enumerate(entries, start=1):
            self._merge_entry(ROOT_PATH, entry, input_set, output_tree.root, summary, depth=0)
            self.progress(count, total)

        return summary

    def _merge_entry(
        self,
        path: str,
        entry: NamespaceEntry,
        input_set: InputSet,
        out_node: OutputNode,
        summary: MergeSummary,
        depth: int,
    ):
        object_path = join_path(path, entry.name)

        if entry.kind is ObjectKind.NAMESPACE:
            try:
                self._merge_namespace(object_path, entry.name, input_set, out_node, summary, depth + 1)
            except MergeDepthError as e:
                logger.error(str(e))
                summary.failed_objects.append(object_path)
            return

        if entry.kind is ObjectKind.OPAQUE:
            self._copy_from_reference(path, entry.name, input_set, out_node, summary)
            return

        copies = self._collect_copies(path, entry, input_set, summary)
        reference = copies[0]
        if reference is None:
            logger.error(
                f"{entry.kind.label} {object_path} could not be read from the reference file, copying it as-is"
            )
            summary.failed_objects.append(object_path)
            self._copy_from_reference(path, entry.name, input_set, out_node, summary)
            return

        try:
            if entry.kind is ObjectKind.DISTRIBUTION:
                out_node.write_distribution(self.distribution_merger.merge(reference, copies))
                summary.distributions += 1
            elif entry.kind is ObjectKind.TABLE:
                summary.table_rows += self.table_merger.merge(entry.name, copies, out_node)
                summary.tables += 1
            elif entry.kind is ObjectKind.SCALAR:
                out_node.write_parameter(self.scalar_merger.merge(entry.name, copies))
                summary.parameters += 1
        except OutputWriteError:
            raise
        except Exception as e:
            logger.error(f"Failed to merge {entry.kind.label.lower()} {object_path}: {e}")
            summary.failed_objects.append(object_path)
            out_node.discard_object(entry.name)
            self._copy_from_reference(path, entry.name, input_set, out_node, summary)

    def _collect_copies(
        self,
        path: str,
        entry: NamespaceEntry,
        input_set: InputSet,
        summary: MergeSummary,
    ) -> List[Optional[TypedObject]]:
        """Look up (path, name) in every input, reference included."""
        copies = []
        for index, reader in enumerate(input_set):
            obj = reader.get_object(path, entry.name, expected_kind=entry.kind)
            if obj is None and index > 0:
                logger.warning(
                    f"{entry.kind.label} {join_path(path, entry.name)} not found in file {reader.label}"
                )
                summary.missing_lookups += 1
            copies.append(obj)
        return copies

    def _copy_from_reference(
        self,
        path: str,
        name: str,
        input_set: InputSet,
        out_node: OutputNode,
        summary: MergeSummary,
    ):
        object_path = join_path(path, name)
        source = input_set.reference.get_raw(path, name)
        try:
            if source is None:
                raise ObjectReadError(f"Object {object_path} could not be read from the reference file")
            out_node.copy_object(source, name)
        except ObjectReadError as e:
            logger.error(str(e))
            # an object that already failed to merge is only listed once
            if object_path not in summary.failed_objects:
                summary.failed_objects.append(object_path)
            out_node.discard_object(name)
            return
        summary.copied += 1

    def _merge_namespace(
        self,
        path: str,
        name: str,
        input_set: InputSet,
        parent_node: OutputNode,
        summary: MergeSummary,
        depth: int,
    ):
        if depth > self.config.max_depth:
            raise MergeDepthError(
                f"Namespace {path} is nested deeper than the maximum depth {self.config.max_depth}"
            )

        logger.debug(f"Processing subdirectory: {path}")
        node = parent_node.create_namespace(name)
        node.set_attrs(input_set.reference.namespace_attrs(path))
        summary.namespaces += 1

        for entry in input_set.reference.list_children(path):
            self._merge_entry(path, entry, input_set, node, summary, depth)
