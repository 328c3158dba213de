"""
TableMerger implementation.

Concatenates row datasets from every input into a single output table.
"""

import logging
from typing import Optional, Sequence

from runmerge.adapters.hdf5_io_adapter import OutputNode
from runmerge.model.objects import Table

logger = logging.getLogger(__name__)


class TableMerger:
    """
    Streams rows of every input copy of a table into one output table.

    Rows are appended in input order, then in original row order. The schema
    comes from the first copy present; other copies are not checked against
    it. Only chunk_rows rows are held in memory at a time.
    """

    def __init__(self, chunk_rows: int = 65536):
        if chunk_rows < 1:
            raise ValueError("chunk_rows must be positive")
        self.chunk_rows = chunk_rows

    def merge(self, name: str, tables: Sequence[Optional[Table]], sink: OutputNode) -> int:
        """
        Concatenate the copies of one table into ``sink``.

        Args:
            name: Name of the output table
            tables: One entry per input, None where the input lacks the table
            sink: Output namespace receiving the table

        Returns:
            Number of rows written
        """
        present = [table for table in tables if table is not None]
        if not present:
            logger.warning(f"Tree {name} not found in any input, nothing written")
            return 0

        template = present[0]
        writer = sink.create_table(name, template.dtype, template.attrs)

        for table in present:
            for chunk in table.iter_chunks(self.chunk_rows):
                writer.append(chunk)
            logger.debug(f"Appended {table.num_rows} rows of {name}")

        logger.debug(f"Tree {name}: {writer.num_rows} rows from {len(present)} inputs")
        return writer.num_rows
