"""
Configuration and outcome types for the merge pipeline.

Pydantic models give type safety and validation for everything the
orchestrator and the command line pass around.
"""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field, field_validator


class MergeConfig(BaseModel):
    """Parameters controlling how a set of input files is merged."""

    output_compression: Optional[str] = Field(
        "gzip",
        description="HDF5 compression filter for merged datasets: 'gzip', 'lzf' or None"
    )
    output_compression_opts: Optional[int] = Field(
        4,
        description="Compression level when output_compression is 'gzip' (0-9)"
    )
    table_chunk_rows: int = Field(
        65536,
        description="Number of rows copied per step when concatenating tables"
    )
    max_depth: int = Field(
        64,
        description="Maximum namespace nesting depth walked before a subtree is rejected"
    )
    overwrite: bool = Field(
        False,
        description="If true, an existing output file is replaced"
    )
    show_progress: bool = Field(
        True,
        description="If true, a progress bar is shown while top-level objects are merged"
    )

    @field_validator("output_compression")
    @classmethod
    def _check_compression(cls, value):
        if value is None or value == "none":
            return None
        if value not in ("gzip", "lzf"):
            raise ValueError(f"Unsupported compression filter: {value}")
        return value

    @field_validator("output_compression_opts")
    @classmethod
    def _check_compression_opts(cls, value):
        if value is not None and not 0 <= value <= 9:
            raise ValueError("gzip compression level must be between 0 and 9")
        return value

    @field_validator("table_chunk_rows", "max_depth")
    @classmethod
    def _check_positive(cls, value):
        if value < 1:
            raise ValueError("must be a positive integer")
        return value


class DiscoveryConfig(BaseModel):
    """Where to look for per-run input files and where to put the merged file."""

    scan_directory: str = Field(
        ".",
        description="Directory whose immediate sub-directories each hold one run's output"
    )
    input_file_name: str = Field(
        "PairGen.h5",
        description="File name looked up inside every sub-directory"
    )
    output_file_name: str = Field(
        "PairGenMerged.h5",
        description="Path of the merged output file"
    )


class OperationOutcome(BaseModel):
    """Generic outcome for operations within components."""

    status: str = Field(
        description="Must be one of 'SUCCESS', 'FAILURE', 'WARNING'"
    )
    message: Optional[str] = Field(
        None,
        description="Human-readable message about the outcome"
    )
    error_code: Optional[str] = Field(
        None,
        description="A machine-readable code for specific error types"
    )
    output_artifacts: Optional[Dict[str, Any]] = Field(
        None,
        description="A map where keys are artifact names and values are their file paths or objects"
    )


class MergeSummary(BaseModel):
    """Counters collected while walking the reference namespace tree."""

    input_files: List[str] = Field(
        default_factory=list,
        description="Paths of the inputs that took part in the merge, reference first"
    )
    output_file: Optional[str] = Field(
        None,
        description="Path of the merged output file"
    )
    namespaces: int = Field(0, description="Namespaces created in the output")
    distributions: int = Field(0, description="Distributions merged")
    tables: int = Field(0, description="Tables concatenated")
    table_rows: int = Field(0, description="Total rows written across all merged tables")
    parameters: int = Field(0, description="Scalar parameters summed")
    copied: int = Field(0, description="Objects copied verbatim from the reference input")
    missing_lookups: int = Field(
        0,
        description="Object lookups that found nothing in a non-reference input"
    )
    failed_objects: List[str] = Field(
        default_factory=list,
        description="Paths of objects whose merge raised and were copied from the reference instead"
    )

    @property
    def status(self) -> str:
        if self.missing_lookups or self.failed_objects:
            return "SUCCESS_WITH_WARNINGS"
        return "SUCCESS"

    def to_outcome(self) -> OperationOutcome:
        """Condense the summary into an OperationOutcome."""
        message = (
            f"Merged {len(self.input_files)} inputs: {self.distributions} distributions, "
            f"{self.tables} tables ({self.table_rows} rows), {self.parameters} parameters, "
            f"{self.copied} copied, {self.namespaces} namespaces"
        )
        return OperationOutcome(
            status="SUCCESS" if self.status == "SUCCESS" else "WARNING",
            message=message,
            output_artifacts={"merged_file": self.output_file},
        )
