"""
Command line entry point.

Merges the per-run output files given on the command line, or found by
scanning the sub-directories of a directory, into a single file.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError
from tqdm.contrib.logging import logging_redirect_tqdm

from .exceptions import MergeError
from .logging_config import setup_logging
from .orchestration.input_discovery import discover_inputs
from .orchestration.namespace_merge_orchestrator import NamespaceMergeOrchestrator
from .types.merge_types import DiscoveryConfig, MergeConfig
from .utils.progress import TqdmProgressReporter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = DiscoveryConfig()
    parser = argparse.ArgumentParser(
        prog="runmerge",
        description="Merge structurally identical HDF5 run outputs into one file",
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        help="Input files, the first one is the reference. If omitted, --scan-dir is searched",
    )
    parser.add_argument(
        "-o", "--output",
        default=defaults.output_file_name,
        help=f"Output file (default: {defaults.output_file_name})",
    )
    parser.add_argument(
        "--scan-dir",
        default=defaults.scan_directory,
        help="Directory whose sub-directories each hold one input file (default: current directory)",
    )
    parser.add_argument(
        "--input-name",
        default=defaults.input_file_name,
        help=f"Input file name looked up in each sub-directory (default: {defaults.input_file_name})",
    )
    parser.add_argument("--overwrite", action="store_true", help="Replace an existing output file")
    parser.add_argument(
        "--compression",
        default="gzip",
        choices=["gzip", "lzf", "none"],
        help="Compression filter for merged datasets (default: gzip)",
    )
    parser.add_argument(
        "--compression-level", type=int, default=4, help="gzip compression level 0-9 (default: 4)"
    )
    parser.add_argument(
        "--table-chunk-rows", type=int, default=65536, help="Rows copied per step when merging tables"
    )
    parser.add_argument("--max-depth", type=int, default=64, help="Maximum namespace nesting depth")
    parser.add_argument("--no-progress", action="store_true", help="Do not show a progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=None, help="Also write log messages to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    try:
        config = MergeConfig(
            output_compression=args.compression,
            output_compression_opts=args.compression_level if args.compression == "gzip" else None,
            table_chunk_rows=args.table_chunk_rows,
            max_depth=args.max_depth,
            overwrite=args.overwrite,
            show_progress=not args.no_progress,
        )
    except ValidationError as e:
        parser.print_usage(sys.stderr)
        print(f"runmerge: error: invalid options: {e}", file=sys.stderr)
        return 2

    progress = TqdmProgressReporter(disable=not config.show_progress)
    orchestrator = NamespaceMergeOrchestrator(config, progress=progress)

    try:
        # Log lines are printed above the progress bar instead of through it
        with logging_redirect_tqdm():
            if args.inputs:
                inputs = args.inputs
            else:
                inputs = discover_inputs(args.scan_dir, args.input_name)
            summary = orchestrator.run(inputs, args.output)
    except MergeError as e:
        logger.error(str(e))
        print(f"runmerge: error: {e}", file=sys.stderr)
        return 1
    finally:
        progress.close()

    print(summary.to_outcome().message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
