"""Command-line import of a CSV export.

Run with: python -m csv_import.cli path/to/export.csv
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

import structlog

from csv_import.errors import CsvImportError
from csv_import.logging_config import configure_logging
from csv_import.schemas.jobs import ImportJob
from csv_import.services.orchestrator import import_csv
from csv_import.services.sources import ImportSource, available_sources

logger = structlog.get_logger(__name__)


def _print_progress(job: ImportJob) -> None:
    progress = job.progress
    stage = progress.stage.value if progress.stage else job.state.value
    print(f"[{progress.percentage:3d}%] {stage} ({progress.current}/{progress.total})")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import a personal-finance CSV export.")
    parser.add_argument("file", type=Path, help="CSV export to import")
    parser.add_argument(
        "--source",
        choices=[s.value for s in available_sources()],
        default=available_sources()[0].value,
        help="Export format",
    )
    parser.add_argument("--interval-ms", type=int, default=None, help="Delay between status checks")
    parser.add_argument("--timeout", type=float, default=None, help="Give up after this many seconds")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Import one file and print the result. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        csv_content = args.file.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("import_file_unreadable", file=str(args.file), error=str(exc))
        print(f"Cannot read {args.file}: {exc}", file=sys.stderr)
        return 1

    # An omitted --timeout keeps the configured deadline
    options = {"timeout": args.timeout} if args.timeout is not None else {}

    try:
        result = asyncio.run(
            import_csv(
                csv_content,
                on_progress=_print_progress,
                source=ImportSource(args.source),
                interval_ms=args.interval_ms,
                **options,
            )
        )
    except CsvImportError as exc:
        logger.error("import_failed", file=str(args.file), error=str(exc), error_type=type(exc).__name__)
        print(f"Import failed: {exc}", file=sys.stderr)
        return 1

    print(f"Imported: {result.imported}")
    print(f"Skipped: {result.skipped}")
    for error in result.errors:
        print(f"  - {error}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
