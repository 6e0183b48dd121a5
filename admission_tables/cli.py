"""
Command line entry point.

    admission-tables preferences option_entry.pdf --output-dir parsed_output
    admission-tables cutoffs kcet-2024-round2-cutoff.xlsx --formats json xlsx
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .batch import CUTOFFS, PREFERENCES, extract_batch
from .config import DEFAULT_CONFIG, ExtractorConfig
from .decoders import PDF_ENGINES
from .export import FORMATS, export_records


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("parsed_output"),
        help="Directory where JSON/CSV/XLSX files will be written (default: %(default)s).",
    )
    parser.add_argument(
        "--formats",
        nargs="+",
        choices=FORMATS,
        default=list(FORMATS),
        help="One or more output formats to emit (default: json csv xlsx).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON file overriding category codes, keywords or tolerances.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=4,
        help="Number of documents processed in parallel (default: %(default)s).",
    )
    parser.add_argument(
        "--engine",
        choices=PDF_ENGINES,
        default="pdfplumber",
        help="PDF text decoder (default: %(default)s).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging during extraction.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="admission-tables",
        description="Extract KCET option-entry preferences and cutoff ranks from PDFs and workbooks.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    preferences = subparsers.add_parser(
        PREFERENCES,
        help="Parse option-entry PDFs into an ordered preference list.",
    )
    preferences.add_argument("paths", nargs="+", type=Path, help="Option-entry PDF files.")
    _add_common_arguments(preferences)

    cutoffs = subparsers.add_parser(
        CUTOFFS,
        help="Parse cutoff workbooks (.xlsx) or cutoff PDFs into cutoff ranks.",
    )
    cutoffs.add_argument("paths", nargs="+", type=Path, help="Cutoff .xlsx or .pdf files.")
    cutoffs.add_argument(
        "--year",
        help="Admission year; inferred from each file name when omitted (fallback 2024).",
    )
    cutoffs.add_argument(
        "--round",
        dest="round_name",
        choices=("R1", "R2", "R3", "EXT", "MOCK"),
        help="Counselling round; inferred from each file name when omitted.",
    )
    _add_common_arguments(cutoffs)
    return parser


def load_config(path: Optional[Path]) -> ExtractorConfig:
    if path is None:
        return DEFAULT_CONFIG
    return ExtractorConfig.from_json(path)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    missing: List[str] = [str(path) for path in args.paths if not path.exists()]
    if missing:
        parser.error(f"File not found: {', '.join(missing)}")
    if args.workers < 1:
        parser.error("--workers must be at least 1")
    if args.config is not None and not args.config.exists():
        parser.error(f"Config file not found: {args.config}")
    try:
        config = load_config(args.config)
    except ValueError as exc:
        parser.error(f"Invalid config {args.config}: {exc}")

    options = {"engine": args.engine}
    if args.command == CUTOFFS:
        options.update(year=args.year, round_name=args.round_name)

    batch = extract_batch(args.paths, args.command, config, max_workers=args.workers, **options)
    summary = batch.summary
    written = export_records(batch.records, summary, args.command, args.output_dir, args.formats)

    print(
        f"Extracted {summary.records_produced} {args.command} from "
        f"{len(batch.documents)} document(s); {summary.institutes_found} institutes, "
        f"{summary.filtered} filtered, {summary.ambiguous_tokens} ambiguous tokens."
    )
    for path in written:
        print(f"  -> {path}")
    for message in summary.errors:
        print(f"  ! {message}")

    return 1 if batch.failed and len(batch.failed) == len(batch.documents) else 0


if __name__ == "__main__":
    raise SystemExit(main())
