"""
Run the extractors over many documents.

Documents are independent: each one gets its own context, a failure in one
is recorded in its summary and the rest of the batch carries on. Results
come back in input order regardless of which worker finished first.
"""

from __future__ import annotations

import concurrent.futures
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .config import DEFAULT_CONFIG, ExtractorConfig
from .context import ExtractionResult, RunSummary
from .cutoff_pdf import extract_cutoffs_from_pages
from .cutoff_sheet import extract_cutoffs_from_workbook, parse_source_name
from .decoders import load_pdf_fragments, load_workbook_grids
from .preference_pdf import extract_preferences

PREFERENCES = "preferences"
CUTOFFS = "cutoffs"
KINDS = (PREFERENCES, CUTOFFS)

WORKBOOK_SUFFIXES = {".xlsx", ".xlsm"}


@dataclass
class DocumentResult:
    path: Path
    records: list = field(default_factory=list)
    summary: RunSummary = field(default_factory=RunSummary)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    documents: List[DocumentResult] = field(default_factory=list)

    @property
    def records(self) -> list:
        records: list = []
        for document in self.documents:
            records.extend(document.records)
        return records

    @property
    def summary(self) -> RunSummary:
        summary = RunSummary()
        for document in self.documents:
            summary.merge(document.summary)
        return summary

    @property
    def failed(self) -> List[DocumentResult]:
        return [document for document in self.documents if not document.ok]


def extract_document(
    path: Path,
    kind: str,
    config: Optional[ExtractorConfig] = None,
    *,
    engine: str = "pdfplumber",
    year: Optional[str] = None,
    round_name: Optional[str] = None,
) -> ExtractionResult:
    path = Path(path)
    config = config or DEFAULT_CONFIG
    if kind == PREFERENCES:
        return extract_preferences(load_pdf_fragments(path, engine), config)
    if kind != CUTOFFS:
        raise ValueError(f"Unknown extraction kind {kind!r}; expected one of {', '.join(KINDS)}")

    guessed_year, guessed_round = parse_source_name(path.name)
    year = year or guessed_year
    round_name = round_name or guessed_round
    suffix = path.suffix.lower()
    if suffix in WORKBOOK_SUFFIXES:
        return extract_cutoffs_from_workbook(
            load_workbook_grids(path), year, round_name, config, source=path.name
        )
    if suffix == ".pdf":
        return extract_cutoffs_from_pages(
            load_pdf_fragments(path, engine), year, round_name, config, source=path.name
        )
    raise ValueError(f"Unsupported cutoff source {path.name}; expected .xlsx or .pdf")


def _run_document(path: Path, kind: str, config: ExtractorConfig, **options) -> DocumentResult:
    logging.info("Processing %s", path.name)
    try:
        result = extract_document(path, kind, config, **options)
    except Exception as exc:
        message = f"{path.name}: {exc}"
        logging.error("Failed to extract %s", message)
        summary = RunSummary()
        summary.record_error(message)
        return DocumentResult(path=path, summary=summary, error=message)
    logging.info("  -> %d records from %s", len(result.records), path.name)
    return DocumentResult(path=path, records=result.records, summary=result.summary)


def extract_batch(
    paths: Sequence[Path],
    kind: str,
    config: Optional[ExtractorConfig] = None,
    max_workers: Optional[int] = None,
    **options,
) -> BatchResult:
    """
    Extract every document in `paths` on a thread pool.

    `options` are passed through to `extract_document` (`engine`, `year`,
    `round_name`).
    """
    if kind not in KINDS:
        raise ValueError(f"Unknown extraction kind {kind!r}; expected one of {', '.join(KINDS)}")
    paths = [Path(path) for path in paths]
    config = config or DEFAULT_CONFIG
    if not paths:
        return BatchResult()

    workers = max(1, min(len(paths), max_workers or os.cpu_count() or 4))
    logging.info("Processing %d documents using %d worker threads", len(paths), workers)
    results: List[Optional[DocumentResult]] = [None] * len(paths)
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(_run_document, path, kind, config, **options): index
            for index, path in enumerate(paths)
        }
        for future in concurrent.futures.as_completed(futures):
            results[futures[future]] = future.result()
    return BatchResult(documents=[result for result in results if result is not None])
