"""Spreadsheet path: cutoff workbooks → CutoffEntry records."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Tuple

from .config import DEFAULT_CONFIG, ExtractorConfig
from .context import ExtractionContext, ExtractionResult
from .errors import StructuralError
from .records import CutoffEntry
from .segmenter import SheetGrid, extract_block_cutoffs, find_institute_blocks, find_single_institute

DEFAULT_YEAR = "2024"


def parse_source_name(filename: str) -> Tuple[str, str]:
    """
    Infer `(year, round)` from a source file name.

    >>> parse_source_name("kcet-2023-round2-cutoff.xlsx")
    ('2023', 'R2')
    """
    lower = Path(filename).name.lower()
    year_match = re.search(r"(20\d{2})", lower)
    year = year_match.group(1) if year_match else DEFAULT_YEAR

    if "round3" in lower or "extended" in lower or re.search(r"(?<![a-z])ext(?![a-z])", lower):
        round_name = "EXT"
    elif "round2" in lower:
        round_name = "R2"
    elif "mock" in lower:
        round_name = "MOCK"
    else:
        round_name = "R1"
    return year, round_name


def extract_cutoffs_from_grid(
    grid: SheetGrid,
    year: str,
    round_name: str,
    config: Optional[ExtractorConfig] = None,
    context: Optional[ExtractionContext] = None,
    source: str = "",
) -> ExtractionResult[CutoffEntry]:
    """
    Extract every institute block from one sheet.

    A block without a category header is reported in the summary and
    skipped; the remaining blocks of the sheet are still read.
    """
    if context is None:
        context = ExtractionContext(config=config or DEFAULT_CONFIG)
    config = context.config
    label = f"{source}/{grid.name}" if source else grid.name

    blocks = find_institute_blocks(grid, config)
    if not blocks:
        fallback = find_single_institute(grid, config)
        if fallback is None:
            message = f"No institutes found in {label or 'sheet'}"
            logging.warning(message)
            context.summary.record_error(message)
            return ExtractionResult(summary=context.summary)
        blocks = [fallback]

    logging.info("Found %d institute blocks in %s", len(blocks), label or "sheet")
    result: ExtractionResult[CutoffEntry] = ExtractionResult(summary=context.summary)
    for block in blocks:
        try:
            entries = extract_block_cutoffs(
                grid,
                block,
                year=year,
                round_name=round_name,
                source=source,
                context=context,
            )
        except StructuralError as exc:
            logging.warning("%s: %s", label or "sheet", exc)
            context.summary.record_error(f"{label}: {exc}" if label else str(exc))
            continue
        logging.debug("%s %s: %d cutoffs", block.code, block.name, len(entries))
        result.records.extend(entries)
    return result


def extract_cutoffs_from_workbook(
    sheets: Iterable[SheetGrid],
    year: str,
    round_name: str,
    config: Optional[ExtractorConfig] = None,
    source: str = "",
) -> ExtractionResult[CutoffEntry]:
    """Sheets are independent; each gets its own context and summaries are merged."""
    result: ExtractionResult[CutoffEntry] = ExtractionResult()
    for grid in sheets:
        context = ExtractionContext(config=config or DEFAULT_CONFIG)
        result.extend(
            extract_cutoffs_from_grid(grid, year, round_name, context=context, source=source)
        )
    result.summary.documents_processed += 1
    return result
