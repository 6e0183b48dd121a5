"""
Page-text path: option-entry PDFs → PreferenceEntry records.

Tokens are grouped into rows, repeated column titles are dropped, anchors
are located, the remaining text is bucketed against the learned column
boundary and the assembler stitches multi-row entries back together.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .anchors import detect_anchors, is_header_row
from .assembler import PreferenceAssembler
from .boundaries import bucket_row
from .config import DEFAULT_CONFIG, ExtractorConfig
from .context import ExtractionContext, ExtractionResult
from .records import PreferenceEntry
from .rows import Row, group_rows
from .tokens import tokens_from_fragments

Fragment = Tuple[str, float, float, int]


def extract_preferences_from_rows(rows: Sequence[Row], context: ExtractionContext) -> List[PreferenceEntry]:
    assembler = PreferenceAssembler(context)
    for row in rows:
        if is_header_row(row, context.config):
            logging.debug("Skipping header row %r", row)
            continue
        anchors = detect_anchors(row, context.config)
        assembler.feed(bucket_row(row, anchors, context))
    return assembler.finish()


def extract_preferences(
    pages: Iterable[Fragment],
    config: Optional[ExtractorConfig] = None,
) -> ExtractionResult[PreferenceEntry]:
    """
    Extract preference entries from one document's text fragments.

    `pages` yields `(text, x, y, page)` tuples as produced by
    `decoders.load_pdf_fragments`. Every call starts from the default column
    boundary; nothing learned from one document leaks into the next.
    """
    context = ExtractionContext(config=config or DEFAULT_CONFIG)
    rows = group_rows(tokens_from_fragments(pages), context.config.row_tolerance)
    records = extract_preferences_from_rows(rows, context)
    context.summary.documents_processed += 1
    logging.info(
        "Extracted %d preferences from %d rows (%d ambiguous tokens)",
        len(records),
        len(rows),
        context.summary.ambiguous_tokens,
    )
    return ExtractionResult(records=records, summary=context.summary)
