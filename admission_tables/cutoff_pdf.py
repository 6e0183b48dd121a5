"""
Cutoff PDFs: the same institute/category/course table as the workbooks,
printed to page text.

Each institute opens with `College: E001 Name` (or `E001 Name` at the start
of a row) followed by a header row of category labels. The x-position of
each label is learned from that header; numbers in the course rows below are
assigned to the nearest learned column.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .anchors import detect_anchors, match_institute_code
from .assembler import assemble_cutoffs
from .config import DEFAULT_CONFIG, ExtractorConfig
from .context import ExtractionContext, ExtractionResult
from .records import CutoffEntry
from .rows import Row, group_rows
from .tokens import CellValue, Number, Text, Token, tokens_from_fragments

_NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$")
_EMPTY_CELLS = {"--", "-"}


@dataclass
class _Institute:
    code: str
    name: str


@dataclass
class CategoryColumns:
    """Category labels and the x-coordinate each was printed at."""

    positions: List[Tuple[float, str]] = field(default_factory=list)

    @property
    def left_edge(self) -> float:
        return min(x for x, _ in self.positions)

    def nearest(self, x: float) -> str:
        return min(self.positions, key=lambda item: abs(item[0] - x))[1]


def parse_institute_row(row: Row, config: ExtractorConfig) -> Optional[_Institute]:
    text = row.joined()
    match = match_institute_code(text, config)
    if match is None:
        return None
    prefix = text[: match.start()]
    if prefix.strip() and not re.fullmatch(r"\s*College\s*:\s*", prefix, re.IGNORECASE):
        return None
    rest = text[match.end():]
    if rest and not rest[0].isspace():
        return None
    name = re.split(r"Course\s*Name", rest, maxsplit=1, flags=re.IGNORECASE)[0].strip()
    if not name:
        return None
    code = (match.group(1) if match.re.groups else match.group(0)).upper()
    return _Institute(code, name)


def learn_category_columns(row: Row, config: ExtractorConfig) -> Optional[CategoryColumns]:
    anchors = detect_anchors(row, config)
    if len(anchors.categories) < config.min_header_categories:
        return None
    return CategoryColumns([(row[anchor.token_index].x, anchor.value) for anchor in anchors.categories])


def _split_course_row(
    row: Row,
    columns: CategoryColumns,
    config: ExtractorConfig,
) -> Tuple[List[str], List[Tuple[Token, CellValue]]]:
    course: List[str] = []
    values: List[Tuple[Token, CellValue]] = []
    boundary = columns.left_edge - config.fee_margin
    for token in row:
        text = token.text
        if token.x < boundary:
            course.append(text)
        elif _NUMBER_RE.match(text):
            values.append((token, Number(float(text))))
        elif text in _EMPTY_CELLS:
            values.append((token, Text(text)))
        else:
            logging.debug("Ignoring %r inside the category columns", text)
    return course, values


def extract_cutoffs_from_rows(
    rows: Sequence[Row],
    year: str,
    round_name: str,
    context: ExtractionContext,
    source: str = "",
) -> List[CutoffEntry]:
    config = context.config
    entries: List[CutoffEntry] = []
    institute: Optional[_Institute] = None
    columns: Optional[CategoryColumns] = None
    pending_course: List[str] = []

    for row in rows:
        opened = parse_institute_row(row, config)
        if opened is not None:
            institute = opened
            pending_course = []
            logging.debug("Institute %s %s", institute.code, institute.name)
            # Some layouts print the category header on the institute line.
            columns = learn_category_columns(row, config) or columns
            continue

        header = learn_category_columns(row, config)
        if header is not None:
            columns = header
            pending_course = []
            continue

        if institute is None or columns is None:
            context.summary.discarded_rows += 1
            continue

        course_parts, values = _split_course_row(row, columns, config)
        if not values:
            # Course names wrap; keep the fragment for the row carrying the ranks.
            pending_course.extend(course_parts)
            continue

        course = " ".join(pending_course + course_parts).strip()
        pending_course = []
        if not course:
            context.summary.discarded_rows += 1
            logging.debug("Ranks without a course name under %s", institute.code)
            continue

        cells = {}
        for token, value in values:
            category = columns.nearest(token.x)
            if category in cells:
                logging.debug("Second value %r for %s in %r ignored", token.text, category, course)
                continue
            cells[category] = value
        entries.extend(
            assemble_cutoffs(
                institute=institute.name,
                institute_code=institute.code,
                course=course,
                values=cells.items(),
                year=year,
                round_name=round_name,
                source=source,
                context=context,
            )
        )
    return entries


def extract_cutoffs_from_pages(
    pages: Iterable[Tuple[str, float, float, int]],
    year: str,
    round_name: str,
    config: Optional[ExtractorConfig] = None,
    source: str = "",
) -> ExtractionResult[CutoffEntry]:
    """Extract cutoff entries from `(text, x, y, page)` fragments."""
    context = ExtractionContext(config=config or DEFAULT_CONFIG)
    rows = group_rows(tokens_from_fragments(pages), context.config.row_tolerance)
    records = extract_cutoffs_from_rows(rows, year, round_name, context, source=source)
    context.summary.documents_processed += 1
    logging.info("Extracted %d cutoffs from %d rows", len(records), len(rows))
    return ExtractionResult(records=records, summary=context.summary)
