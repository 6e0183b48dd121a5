"""
Record Assembler.

Preference entries span several visual rows: the row carrying the code
anchor opens a pending record and every following row without a code is
appended to it until the next anchor (or the end of the document) finalizes
it. Cutoff entries are assembled one category cell at a time and range
validated on the way out.
"""

from __future__ import annotations

import enum
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .anchors import AnchorMatch
from .boundaries import Bucket, RowBuckets
from .canonical import (
    canonical_course,
    canonical_institute,
    clean_fee,
    extract_location,
    leading_course_code,
)
from .context import ExtractionContext
from .records import CutoffEntry, PreferenceEntry
from .tokens import CellValue, Empty, Number, Text


class AssemblerState(enum.Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"


@dataclass
class PendingRecord:
    institute_code: str
    branch_code: str = ""
    priority: str = ""
    course_parts: List[str] = field(default_factory=list)
    fee_parts: List[str] = field(default_factory=list)
    institute_parts: List[str] = field(default_factory=list)

    @classmethod
    def open(cls, anchor: AnchorMatch, buckets: RowBuckets) -> "PendingRecord":
        code = anchor.value[: len(anchor.value) - len(anchor.suffix)] if anchor.suffix else anchor.value
        record = cls(institute_code=code, branch_code=anchor.suffix, priority=buckets.priority)
        record.absorb(buckets)
        return record

    def absorb(self, buckets: RowBuckets) -> None:
        if buckets.course:
            self.course_parts.append(buckets.course)
        if buckets.fee:
            self.fee_parts.append(buckets.fee)
        if buckets.institute:
            self.institute_parts.append(buckets.institute)


class PreferenceAssembler:
    """Two-state machine turning bucketed rows into preference entries."""

    def __init__(self, context: ExtractionContext):
        self.context = context
        self.state = AssemblerState.IDLE
        self.pending: Optional[PendingRecord] = None
        self.records: List[PreferenceEntry] = []

    def feed(self, buckets: RowBuckets) -> None:
        if self.state is AssemblerState.IDLE:
            if buckets.code is not None:
                self._open(buckets.code, buckets)
            else:
                self.context.summary.discarded_rows += 1
                logging.debug("Discarding row before first code: %r", buckets.parts[Bucket.COURSE])
            return

        if buckets.code is not None:
            self._finalize()
            self._open(buckets.code, buckets)
        elif self.pending is None:
            raise RuntimeError("Assembler is accumulating without a pending record")
        else:
            self.pending.absorb(buckets)

    def finish(self) -> List[PreferenceEntry]:
        if self.state is AssemblerState.ACCUMULATING:
            self._finalize()
        return self.records

    def _open(self, anchor: AnchorMatch, buckets: RowBuckets) -> None:
        self.pending = PendingRecord.open(anchor, buckets)
        self.state = AssemblerState.ACCUMULATING

    def _finalize(self) -> None:
        pending = self.pending
        self.pending = None
        self.state = AssemblerState.IDLE
        if pending is None or not pending.institute_code:
            logging.debug("Dropping pending record without a usable code")
            return

        config = self.context.config
        course_text = " ".join(pending.course_parts)
        institute_text = " ".join(pending.institute_parts)
        branch_code = pending.branch_code or leading_course_code(course_text, config)
        institute_name = canonical_institute(institute_text, pending.institute_code, config)

        priority = int(pending.priority) if pending.priority.isdigit() else len(self.records) + 1
        entry = PreferenceEntry(
            priority=priority,
            institute_code=pending.institute_code,
            branch_code=branch_code,
            institute_name=institute_name,
            branch_name=canonical_course(course_text, branch_code, config),
            fee=clean_fee(" ".join(pending.fee_parts), config),
            location=extract_location(institute_name, config),
        )
        self.records.append(entry)
        self.context.summary.institute_codes.add(entry.institute_code)
        self.context.summary.records_produced += 1


# --- Cutoff values ---------------------------------------------------------

_EMPTY_MARKERS = {"--", "-", "nan"}


def parse_rank(value: CellValue) -> Optional[int]:
    """Convert a category cell into an integer rank, or None when blank."""
    if isinstance(value, Empty):
        return None
    if isinstance(value, Number):
        if math.isnan(value.value):
            return None
        # Half-up rounding, as spreadsheets display it.
        return int(math.floor(value.value + 0.5))
    if isinstance(value, Text):
        text = value.value.strip()
        if text.lower() in _EMPTY_MARKERS:
            return None
        digits = re.sub(r"[^\d]", "", text)
        return int(digits) if digits else None
    raise TypeError(f"Unexpected cell value {value!r}")


def assemble_cutoffs(
    *,
    institute: str,
    institute_code: str,
    course: str,
    values: Iterable[Tuple[str, CellValue]],
    year: str,
    round_name: str,
    source: str = "",
    context: ExtractionContext,
) -> List[CutoffEntry]:
    """Build one cutoff entry per non-blank, in-range category value."""
    config = context.config
    entries: List[CutoffEntry] = []
    for category, value in values:
        rank = parse_rank(value)
        if rank is None:
            continue
        if not config.is_valid_rank(rank):
            context.summary.filtered += 1
            logging.debug(
                "Filtered out-of-range rank %s for %s/%s/%s", rank, institute_code, course, category
            )
            continue
        entries.append(
            CutoffEntry(
                institute=institute,
                institute_code=institute_code,
                course=course,
                category=category,
                cutoff_rank=rank,
                year=year,
                round=round_name,
                source=source,
            )
        )
    if entries:
        context.summary.institute_codes.add(institute_code)
        context.summary.records_produced += len(entries)
    return entries
