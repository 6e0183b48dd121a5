"""Per-document extraction state and run statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Generic, List, Optional, Set, TypeVar

from .boundaries import ColumnBoundary
from .config import DEFAULT_CONFIG, ExtractorConfig

RecordT = TypeVar("RecordT")


@dataclass
class RunSummary:
    """Container for aggregated extraction statistics."""

    institute_codes: Set[str] = field(default_factory=set)
    records_produced: int = 0
    filtered: int = 0
    ambiguous_tokens: int = 0
    discarded_rows: int = 0
    documents_processed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def institutes_found(self) -> int:
        return len(self.institute_codes)

    def record_error(self, message: str) -> None:
        self.errors.append(message)

    def merge(self, other: "RunSummary") -> "RunSummary":
        self.institute_codes |= other.institute_codes
        self.records_produced += other.records_produced
        self.filtered += other.filtered
        self.ambiguous_tokens += other.ambiguous_tokens
        self.discarded_rows += other.discarded_rows
        self.documents_processed += other.documents_processed
        self.errors.extend(other.errors)
        return self

    def to_dict(self) -> Dict[str, object]:
        return {
            "institutes_found": self.institutes_found,
            "records_produced": self.records_produced,
            "filtered": self.filtered,
            "ambiguous_tokens": self.ambiguous_tokens,
            "discarded_rows": self.discarded_rows,
            "documents_processed": self.documents_processed,
            "errors": list(self.errors),
        }


@dataclass
class ExtractionContext:
    """
    Mutable state for a single extraction run.

    The learned column boundary is the only long-lived state on the page-text
    path; it is reset at the start of every document and threaded explicitly
    through each row-processing call.
    """

    config: ExtractorConfig = field(default_factory=lambda: DEFAULT_CONFIG)
    boundary: Optional[ColumnBoundary] = None
    summary: RunSummary = field(default_factory=RunSummary)

    def __post_init__(self) -> None:
        if self.boundary is None:
            self.boundary = ColumnBoundary.from_config(self.config)

    def reset(self) -> None:
        self.boundary = ColumnBoundary.from_config(self.config)


@dataclass
class ExtractionResult(Generic[RecordT]):
    records: List[RecordT] = field(default_factory=list)
    summary: RunSummary = field(default_factory=RunSummary)

    def extend(self, other: "ExtractionResult[RecordT]") -> None:
        self.records.extend(other.records)
        self.summary.merge(other.summary)
