"""
Column Boundary Learner and token bucketing.

Every non-anchor token of a row is assigned to a logical bucket. Rows with a
fee anchor are split by token index around that anchor and re-calibrate the
learned x-coordinates; continuation rows (no fee) fall back to the most
recently learned coordinates.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from .anchors import AnchorMatch, RowAnchors
from .config import ExtractorConfig
from .tokens import PagePosition, Token

if TYPE_CHECKING:  # pragma: no cover
    from .context import ExtractionContext


class Bucket(enum.Enum):
    PRIORITY = "priority"
    CODE = "code"
    COURSE = "course"
    FEE = "fee"
    INSTITUTE = "institute"


@dataclass
class ColumnBoundary:
    """Learned x-coordinates separating course, fee and college columns."""

    fee_start: float
    college_start: float

    def __post_init__(self) -> None:
        if not self.fee_start < self.college_start:
            raise ValueError(
                f"fee_start ({self.fee_start}) must be left of college_start ({self.college_start})"
            )

    @classmethod
    def from_config(cls, config: ExtractorConfig) -> "ColumnBoundary":
        return cls(config.default_fee_start, config.default_college_start)

    def learn(self, fee_x: float, config: ExtractorConfig) -> None:
        fee_start = fee_x - config.fee_margin
        college_start = fee_x + config.fee_column_width
        if not fee_start < college_start:
            raise ValueError("fee_margin and fee_column_width must widen the fee column")
        self.fee_start = fee_start
        self.college_start = college_start


@dataclass
class RowBuckets:
    code: Optional[AnchorMatch] = None
    parts: Dict[Bucket, List[str]] = field(
        default_factory=lambda: {bucket: [] for bucket in Bucket}
    )

    @property
    def priority(self) -> str:
        numbers = self.parts[Bucket.PRIORITY]
        return numbers[-1] if numbers else ""

    @property
    def course(self) -> str:
        return " ".join(self.parts[Bucket.COURSE])

    @property
    def fee(self) -> str:
        return " ".join(self.parts[Bucket.FEE])

    @property
    def institute(self) -> str:
        return " ".join(self.parts[Bucket.INSTITUTE])


def has_institutional_keyword(text: str, config: ExtractorConfig) -> bool:
    if not config.institutional_keywords:
        return False
    pattern = "|".join(re.escape(word) for word in config.institutional_keywords)
    return re.search(pattern, text, re.IGNORECASE) is not None


def classify_continuation(
    token: Token,
    boundary: ColumnBoundary,
    config: ExtractorConfig,
) -> tuple[Bucket, bool]:
    """
    Bucket a token from a row without a fee anchor.

    Returns the bucket and whether the token sat in the ambiguous zone
    between the learned fee and college starts.
    """
    x = token.x
    if x < boundary.fee_start:
        return Bucket.COURSE, False
    if x > boundary.college_start:
        return Bucket.INSTITUTE, False
    if has_institutional_keyword(token.text, config):
        return Bucket.INSTITUTE, True
    return Bucket.COURSE, True


def bucket_row(
    row: Sequence[Token],
    anchors: RowAnchors,
    context: "ExtractionContext",
) -> RowBuckets:
    config = context.config
    if context.boundary is None:
        context.reset()
    boundary = context.boundary

    code_index = anchors.institute.token_index if anchors.institute else -1
    fee_index = anchors.fee.token_index if anchors.fee else -1

    if anchors.fee is not None:
        fee_position = row[fee_index].position
        if isinstance(fee_position, PagePosition):
            boundary.learn(fee_position.x, config)

    buckets = RowBuckets(code=anchors.institute)
    if anchors.institute is not None:
        buckets.parts[Bucket.CODE].append(anchors.institute.value)
        if anchors.institute.remainder:
            buckets.parts[Bucket.INSTITUTE].append(anchors.institute.remainder)

    for index, token in enumerate(row):
        text = token.text
        if index == code_index:
            continue
        if index == fee_index:
            buckets.parts[Bucket.FEE].append(text)
        elif code_index != -1 and index < code_index:
            if text.isdigit():
                buckets.parts[Bucket.PRIORITY].append(text)
            else:
                logging.debug("Ignoring %r left of code %s", text, anchors.institute.value)
        elif fee_index != -1:
            if index < fee_index:
                buckets.parts[Bucket.COURSE].append(text)
            else:
                buckets.parts[Bucket.INSTITUTE].append(text)
        else:
            bucket, ambiguous = classify_continuation(token, boundary, config)
            if ambiguous:
                context.summary.ambiguous_tokens += 1
                logging.debug(
                    "Ambiguous token %r at x=%.1f (fee_start=%.1f, college_start=%.1f) -> %s",
                    text,
                    token.x,
                    boundary.fee_start,
                    boundary.college_start,
                    bucket.value,
                )
            buckets.parts[bucket].append(text)

    return buckets
