"""
Anchor Detector.

Anchors are tokens matching low-ambiguity patterns: an institute code
(`E001`, `E001CS`), a fee written with digit grouping (`1,23,000`) and the
closed set of category labels (`GM`, `2AG`, ...). Their positions inside a row
are what lets the surrounding free text be bucketed.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Pattern, Sequence

from .config import ExtractorConfig
from .tokens import Token


class AnchorKind(enum.Enum):
    INSTITUTE_CODE = "institute_code"
    FEE_AMOUNT = "fee_amount"
    CATEGORY_LABEL = "category_label"


@dataclass(frozen=True)
class AnchorMatch:
    kind: AnchorKind
    token_index: int
    value: str
    # Institute-code anchors only: letters glued to the code (`CS` in `E001CS`)
    # and any text following the code inside the same token.
    suffix: str = ""
    remainder: str = ""


@dataclass
class RowAnchors:
    institute: Optional[AnchorMatch] = None
    fee: Optional[AnchorMatch] = None
    categories: List[AnchorMatch] = field(default_factory=list)

    @property
    def is_continuation(self) -> bool:
        return self.institute is None and self.fee is None and not self.categories


@lru_cache(maxsize=32)
def _compile(pattern: str) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def match_institute_code(text: str, config: ExtractorConfig) -> Optional[re.Match]:
    return _compile(config.institute_code_pattern).search(text)


def match_fee(text: str, config: ExtractorConfig) -> Optional[re.Match]:
    return _compile(config.fee_pattern).search(text)


def detect_anchors(row: Sequence[Token], config: ExtractorConfig) -> RowAnchors:
    """
    Locate anchors in one row.

    Only the first institute code and the first fee in the row are used;
    every category label is recorded. The token carrying the institute code
    is never also reported as a category label.
    """
    anchors = RowAnchors()
    for index, token in enumerate(row):
        text = token.text
        if anchors.institute is None:
            match = match_institute_code(text, config)
            if match:
                code = (match.group(1) if match.re.groups else match.group(0)).upper()
                suffix = (match.group(2) or "").upper() if match.re.groups >= 2 else ""
                remainder = (text[: match.start()] + " " + text[match.end():]).strip()
                anchors.institute = AnchorMatch(
                    AnchorKind.INSTITUTE_CODE,
                    index,
                    code + suffix,
                    suffix=suffix,
                    remainder=remainder,
                )
                continue
        if anchors.fee is None:
            match = match_fee(text, config)
            if match:
                anchors.fee = AnchorMatch(AnchorKind.FEE_AMOUNT, index, match.group(0))
                continue
        if config.is_category(text):
            anchors.categories.append(
                AnchorMatch(AnchorKind.CATEGORY_LABEL, index, text.strip().upper())
            )
    return anchors


def is_header_row(row: Sequence[Token], config: ExtractorConfig) -> bool:
    """
    Rows repeating the column titles ("Course Name", "College Name").

    Titles are matched against the whole row since word-level decoders split
    them over several tokens.
    """
    text = " ".join(token.text for token in row)
    return any(_compile(keyword).search(text) for keyword in config.header_keywords)
