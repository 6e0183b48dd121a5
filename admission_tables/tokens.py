"""
Token Normalizer.

Source-specific primitives (page text fragments with coordinates, pdfplumber
words, spreadsheet cells) are converted into one immutable `Token` shape.
Blank fragments never leave this module.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence, Tuple, Union


@dataclass(frozen=True)
class PagePosition:
    x: float
    y: float
    page: int = 1


@dataclass(frozen=True)
class CellPosition:
    row: int
    col: int


Position = Union[PagePosition, CellPosition]


@dataclass(frozen=True)
class Token:
    text: str
    position: Position

    @property
    def x(self) -> float:
        return self.position.x  # type: ignore[union-attr]

    @property
    def y(self) -> float:
        return self.position.y  # type: ignore[union-attr]


# --- Cell values -----------------------------------------------------------


@dataclass(frozen=True)
class Number:
    value: float

    def as_text(self) -> str:
        if float(self.value).is_integer():
            return str(int(self.value))
        return str(self.value)


@dataclass(frozen=True)
class Text:
    value: str

    def as_text(self) -> str:
        return self.value


@dataclass(frozen=True)
class Empty:
    def as_text(self) -> str:
        return ""


CellValue = Union[Number, Text, Empty]
EMPTY = Empty()

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(value: object) -> str:
    """Collapse tabs/newlines/runs of spaces and trim."""
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def cell_value(raw: object) -> CellValue:
    """Classify a decoded spreadsheet value once, at normalization time."""
    if raw is None:
        return EMPTY
    if isinstance(raw, bool):
        return Text(str(raw))
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and math.isnan(raw):
            return EMPTY
        return Number(float(raw))
    text = clean_text(raw)
    if not text or text.lower() == "nan":
        return EMPTY
    return Text(text)


# --- Normalizers -----------------------------------------------------------


def tokens_from_fragments(fragments: Iterable[Tuple[str, float, float, int]]) -> List[Token]:
    """Convert `(text, x, y, page)` fragments into tokens, dropping blank text."""
    tokens: List[Token] = []
    for text, x, y, page in fragments:
        cleaned = clean_text(text)
        if not cleaned:
            continue
        tokens.append(Token(cleaned, PagePosition(float(x), float(y), int(page))))
    return tokens


def tokens_from_words(
    words: Sequence[Mapping[str, object]],
    page_number: int,
    page_height: float,
) -> List[Token]:
    """
    Convert pdfplumber `extract_words` output into tokens.

    pdfplumber measures `bottom` from the top edge of the page; the baseline is
    flipped into PDF user space so that larger `y` means higher on the page.
    """
    tokens: List[Token] = []
    for word in words:
        cleaned = clean_text(word.get("text"))
        if not cleaned:
            continue
        x = float(word["x0"])  # type: ignore[arg-type]
        y = float(page_height) - float(word["bottom"])  # type: ignore[arg-type]
        tokens.append(Token(cleaned, PagePosition(x, y, page_number)))
    return tokens


def tokens_from_cells(cells: Iterable[Tuple[int, int, CellValue]]) -> List[Token]:
    tokens: List[Token] = []
    for row, col, value in cells:
        text = value.as_text()
        if not text:
            continue
        tokens.append(Token(text, CellPosition(row, col)))
    return tokens
