"""Row Grouper: cluster tokens into ordered visual rows."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Sequence

from .config import DEFAULT_CONFIG
from .tokens import CellPosition, PagePosition, Token


class Row(Sequence[Token]):
    """Tokens believed to share one visual line, left to right."""

    __slots__ = ("_tokens",)

    def __init__(self, tokens: Iterable[Token]):
        self._tokens = tuple(tokens)

    def __getitem__(self, index):  # type: ignore[override]
        return self._tokens[index]

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __repr__(self) -> str:
        return f"Row({list(self.texts)!r})"

    @property
    def texts(self) -> List[str]:
        return [token.text for token in self._tokens]

    @property
    def page(self) -> int | None:
        if not self._tokens:
            return None
        position = self._tokens[0].position
        return position.page if isinstance(position, PagePosition) else None

    @property
    def y(self) -> float | None:
        if not self._tokens or not isinstance(self._tokens[0].position, PagePosition):
            return None
        return self._tokens[0].y

    def joined(self) -> str:
        return " ".join(self.texts)


def group_rows(tokens: Iterable[Token], tolerance: float = DEFAULT_CONFIG.row_tolerance) -> List[Row]:
    """
    Group page tokens into rows, top of page first.

    Tokens are sorted by descending `y` then ascending `x`; a new row starts
    whenever the vertical distance to the previous token reaches `tolerance`.
    Pages are walked in ascending order and a row never spans two pages.
    """
    by_page: Dict[int, List[Token]] = defaultdict(list)
    for token in tokens:
        position = token.position
        if not isinstance(position, PagePosition):
            raise TypeError(f"group_rows expects page tokens, got {position!r}")
        by_page[position.page].append(token)

    rows: List[Row] = []
    for page in sorted(by_page):
        items = sorted(by_page[page], key=lambda t: (-t.y, t.x))
        current: List[Token] = []
        current_y: float | None = None
        for token in items:
            if current_y is not None and abs(token.y - current_y) >= tolerance:
                rows.append(Row(sorted(current, key=lambda t: t.x)))
                current = []
            current.append(token)
            current_y = token.y
        if current:
            rows.append(Row(sorted(current, key=lambda t: t.x)))
    return rows


def sheet_rows(tokens: Iterable[Token]) -> List[Row]:
    """Spreadsheet rows: all cells sharing a row index, by ascending column."""
    by_row: Dict[int, List[Token]] = defaultdict(list)
    for token in tokens:
        position = token.position
        if not isinstance(position, CellPosition):
            raise TypeError(f"sheet_rows expects cell tokens, got {position!r}")
        by_row[position.row].append(token)
    return [
        Row(sorted(by_row[row], key=lambda t: t.position.col))  # type: ignore[union-attr]
        for row in sorted(by_row)
    ]
