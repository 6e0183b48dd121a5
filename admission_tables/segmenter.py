"""
Block Segmenter for cutoff workbooks.

A KCET cutoff sheet stacks several institutes on top of each other. Each
institute block starts at a marker cell (`E001 Name` or a bare `E001` with the
name a few cells to the right), is followed by a category header row
(`1G 1K 1R 2AG ... STR`) and then one row per course. Row and column numbers
are 1-based, as openpyxl reports them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .anchors import match_institute_code
from .assembler import assemble_cutoffs
from .config import ExtractorConfig
from .context import ExtractionContext
from .errors import StructuralError
from .records import CutoffEntry
from .tokens import EMPTY, CellValue, Empty, Text, cell_value

# Single-institute sheets: how far down and across to look for the code.
FALLBACK_SEARCH_ROWS = 100
FALLBACK_SEARCH_COLUMNS = 21

_HEADER_LIKE = ("course", "branch", "engineering cutoff")


@dataclass
class SheetGrid:
    """
    One decoded worksheet, addressed by `(row, col)`.

    The used range is fixed when the grid is built: the dimensions declared
    by the decoder where it has them, widened to cover every non-empty cell.
    """

    cells: Dict[Tuple[int, int], CellValue] = field(default_factory=dict)
    name: str = ""
    min_row: Optional[int] = None
    max_row: Optional[int] = None
    min_col: Optional[int] = None
    max_col: Optional[int] = None

    def __post_init__(self) -> None:
        rows = [r for r, _ in self.cells]
        cols = [c for _, c in self.cells]
        self.min_row = _lowest(rows, self.min_row, default=1)
        self.max_row = _highest(rows, self.max_row, default=0)
        self.min_col = _lowest(cols, self.min_col, default=1)
        self.max_col = _highest(cols, self.max_col, default=0)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Sequence[object]],
        name: str = "",
        first_row: int = 1,
        max_row: Optional[int] = None,
        max_col: Optional[int] = None,
    ) -> "SheetGrid":
        """Build a grid from raw row values (e.g. `ws.iter_rows(values_only=True)`)."""
        cells: Dict[Tuple[int, int], CellValue] = {}
        for row_offset, values in enumerate(rows):
            for col_offset, raw in enumerate(values):
                value = cell_value(raw)
                if not isinstance(value, Empty):
                    cells[(first_row + row_offset, 1 + col_offset)] = value
        return cls(cells=cells, name=name, max_row=max_row, max_col=max_col)

    def get(self, row: int, col: int) -> CellValue:
        return self.cells.get((row, col), EMPTY)

    def text(self, row: int, col: int) -> str:
        return self.get(row, col).as_text()

    def __bool__(self) -> bool:
        return bool(self.cells)


@dataclass
class Block:
    code: str
    name: str
    start_row: int
    end_row: int
    # Rows above the first marker belong to the first block.
    first_row: Optional[int] = None

    def __post_init__(self) -> None:
        if self.first_row is None:
            self.first_row = self.start_row

    @property
    def rows(self) -> range:
        return range(self.first_row, self.end_row + 1)  # type: ignore[arg-type]


@dataclass
class CategoryHeaderInfo:
    row: int
    categories: List[Tuple[int, str]]

    def __len__(self) -> int:
        return len(self.categories)


def _lowest(values: List[int], declared: Optional[int], default: int) -> int:
    if declared is not None:
        values = values + [declared]
    return min(values, default=default)


def _highest(values: List[int], declared: Optional[int], default: int) -> int:
    if declared is not None:
        values = values + [declared]
    return max(values, default=default)


def _strip_parenthetical(name: str) -> str:
    return re.sub(r"\s*\(.*$", "", name).strip()


def _parse_marker(text: str, config: ExtractorConfig) -> Optional[Tuple[str, str]]:
    """
    Return `(code, name)` for a block marker cell.

    Combined markers carry the name after the code; bare markers return an
    empty name for the caller to look up.
    """
    match = match_institute_code(text, config)
    if not match or match.start() != 0:
        return None
    code = (match.group(1) if match.re.groups else match.group(0)).upper()
    rest = text[match.end():]
    if not rest:
        return code, ""
    if rest[0].isspace() and rest.strip():
        return code, _strip_parenthetical(rest.strip())
    return None


def _name_to_the_right(grid: SheetGrid, row: int, col: int, config: ExtractorConfig) -> str:
    for next_col in range(col + 1, min(col + config.name_lookahead_columns, grid.max_col) + 1):
        value = grid.text(row, next_col)
        if len(value) > 3 and not value.isdigit():
            return value
    return ""


def _marker_at(grid: SheetGrid, row: int, col: int, config: ExtractorConfig) -> Optional[Tuple[str, str]]:
    text = grid.text(row, col)
    if not text:
        return None
    marker = _parse_marker(text, config)
    if marker is None:
        return None
    code, name = marker
    if not name:
        name = _name_to_the_right(grid, row, col, config)
    return code, name or f"College {code}"


def _iter_markers(grid: SheetGrid, config: ExtractorConfig) -> Iterator[Tuple[int, str, str]]:
    last_col = min(config.marker_columns, grid.max_col)
    for row in range(grid.min_row, grid.max_row + 1):
        for col in range(1, last_col + 1):
            marker = _marker_at(grid, row, col, config)
            if marker:
                yield row, marker[0], marker[1]
                break


def find_institute_blocks(grid: SheetGrid, config: ExtractorConfig) -> List[Block]:
    """Split a sheet into consecutive institute blocks, ordered by row."""
    blocks = [Block(code, name, row, row) for row, code, name in _iter_markers(grid, config)]
    for current, following in zip(blocks, blocks[1:]):
        current.end_row = following.start_row - 1
    if blocks:
        blocks[-1].end_row = grid.max_row
        blocks[0].first_row = grid.min_row
    return blocks


def find_single_institute(grid: SheetGrid, config: ExtractorConfig) -> Optional[Block]:
    """Whole-sheet fallback for sheets holding one institute with its code off to the side."""
    last_row = min(grid.max_row, grid.min_row + FALLBACK_SEARCH_ROWS - 1)
    last_col = min(grid.max_col, FALLBACK_SEARCH_COLUMNS)
    for row in range(grid.min_row, last_row + 1):
        for col in range(1, last_col + 1):
            marker = _marker_at(grid, row, col, config)
            if marker is None:
                continue
            code, name = marker
            if name == f"College {code}":
                below = grid.text(row + 1, col)
                if len(below) > 5:
                    name = below
            return Block(code, name, row, grid.max_row, first_row=grid.min_row)
    return None


def find_category_header(
    grid: SheetGrid,
    block: Block,
    config: ExtractorConfig,
) -> Optional[CategoryHeaderInfo]:
    """Pick the row near the top of `block` with the most category labels."""
    best: Optional[CategoryHeaderInfo] = None
    last_row = min(block.start_row + config.header_search_rows, block.end_row)
    for row in range(block.start_row, last_row + 1):
        categories = []
        for col in range(grid.min_col, grid.max_col + 1):
            text = grid.text(row, col)
            if text and config.is_category(text):
                categories.append((col, text.strip().upper()))
        if best is None or len(categories) > len(best):
            best = CategoryHeaderInfo(row, categories)
    if best is None or len(best) < config.min_header_categories:
        return None
    return best


def require_category_header(grid: SheetGrid, block: Block, config: ExtractorConfig) -> CategoryHeaderInfo:
    header = find_category_header(grid, block, config)
    if header is None:
        raise StructuralError(
            f"No category header near row {block.start_row} for {block.code}"
            f"{' in sheet ' + grid.name if grid.name else ''}"
        )
    return header


def _is_institute_code(text: str, config: ExtractorConfig) -> bool:
    match = match_institute_code(text, config)
    return match is not None and match.start() == 0


def course_name(grid: SheetGrid, row: int, config: ExtractorConfig) -> str:
    for col in range(1, config.course_columns + 1):
        value = grid.get(row, col)
        if not isinstance(value, Text):
            continue
        text = value.value
        if len(text) <= 2 or not re.search(r"[A-Za-z]", text) or text.isdigit():
            continue
        if config.is_category(text) or text == "--" or _is_institute_code(text, config):
            continue
        return text
    return ""


def extract_block_cutoffs(
    grid: SheetGrid,
    block: Block,
    *,
    year: str,
    round_name: str,
    source: str = "",
    context: ExtractionContext,
) -> List[CutoffEntry]:
    """Read every course row below the block's category header."""
    config = context.config
    header = require_category_header(grid, block, config)
    entries: List[CutoffEntry] = []
    for row in range(header.row + 1, block.end_row + 1):
        course = course_name(grid, row, config)
        if not course:
            continue
        lowered = course.lower()
        if any(word in lowered for word in _HEADER_LIKE):
            logging.debug("Skipping header-like row %s: %r", row, course)
            continue
        entries.extend(
            assemble_cutoffs(
                institute=block.name,
                institute_code=block.code,
                course=course,
                values=[(category, grid.get(row, col)) for col, category in header.categories],
                year=year,
                round_name=round_name,
                source=source,
                context=context,
            )
        )
    return entries
