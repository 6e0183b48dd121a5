"""
Thin adapters over the PDF and workbook libraries.

Everything downstream works on `(text, x, y, page)` fragments or on
`SheetGrid` objects, so the choice of decoder stays local to this module.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

import pdfplumber
from openpyxl import load_workbook
from pypdf import PdfReader

from .errors import FatalDecodeError
from .segmenter import SheetGrid
from .tokens import clean_text, tokens_from_words

Fragment = Tuple[str, float, float, int]

PDF_ENGINES = ("pdfplumber", "pypdf")


def _fragments_with_pdfplumber(pdf_path: Path) -> List[Fragment]:
    fragments: List[Fragment] = []
    with pdfplumber.open(str(pdf_path)) as pdf:
        for page_number, page in enumerate(pdf.pages, start=1):
            words = page.extract_words(keep_blank_chars=False)
            for token in tokens_from_words(words, page_number, float(page.height)):
                fragments.append((token.text, token.x, token.y, page_number))
    return fragments


def _fragments_with_pypdf(pdf_path: Path) -> List[Fragment]:
    reader = PdfReader(str(pdf_path))
    fragments: List[Fragment] = []
    for page_number, page in enumerate(reader.pages, start=1):

        def visitor(text, cm, tm, font_dict, font_size, page_number=page_number):
            text = clean_text(text)
            if not text:
                return
            # Text matrix origin mapped through the current transformation matrix.
            x = tm[4] * cm[0] + tm[5] * cm[2] + cm[4]
            y = tm[4] * cm[1] + tm[5] * cm[3] + cm[5]
            fragments.append((text, float(x), float(y), page_number))

        page.extract_text(visitor_text=visitor)
    return fragments


def load_pdf_fragments(pdf_path: Path, engine: str = "pdfplumber") -> List[Fragment]:
    """Decode every page of a PDF into positioned text fragments."""
    if engine not in PDF_ENGINES:
        raise ValueError(f"Unknown PDF engine {engine!r}; expected one of {', '.join(PDF_ENGINES)}")
    pdf_path = Path(pdf_path)
    try:
        if engine == "pypdf":
            fragments = _fragments_with_pypdf(pdf_path)
        else:
            fragments = _fragments_with_pdfplumber(pdf_path)
    except Exception as exc:
        raise FatalDecodeError(pdf_path.name, str(exc)) from exc
    if not fragments:
        raise FatalDecodeError(pdf_path.name, "no text fragments (scanned or empty document?)")
    logging.debug("Decoded %d fragments from %s with %s", len(fragments), pdf_path.name, engine)
    return fragments


def load_workbook_grids(workbook_path: Path) -> List[SheetGrid]:
    """One `SheetGrid` per worksheet, cell values as cached by Excel."""
    workbook_path = Path(workbook_path)
    try:
        workbook = load_workbook(str(workbook_path), read_only=True, data_only=True)
    except Exception as exc:
        raise FatalDecodeError(workbook_path.name, str(exc)) from exc
    try:
        grids = [
            SheetGrid.from_rows(
                sheet.iter_rows(min_row=1, values_only=True),
                name=sheet.title,
                max_row=sheet.max_row,
                max_col=sheet.max_column,
            )
            for sheet in workbook.worksheets
        ]
    except Exception as exc:
        raise FatalDecodeError(workbook_path.name, str(exc)) from exc
    finally:
        workbook.close()
    logging.debug("Loaded %d sheets from %s", len(grids), workbook_path.name)
    return grids
