import math
import unittest

from admission_tables.config import DEFAULT_CONFIG
from admission_tables.rows import group_rows, sheet_rows
from admission_tables.tokens import (
    EMPTY,
    CellPosition,
    Number,
    PagePosition,
    Text,
    Token,
    cell_value,
    clean_text,
    tokens_from_cells,
    tokens_from_fragments,
    tokens_from_words,
)


class TokenNormalizerTests(unittest.TestCase):
    def test_blank_fragments_are_dropped(self):
        tokens = tokens_from_fragments(
            [("E001", 50, 700, 1), ("   ", 60, 700, 1), ("\t\n", 70, 700, 1), ("GM", 80, 700, 1)]
        )
        self.assertEqual([t.text for t in tokens], ["E001", "GM"])
        self.assertEqual(tokens[0].position, PagePosition(50.0, 700.0, 1))

    def test_whitespace_is_collapsed(self):
        self.assertEqual(clean_text("  Computer\n Science\tand  Engg "), "Computer Science and Engg")
        self.assertEqual(clean_text(None), "")

    def test_pdfplumber_words_are_flipped_into_pdf_space(self):
        words = [{"text": "E001", "x0": 12.5, "bottom": 100.0}, {"text": " ", "x0": 20, "bottom": 100}]
        tokens = tokens_from_words(words, page_number=3, page_height=800)
        self.assertEqual(len(tokens), 1)
        self.assertEqual(tokens[0].position, PagePosition(12.5, 700.0, 3))

    def test_cell_values_are_classified_once(self):
        self.assertIs(cell_value(None), EMPTY)
        self.assertIs(cell_value(float("nan")), EMPTY)
        self.assertIs(cell_value("  "), EMPTY)
        self.assertIs(cell_value("nan"), EMPTY)
        self.assertEqual(cell_value(5), Number(5.0))
        self.assertEqual(cell_value(1234.5), Number(1234.5))
        self.assertEqual(cell_value(" 12,345 "), Text("12,345"))
        self.assertEqual(cell_value(True), Text("True"))

    def test_number_text_form(self):
        self.assertEqual(Number(12.0).as_text(), "12")
        self.assertEqual(Number(12.5).as_text(), "12.5")
        self.assertTrue(math.isclose(Number(3).value, 3.0))

    def test_cells_become_tokens_without_empties(self):
        tokens = tokens_from_cells([(1, 1, Text("E001 ABC")), (1, 2, EMPTY), (2, 3, Number(42))])
        self.assertEqual([t.text for t in tokens], ["E001 ABC", "42"])
        self.assertEqual(tokens[1].position, CellPosition(2, 3))


def _tok(text, x, y, page=1):
    return Token(text, PagePosition(x, y, page))


class RowGrouperTests(unittest.TestCase):
    def test_tokens_within_tolerance_share_a_row_left_to_right(self):
        rows = group_rows([_tok("B", 200, 700), _tok("A", 100, 695)])
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].texts, ["A", "B"])

    def test_distance_equal_to_tolerance_starts_a_new_row(self):
        rows = group_rows([_tok("top", 100, 700), _tok("below", 100, 690)])
        self.assertEqual([row.texts for row in rows], [["top"], ["below"]])

    def test_rows_run_top_of_page_first(self):
        rows = group_rows([_tok("low", 10, 100), _tok("high", 10, 700), _tok("mid", 10, 400)])
        self.assertEqual([row.joined() for row in rows], ["high", "mid", "low"])

    def test_pages_are_walked_in_order_and_never_merged(self):
        rows = group_rows([_tok("p2", 10, 800, page=2), _tok("p1", 10, 100, page=1), _tok("p2b", 50, 800, page=2)])
        self.assertEqual([row.texts for row in rows], [["p1"], ["p2", "p2b"]])
        self.assertEqual(rows[1].page, 2)

    def test_default_tolerance_comes_from_config(self):
        gap = DEFAULT_CONFIG.row_tolerance
        self.assertEqual(len(group_rows([_tok("a", 10, 700), _tok("b", 10, 700 - gap)])), 2)
        self.assertEqual(len(group_rows([_tok("a", 10, 700), _tok("b", 10, 700 - gap + 0.5)])), 1)

    def test_custom_tolerance(self):
        tokens = [_tok("a", 10, 700), _tok("b", 10, 685)]
        self.assertEqual(len(group_rows(tokens, tolerance=20)), 1)
        self.assertEqual(len(group_rows(tokens, tolerance=10)), 2)

    def test_cell_tokens_are_rejected(self):
        with self.assertRaises(TypeError):
            group_rows([Token("x", CellPosition(1, 1))])

    def test_sheet_rows_group_by_row_index(self):
        tokens = [
            Token("c", CellPosition(2, 3)),
            Token("a", CellPosition(1, 2)),
            Token("b", CellPosition(2, 1)),
        ]
        self.assertEqual([row.texts for row in sheet_rows(tokens)], [["a"], ["b", "c"]])


if __name__ == "__main__":
    unittest.main()
