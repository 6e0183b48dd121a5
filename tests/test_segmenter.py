import unittest

from admission_tables.config import DEFAULT_CONFIG
from admission_tables.context import ExtractionContext
from admission_tables.cutoff_sheet import extract_cutoffs_from_grid, extract_cutoffs_from_workbook
from admission_tables.errors import StructuralError
from admission_tables.segmenter import (
    Block,
    SheetGrid,
    course_name,
    extract_block_cutoffs,
    find_category_header,
    find_institute_blocks,
    find_single_institute,
    require_category_header,
)
from admission_tables.tokens import cell_value

NINE_CATEGORIES = ["1G", "1K", "1R", "2AG", "2AK", "2AR", "GM", "SCG", "STG"]


def _grid(cells, name="Sheet1"):
    """`cells` maps `(row, col)` to raw spreadsheet values."""
    return SheetGrid({key: cell_value(value) for key, value in cells.items()}, name=name)


def _header(row, cells, first_col=2, categories=NINE_CATEGORIES):
    for offset, category in enumerate(categories):
        cells[(row, first_col + offset)] = category


def _course(row, cells, name, values, first_col=2):
    cells[(row, 1)] = name
    for offset, value in enumerate(values):
        if value is not None:
            cells[(row, first_col + offset)] = value


def two_institute_sheet():
    cells = {(1, 1): "KCET Engineering Cutoff Ranks 2024"}
    cells[(5, 1)] = "E010 Alpha Institute of Technology (Autonomous)"
    _header(7, cells)
    _course(8, cells, "CS Computer Science", [1, 500000, 0, 500001, "--", "12,345", 1234.5, None, "abc"])
    _course(9, cells, "Course Name", [11, 12, 13, 14, 15, 16, 17, 18, 19])
    cells[(40, 1)] = "E020"
    cells[(40, 2)] = "Beta College of Engineering"
    _header(42, cells)
    _course(43, cells, "ME Mechanical Engineering", [2000, None, None, None, None, None, 600000, None, None])
    cells[(60, 1)] = "Note: ranks are closing ranks"
    return _grid(cells)


class BlockSegmenterTests(unittest.TestCase):
    def test_blocks_are_split_at_each_marker(self):
        grid = two_institute_sheet()
        blocks = find_institute_blocks(grid, DEFAULT_CONFIG)
        self.assertEqual([(b.code, b.start_row, b.end_row) for b in blocks], [("E010", 5, 39), ("E020", 40, 60)])
        self.assertEqual(blocks[0].name, "Alpha Institute of Technology")
        self.assertEqual(blocks[1].name, "Beta College of Engineering")

    def test_blocks_partition_every_row(self):
        grid = two_institute_sheet()
        blocks = find_institute_blocks(grid, DEFAULT_CONFIG)
        covered = [row for block in blocks for row in block.rows]
        self.assertEqual(covered, list(range(grid.min_row, grid.max_row + 1)))

    def test_last_block_runs_to_declared_used_range(self):
        cells = {(3, 1): "E010 Alpha Institute of Technology"}
        _header(4, cells)
        grid = SheetGrid({key: cell_value(value) for key, value in cells.items()}, max_row=25, max_col=12)
        self.assertEqual((grid.min_row, grid.max_row, grid.min_col, grid.max_col), (3, 25, 1, 12))
        blocks = find_institute_blocks(grid, DEFAULT_CONFIG)
        self.assertEqual([(b.start_row, b.end_row) for b in blocks], [(3, 25)])

    def test_declared_range_never_hides_cells(self):
        grid = SheetGrid.from_rows([["E010 Alpha"], [None, None, "x"]], max_row=1, max_col=1)
        self.assertEqual((grid.max_row, grid.max_col), (2, 3))

    def test_many_blocks(self):
        cells = {}
        for index in range(200):
            start = 1 + index * 5
            cells[(start, 1)] = f"E{index:03d} Institute Number {index}"
            _header(start + 1, cells)
            _course(start + 2, cells, "CS Computer Science", [1000 + index])
        grid = _grid(cells)
        blocks = find_institute_blocks(grid, DEFAULT_CONFIG)
        self.assertEqual(len(blocks), 200)
        self.assertEqual(blocks[-1].end_row, 1000 - 2)
        headers = [find_category_header(grid, block, DEFAULT_CONFIG) for block in blocks]
        self.assertTrue(all(header is not None and len(header) == 9 for header in headers))

    def test_category_header_for_first_block(self):
        grid = two_institute_sheet()
        first = find_institute_blocks(grid, DEFAULT_CONFIG)[0]
        header = find_category_header(grid, first, DEFAULT_CONFIG)
        self.assertEqual(header.row, 7)
        self.assertEqual(len(header), 9)
        self.assertEqual(header.categories[0], (2, "1G"))

    def test_bare_marker_without_a_name(self):
        grid = _grid({(3, 2): "E077", (3, 3): "12"})
        blocks = find_institute_blocks(grid, DEFAULT_CONFIG)
        self.assertEqual(blocks[0].name, "College E077")

    def test_markers_beyond_the_marker_columns_are_ignored(self):
        grid = _grid({(2, 8): "E050 Gamma Institute"})
        self.assertEqual(find_institute_blocks(grid, DEFAULT_CONFIG), [])

    def test_single_institute_fallback(self):
        cells = {(2, 8): "E050", (3, 8): "Gamma Institute of Engineering"}
        _header(4, cells)
        _course(5, cells, "CE Civil Engineering", [4321])
        grid = _grid(cells)
        block = find_single_institute(grid, DEFAULT_CONFIG)
        self.assertEqual((block.code, block.name, block.start_row, block.end_row), ("E050", "Gamma Institute of Engineering", 2, 5))

        result = extract_cutoffs_from_grid(grid, "2024", "R1")
        self.assertEqual([(e.institute_code, e.category, e.cutoff_rank) for e in result.records], [("E050", "1G", 4321)])

    def test_header_needs_enough_categories(self):
        cells = {(1, 1): "E001 Small College"}
        _header(2, cells, categories=NINE_CATEGORIES[:7])
        grid = _grid(cells)
        block = find_institute_blocks(grid, DEFAULT_CONFIG)[0]
        self.assertIsNone(find_category_header(grid, block, DEFAULT_CONFIG))
        with self.assertRaises(StructuralError):
            require_category_header(grid, block, DEFAULT_CONFIG)

    def test_header_search_stops_at_block_end(self):
        cells = {(1, 1): "E001 First College", (3, 1): "E002 Second College"}
        _header(4, cells)
        grid = _grid(cells)
        first, second = find_institute_blocks(grid, DEFAULT_CONFIG)
        self.assertIsNone(find_category_header(grid, first, DEFAULT_CONFIG))
        self.assertEqual(find_category_header(grid, second, DEFAULT_CONFIG).row, 4)

    def test_course_name_skips_codes_numbers_and_categories(self):
        grid = _grid({(1, 1): "GM", (1, 2): "E001", (1, 3): "IT Information Technology"})
        self.assertEqual(course_name(grid, 1, DEFAULT_CONFIG), "IT Information Technology")
        grid = _grid({(1, 1): "--", (1, 2): "123", (1, 3): "AB"})
        self.assertEqual(course_name(grid, 1, DEFAULT_CONFIG), "")


class BlockCutoffTests(unittest.TestCase):
    def test_values_are_converted_and_range_checked(self):
        grid = two_institute_sheet()
        context = ExtractionContext()
        block = find_institute_blocks(grid, DEFAULT_CONFIG)[0]
        entries = extract_block_cutoffs(grid, block, year="2024", round_name="R2", context=context)
        self.assertEqual(
            [(e.category, e.cutoff_rank) for e in entries],
            [("1G", 1), ("1K", 500000), ("2AR", 12345), ("GM", 1235)],
        )
        self.assertTrue(all(e.course == "CS Computer Science" for e in entries))
        self.assertTrue(all(e.institute == "Alpha Institute of Technology" for e in entries))
        self.assertEqual(context.summary.filtered, 2)

    def test_whole_sheet(self):
        result = extract_cutoffs_from_grid(two_institute_sheet(), "2024", "R1", source="cutoffs.xlsx")
        codes = [e.institute_code for e in result.records]
        self.assertEqual(codes.count("E010"), 4)
        self.assertEqual(codes.count("E020"), 1)
        second = [e for e in result.records if e.institute_code == "E020"][0]
        self.assertEqual((second.category, second.cutoff_rank, second.source), ("1G", 2000, "cutoffs.xlsx"))
        # 0 and 500001 in the first block, 600000 for GM in the second.
        self.assertEqual(result.summary.filtered, 3)
        self.assertEqual(result.summary.errors, [])
        self.assertEqual(result.summary.institutes_found, 2)
        self.assertEqual(result.summary.records_produced, 5)

    def test_block_without_header_is_reported_and_skipped(self):
        cells = {(1, 1): "E001 Broken College", (2, 1): "CS Computer Science", (2, 2): 100}
        cells[(10, 1)] = "E002 Good College"
        _header(11, cells)
        _course(12, cells, "CS Computer Science", [321])
        result = extract_cutoffs_from_grid(_grid(cells, name="Page 3"), "2023", "R1")
        self.assertEqual([(e.institute_code, e.cutoff_rank) for e in result.records], [("E002", 321)])
        self.assertEqual(len(result.summary.errors), 1)
        self.assertIn("E001", result.summary.errors[0])
        self.assertIn("Page 3", result.summary.errors[0])

    def test_sheet_without_institutes(self):
        result = extract_cutoffs_from_grid(_grid({(1, 1): "Index"}, name="Cover"), "2024", "R1")
        self.assertEqual(result.records, [])
        self.assertEqual(len(result.summary.errors), 1)

    def test_workbook_sheets_are_independent(self):
        broken = _grid({(1, 1): "Index"}, name="Cover")
        result = extract_cutoffs_from_workbook([broken, two_institute_sheet()], "2024", "R1")
        self.assertEqual(len(result.records), 5)
        self.assertEqual(len(result.summary.errors), 1)
        self.assertEqual(result.summary.documents_processed, 1)


class BlockTests(unittest.TestCase):
    def test_rows_default_to_marker_row(self):
        block = Block("E001", "A", start_row=5, end_row=9)
        self.assertEqual(list(block.rows), [5, 6, 7, 8, 9])


if __name__ == "__main__":
    unittest.main()
