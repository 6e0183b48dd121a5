import csv
import json
import tempfile
import unittest
from pathlib import Path

from openpyxl import load_workbook

from admission_tables.context import RunSummary
from admission_tables.export import export_records, records_dataframe, summary_dataframe
from admission_tables.records import PREFERENCE_COLUMNS, CutoffEntry, PreferenceEntry


def _preferences():
    return [
        PreferenceEntry(1, "E001", "CS", "ABC College Bangalore", "Computer Science", "1,23,000", "Bangalore"),
        PreferenceEntry(2, "E002", "EC", "College E002", "Electronics", "Not specified", "Karnataka"),
    ]


class RecordTests(unittest.TestCase):
    def test_preference_serializers(self):
        entry = _preferences()[0]
        self.assertEqual(entry.to_json_dict()["id"], "opt-1-E001CS")
        self.assertEqual(entry.to_json_dict()["course_code"], "E001CS")
        row = entry.to_csv_row()
        self.assertEqual(list(row), PREFERENCE_COLUMNS)
        self.assertEqual(row["PRIORITY"], "1")

    def test_cutoff_json_omits_empty_source(self):
        entry = CutoffEntry("ABC", "E001", "CS", "GM", 1200, "2024", "R1")
        self.assertNotIn("source", entry.to_json_dict())
        entry.source = "a.xlsx"
        self.assertEqual(entry.to_json_dict()["source"], "a.xlsx")


class ExportTests(unittest.TestCase):
    def test_preferences_in_every_format(self):
        summary = RunSummary(institute_codes={"E001", "E002"}, records_produced=2, ambiguous_tokens=3)
        with tempfile.TemporaryDirectory() as tmp:
            out_dir = Path(tmp) / "nested" / "out"
            written = export_records(_preferences(), summary, "preferences", out_dir, stem="option_entry")
            self.assertEqual([p.name for p in written], ["option_entry.json", "option_entry.csv", "option_entry.xlsx"])

            payload = json.loads((out_dir / "option_entry.json").read_text(encoding="utf-8"))
            self.assertEqual(payload["metadata"]["total_entries"], 2)
            self.assertEqual(payload["metadata"]["institutes_found"], 2)
            self.assertEqual(payload["metadata"]["ambiguous_tokens"], 3)
            self.assertNotIn("records_by_year", payload["metadata"])
            self.assertEqual([p["priority"] for p in payload["preferences"]], [1, 2])

            with (out_dir / "option_entry.csv").open(newline="", encoding="utf-8") as handle:
                rows = list(csv.DictReader(handle))
            self.assertEqual(rows[1]["FEE"], "Not specified")

            workbook = load_workbook(out_dir / "option_entry.xlsx")
            self.assertEqual(workbook.sheetnames, ["Preferences", "Summary"])

    def test_empty_records_keep_columns(self):
        frame = records_dataframe([], "cutoffs")
        self.assertTrue(frame.empty)
        self.assertEqual(list(frame.columns)[:2], ["INSTITUTE", "INSTITUTE CODE"])

    def test_summary_frame_lists_errors(self):
        summary = RunSummary()
        summary.record_error("broken.xlsx: Could not decode broken.xlsx: bad zip")
        frame = summary_dataframe(summary)
        self.assertEqual(frame.iloc[-1]["Metric"], "error")
        self.assertIn("broken.xlsx", frame.iloc[-1]["Value"])

    def test_unknown_kind(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                export_records([], RunSummary(), "ranks", Path(tmp))


if __name__ == "__main__":
    unittest.main()
