"""JSON, CSV and Excel writers for extracted records."""

from __future__ import annotations

import csv
import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .context import RunSummary
from .records import CUTOFF_COLUMNS, PREFERENCE_COLUMNS, CutoffEntry

FORMATS = ("json", "csv", "xlsx")

SHEET_NAMES = {
    "preferences": "Preferences",
    "cutoffs": "Cutoffs",
}


def columns_for(kind: str) -> List[str]:
    return list(CUTOFF_COLUMNS if kind == "cutoffs" else PREFERENCE_COLUMNS)


def build_metadata(records: Sequence, summary: RunSummary, kind: str) -> Dict[str, object]:
    metadata: Dict[str, object] = {
        "extraction_date": datetime.now(timezone.utc).isoformat(),
        "extraction_type": kind,
        "total_entries": len(records),
    }
    metadata.update(summary.to_dict())
    metadata["unique_institutes_list"] = sorted(summary.institute_codes)

    cutoffs = [record for record in records if isinstance(record, CutoffEntry)]
    if cutoffs:
        metadata["records_by_year"] = dict(Counter(record.year for record in cutoffs))
        metadata["records_by_round"] = dict(Counter(record.round for record in cutoffs))
        metadata["unique_courses"] = len({record.course for record in cutoffs})
        metadata["unique_categories"] = len({record.category for record in cutoffs})
    return metadata


def records_dataframe(records: Sequence, kind: str) -> pd.DataFrame:
    rows = [record.to_csv_row() for record in records]
    return pd.DataFrame(rows, columns=columns_for(kind)).fillna("")


def summary_dataframe(summary: RunSummary) -> pd.DataFrame:
    rows = []
    for key, value in summary.to_dict().items():
        if key == "errors":
            continue
        rows.append({"Metric": key, "Value": value})
    for message in summary.errors:
        rows.append({"Metric": "error", "Value": message})
    return pd.DataFrame(rows, columns=["Metric", "Value"])


def write_json(records: Sequence, summary: RunSummary, kind: str, path: Path) -> Path:
    payload = {
        "metadata": build_metadata(records, summary, kind),
        kind: [record.to_json_dict() for record in records],
    }
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logging.info("Wrote %s", path)
    return path


def write_csv(records: Sequence, kind: str, path: Path) -> Path:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=columns_for(kind))
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_csv_row())
    logging.info("Wrote %s", path)
    return path


def write_excel(records: Sequence, summary: RunSummary, kind: str, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        records_dataframe(records, kind).to_excel(writer, sheet_name=SHEET_NAMES[kind], index=False)
        summary_dataframe(summary).to_excel(writer, sheet_name="Summary", index=False)
    logging.info("Wrote %s", path)
    return path


def export_records(
    records: Sequence,
    summary: RunSummary,
    kind: str,
    output_dir: Path,
    formats: Sequence[str] = FORMATS,
    stem: Optional[str] = None,
) -> List[Path]:
    """Write `records` in every requested format; returns the written paths."""
    if kind not in SHEET_NAMES:
        raise ValueError(f"Unknown record kind {kind!r}")
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = stem or kind
    written: List[Path] = []
    if "json" in formats:
        written.append(write_json(records, summary, kind, output_dir / f"{stem}.json"))
    if "csv" in formats:
        written.append(write_csv(records, kind, output_dir / f"{stem}.csv"))
    if "xlsx" in formats:
        written.append(write_excel(records, summary, kind, output_dir / f"{stem}.xlsx"))
    return written
