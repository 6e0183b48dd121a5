#!/usr/bin/env python3
"""
Streamlit UI for the admission table extractors:
  - KEA option-entry PDF -> ordered preference list
  - KCET cutoff workbook (.xlsx) or cutoff PDF -> cutoff ranks
"""

from __future__ import annotations

import io
import tempfile
from pathlib import Path

import pandas as pd
import streamlit as st

from admission_tables.batch import CUTOFFS, PREFERENCES, extract_document
from admission_tables.cutoff_sheet import parse_source_name
from admission_tables.export import SHEET_NAMES, records_dataframe, summary_dataframe


st.set_page_config(page_title="Admission Table Extractor", layout="wide")
st.title("Admission Table Extractor")
st.write(
    "Upload an option-entry PDF to rebuild the preference list, or a cutoff workbook/PDF "
    "to extract closing ranks per institute, course and category."
)


workflow = st.radio(
    "Select workflow",
    options=(
        "Option Entry Preferences",
        "Cutoff Ranks",
    ),
)
kind = PREFERENCES if workflow == "Option Entry Preferences" else CUTOFFS

uploader_key = f"uploader_{kind}"
uploaded_file = st.file_uploader(
    "Upload a document for the selected workflow",
    type=["pdf"] if kind == PREFERENCES else ["pdf", "xlsx"],
    accept_multiple_files=False,
    key=uploader_key,
)

engine = st.selectbox("PDF decoder", options=("pdfplumber", "pypdf"))

year = round_name = None
if kind == CUTOFFS and uploaded_file is not None:
    guessed_year, guessed_round = parse_source_name(uploaded_file.name)
    year = st.text_input("Year", value=guessed_year)
    round_name = st.selectbox(
        "Round",
        options=("R1", "R2", "R3", "EXT", "MOCK"),
        index=("R1", "R2", "R3", "EXT", "MOCK").index(guessed_round),
    )

if uploaded_file is None:
    st.info("Select a workflow and upload the corresponding document to begin parsing.")


def _render_dataframe_tabs(tab_entries):
    tab_objects = st.tabs([title for title, _ in tab_entries])
    for tab, (title, df) in zip(tab_objects, tab_entries):
        with tab:
            if df is None or df.empty:
                st.info("No rows available.")
            else:
                st.dataframe(df.head(25), use_container_width=True)
                st.caption("Preview limited to the first 25 rows.")


if uploaded_file is not None:
    with tempfile.TemporaryDirectory() as upload_dir:
        # Keep the original name so year/round can still be read from it.
        tmp_path = Path(upload_dir) / Path(uploaded_file.name).name
        tmp_path.write_bytes(uploaded_file.getbuffer())

        try:
            options = {"engine": engine}
            if kind == CUTOFFS:
                options.update(year=year, round_name=round_name)
            with st.spinner("Extracting tables..."):
                result = extract_document(tmp_path, kind, **options)
        except Exception as exc:  # pragma: no cover - surface unexpected errors
            st.error(f"Failed to process {uploaded_file.name}: {exc}")
        else:
            summary = result.summary
            st.success(
                f"Extracted {len(result.records)} {kind} from "
                f"{summary.institutes_found} institutes "
                f"({summary.filtered} filtered, {summary.ambiguous_tokens} ambiguous tokens)."
            )
            for message in summary.errors:
                st.warning(message)

            records_df = records_dataframe(result.records, kind)
            summary_df = summary_dataframe(summary)
            _render_dataframe_tabs([(SHEET_NAMES[kind], records_df), ("Summary", summary_df)])

            output_stream = io.BytesIO()
            with pd.ExcelWriter(output_stream, engine="xlsxwriter") as writer:
                records_df.to_excel(writer, sheet_name=SHEET_NAMES[kind], index=False)
                summary_df.to_excel(writer, sheet_name="Summary", index=False)
            output_stream.seek(0)

            st.download_button(
                "Download Excel Workbook",
                data=output_stream,
                file_name=f"{Path(uploaded_file.name).stem}_{kind}.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
