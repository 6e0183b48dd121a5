"""
Layout-aware extraction of KCET/KEA admission tables.

This package exposes a programmatic API for:
  * turning option-entry PDFs into ordered preference entries
    (`preference_pdf.extract_preferences`)
  * reading multi-institute cutoff workbooks (`cutoff_sheet.extract_cutoffs_from_workbook`)
    and cutoff PDFs (`cutoff_pdf.extract_cutoffs_from_pages`)
  * running either over many documents in parallel (`batch.extract_batch`)
  * writing the results as JSON, CSV or Excel (`export.export_records`)
"""

from .batch import BatchResult, extract_batch
from .config import DEFAULT_CONFIG, ExtractorConfig
from .context import ExtractionResult, RunSummary
from .cutoff_pdf import extract_cutoffs_from_pages
from .cutoff_sheet import extract_cutoffs_from_grid, extract_cutoffs_from_workbook, parse_source_name
from .errors import ExtractionError, FatalDecodeError, StructuralError
from .export import export_records
from .preference_pdf import extract_preferences
from .records import CutoffEntry, PreferenceEntry

__all__ = [
    "BatchResult",
    "CutoffEntry",
    "DEFAULT_CONFIG",
    "ExtractionError",
    "ExtractionResult",
    "ExtractorConfig",
    "FatalDecodeError",
    "PreferenceEntry",
    "RunSummary",
    "StructuralError",
    "export_records",
    "extract_batch",
    "extract_cutoffs_from_grid",
    "extract_cutoffs_from_pages",
    "extract_cutoffs_from_workbook",
    "extract_preferences",
    "parse_source_name",
]
