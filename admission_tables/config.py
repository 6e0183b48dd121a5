"""
Configuration tables consumed by the extractors.

Every vocabulary the extraction heuristics rely on lives here rather than in
the algorithms themselves: the closed set of category codes, the branch-code
lookup, the known city names, keyword lists and the numeric tolerances. The
defaults describe the KEA/KCET documents; `ExtractorConfig.from_json` lets a
caller override any subset of them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Tuple

# Category columns used in KCET cutoff sheets and PDFs.
CATEGORY_CODES: Tuple[str, ...] = (
    "1G", "1K", "1R",
    "2AG", "2AK", "2AR",
    "2BG", "2BK", "2BR",
    "3AG", "3AK", "3AR",
    "3BG", "3BK", "3BR",
    "GM", "GMK", "GMP", "GMR",
    "NRI", "OPN", "OTH",
    "SCG", "SCK", "SCR",
    "STG", "STK", "STR",
)

BRANCH_NAMES: Dict[str, str] = {
    "AI": "Artificial Intelligence and Machine Learning",
    "CS": "Computer Science and Engineering",
    "CA": "Computer Science (AI)",
    "CY": "Computer Science (Cyber Security)",
    "DS": "Computer Science (Data Science)",
    "EC": "Electronics and Communication Engineering",
    "ME": "Mechanical Engineering",
    "CE": "Civil Engineering",
    "BT": "Biotechnology",
}

# Two-letter branch codes printed in front of course names ("CS Computer ...").
COURSE_CODES: Tuple[str, ...] = (
    "AD", "AE", "AI", "AR", "AT", "AU", "BC", "BD", "BE", "BI", "BM", "BR",
    "BS", "BT", "CA", "CB", "CC", "CD", "CE", "CF", "CG", "CH", "CI", "CK",
    "CM", "CO", "CP", "CR", "CS", "CT", "CV", "CY", "DC", "DG", "DM", "DS",
    "EA", "EB", "EC", "EE", "EG", "EI", "EL", "EN", "EP", "ER", "ES", "ET",
    "EV", "IB", "IC", "IE", "IG", "II", "IM", "IO", "IP", "IS", "IT", "IY",
    "LA", "LC", "LJ", "MC", "MD", "ME", "MK", "MM", "MN", "MR", "MS", "MT",
    "NT", "OP", "OT", "PE", "PL", "PM", "PT", "RA", "RB", "RI", "RM", "RO",
    "SA", "SE", "SS", "ST", "TC", "TE", "TX", "UP", "UR", "ZC",
)

CITY_NAMES: Tuple[str, ...] = (
    "Bangalore",
    "Bengaluru",
    "Mysore",
    "Mangalore",
    "Hubli",
    "Belgaum",
    "Tumkur",
    "Varthur",
    "Davangere",
)

# Words that mark a fragment as part of a college name or address.
INSTITUTIONAL_KEYWORDS: Tuple[str, ...] = (
    "College",
    "Institute",
    "University",
    "Engineering",
    "Adyar",
    "Road",
    "Post",
    "Dist",
)

# Fee amounts leak into neighbouring columns spelled out in words.
NOISE_WORDS: Tuple[str, ...] = (
    "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Lakh", "Thousand", "Hundred", r"Rs\.", "Rupees", r"and\s+Ten", r"and\s+Four",
)

# Column titles repeated at the top of every page.
HEADER_KEYWORDS: Tuple[str, ...] = (
    r"Course\s*Name",
    r"College\s*Name",
)

INSTITUTE_CODE_PATTERN = r"\b(E\d{3})([A-Z]{2,3})?\b"
FEE_PATTERN = r"\d{1,3}(?:,\d{2,3})+"


@dataclass
class ExtractorConfig:
    """Injected vocabularies and tolerances for one extraction run."""

    category_codes: Tuple[str, ...] = CATEGORY_CODES
    branch_names: Dict[str, str] = field(default_factory=lambda: dict(BRANCH_NAMES))
    course_codes: Tuple[str, ...] = COURSE_CODES
    city_names: Tuple[str, ...] = CITY_NAMES
    state_name: str = "Karnataka"
    institutional_keywords: Tuple[str, ...] = INSTITUTIONAL_KEYWORDS
    noise_words: Tuple[str, ...] = NOISE_WORDS
    header_keywords: Tuple[str, ...] = HEADER_KEYWORDS
    institute_code_pattern: str = INSTITUTE_CODE_PATTERN
    fee_pattern: str = FEE_PATTERN
    rank_min: int = 1
    rank_max: int = 500_000
    row_tolerance: float = 10.0
    header_search_rows: int = 10
    min_header_categories: int = 8
    marker_columns: int = 6
    name_lookahead_columns: int = 5
    course_columns: int = 3
    fee_margin: float = 10.0
    fee_column_width: float = 80.0
    default_fee_start: float = 300.0
    default_college_start: float = 450.0
    min_course_length: int = 3

    def __post_init__(self) -> None:
        self.category_codes = tuple(code.upper() for code in self.category_codes)
        self.course_codes = tuple(code.upper() for code in self.course_codes)
        if self.rank_min > self.rank_max:
            raise ValueError(
                f"rank_min ({self.rank_min}) must not exceed rank_max ({self.rank_max})"
            )
        if self.default_fee_start >= self.default_college_start:
            raise ValueError("default_fee_start must be left of default_college_start")

    def is_category(self, text: str) -> bool:
        return text.strip().upper() in self.category_codes

    def is_valid_rank(self, rank: int) -> bool:
        return self.rank_min <= rank <= self.rank_max

    @classmethod
    def from_dict(cls, overrides: Dict[str, object]) -> "ExtractorConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        values = {}
        for key, value in overrides.items():
            # JSON has no tuples; keep the declared immutable shape.
            values[key] = tuple(value) if isinstance(value, list) else value
        return cls(**values)

    @classmethod
    def from_json(cls, path: Path) -> "ExtractorConfig":
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Configuration file {path} must contain a JSON object")
        return cls.from_dict(payload)


DEFAULT_CONFIG = ExtractorConfig()
