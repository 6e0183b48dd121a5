"""
Canonicalizer: clean accumulated free text and supply fallback names.

Missing names are replaced by synthetic ones (`College E001`,
`XY Engineering`), never by an empty field.
"""

from __future__ import annotations

import re
from typing import List, Pattern, Tuple

from .anchors import match_fee
from .config import ExtractorConfig

FEE_NOT_SPECIFIED = "Not specified"

_noise_cache: dict = {}


def _noise_pattern(config: ExtractorConfig) -> Pattern[str] | None:
    key = tuple(config.noise_words)
    if not key:
        return None
    pattern = _noise_cache.get(key)
    if pattern is None:
        pattern = re.compile(r"(?<!\w)(?:" + "|".join(key) + r")(?!\w)", re.IGNORECASE)
        _noise_cache[key] = pattern
    return pattern


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def clean_free_text(text: str, config: ExtractorConfig) -> str:
    """Strip spelled-out amounts and currency words, then collapse whitespace."""
    pattern = _noise_pattern(config)
    if pattern is not None:
        text = pattern.sub("", text or "")
    return collapse_whitespace(text)


def clean_fee(text: str, config: ExtractorConfig) -> str:
    match = match_fee(text or "", config)
    return match.group(0) if match else FEE_NOT_SPECIFIED


def branch_name(code: str, config: ExtractorConfig) -> str:
    code = (code or "").upper()
    if code in config.branch_names:
        return config.branch_names[code]
    return f"{code} Engineering".strip()


def canonical_course(text: str, branch_code: str, config: ExtractorConfig) -> str:
    cleaned = clean_free_text(text, config)
    if len(cleaned) < config.min_course_length:
        return branch_name(branch_code, config)
    return cleaned


def canonical_institute(text: str, institute_code: str, config: ExtractorConfig) -> str:
    cleaned = clean_free_text(text, config)
    return cleaned or f"College {institute_code}"


def extract_location(text: str, config: ExtractorConfig) -> str:
    upper = (text or "").upper()
    for city in config.city_names:
        if city.upper() in upper:
            return city
    return config.state_name


def leading_course_code(text: str, config: ExtractorConfig) -> str:
    """Return the two-letter branch code printed in front of a course name."""
    match = re.match(r"^([A-Z]{2})\s+\S", text or "")
    if match and match.group(1) in config.course_codes:
        return match.group(1)
    return ""


# --- Course-name normalization --------------------------------------------
#
# The same branch is spelled differently from year to year
# ("Computer Science And Engineering", "COMPUTER SCIENCE AND ENGINEERING",
# "CS Computer Science And Engineering"). These patterns fold the variants
# onto one display name.

CSE = "Computer Science and Engineering"
ECE = "Electronics and Communication Engineering"
EEE = "Electrical and Electronics Engineering"
MECHANICAL = "Mechanical Engineering"
CIVIL = "Civil Engineering"
CSE_AIML = "Computer Science (AI & ML)"
CSE_DS = "Computer Science (Data Science)"
CSE_CYBER = "Computer Science (Cyber Security)"
CSE_IOT = "Computer Science (IoT)"
CSE_BLOCKCHAIN = "Computer Science (Blockchain)"
ISE = "Information Science and Engineering"
IT = "Information Technology"
BIOTECH = "Biotechnology"
BIOMEDICAL = "Biomedical Engineering"
AERONAUTICAL = "Aeronautical Engineering"
AEROSPACE = "Aerospace Engineering"
AUTOMOBILE = "Automobile Engineering"
MECHATRONICS = "Mechatronics"
ROBOTICS = "Robotics and Automation"
ARCHITECTURE = "Architecture"
PLANNING = "Planning"

COURSE_PATTERNS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"^(CS\s+)?COMPUTER\s+SCIENCE\s+(AND|&)?\s*ENGINEERING$", re.I), CSE),
    (re.compile(r"^(CS\s+)?COMPUTER\s+SCIENCE\s+AND\s+ENGG?$", re.I), CSE),
    (re.compile(r"COMPUTER\s+SCIENCE.*(AI|ARTIFICIAL\s+INTELLIGENCE).*(ML|MACHINE\s+LEARNING)", re.I), CSE_AIML),
    (re.compile(r"ARTIFICIAL\s+INTELLIGENCE\s+(AND|&)\s+MACHINE\s+LEARNING", re.I), CSE_AIML),
    (re.compile(r"^(AI|AD)\s+.*ARTIFICIAL\s+INTELLIGENCE", re.I), CSE_AIML),
    (re.compile(r"COMPUTER\s+SCIENCE.*DATA\s+SCIENCE", re.I), CSE_DS),
    (re.compile(r"^(DS|DC)\s+.*DATA\s+SCIENCE", re.I), CSE_DS),
    (re.compile(r"^DATA\s+SCIENCE", re.I), CSE_DS),
    (re.compile(r"COMPUTER\s+SCIENCE.*CYBER\s+SECURITY", re.I), CSE_CYBER),
    (re.compile(r"^CY\s+.*CYBER", re.I), CSE_CYBER),
    (re.compile(r"^CYBER\s+SECURITY$", re.I), CSE_CYBER),
    (re.compile(r"COMPUTER\s+SCIENCE.*(IOT|INTERNET\s+OF\s+THINGS)", re.I), CSE_IOT),
    (re.compile(r"^(IO|IC)\s+.*IOT|INTERNET", re.I), CSE_IOT),
    (re.compile(r"COMPUTER\s+SCIENCE.*BLOCK\s*CHAIN", re.I), CSE_BLOCKCHAIN),
    (re.compile(r"^(EC\s+)?ELECTRONICS\s+(AND|&)?\s*COMMUNICATION\s+(ENGINEERING|ENGG?)?$", re.I), ECE),
    (re.compile(r"^(EC\s+)?ELECTRONICS\s+(AND|&)\s+COMM", re.I), ECE),
    (re.compile(r"^(EE\s+)?ELECTRICAL\s+(AND|&)?\s*ELECTRONICS\s+(ENGINEERING|ENGG?)?$", re.I), EEE),
    (re.compile(r"^(ME\s+)?MECHANICAL\s+(ENGINEERING|ENGG?)?$", re.I), MECHANICAL),
    (re.compile(r"^(CE\s+)?CIVIL\s+(ENGINEERING|ENGG?)?$", re.I), CIVIL),
    (re.compile(r"^(IS|IE)\s+.*INFORMATION\s+SCIENCE", re.I), ISE),
    (re.compile(r"^INFORMATION\s+SCIENCE\s+(AND|&)?\s*ENGINEERING$", re.I), ISE),
    (re.compile(r"^(IT|IG)\s+.*INFORMATION\s+TECHNOLOGY", re.I), IT),
    (re.compile(r"^INFORMATION\s+TECHNOLOGY$", re.I), IT),
    (re.compile(r"^(BT\s+)?BIO[\s-]?TECHNOLOGY$", re.I), BIOTECH),
    (re.compile(r"^(BM\s+)?BIO[\s-]?MEDICAL\s+(ENGINEERING|ENGG?)?$", re.I), BIOMEDICAL),
    (re.compile(r"^(AE\s+)?AERONAUTICAL\s+(ENGINEERING|ENGG?)?$", re.I), AERONAUTICAL),
    (re.compile(r"^(SE\s+)?AEROSPACE\s+(ENGINEERING|ENGG?)?$", re.I), AEROSPACE),
    (re.compile(r"^(AU|AT)\s+.*AUTOMOBILE|AUTOMOTIVE", re.I), AUTOMOBILE),
    (re.compile(r"^AUTOMOBILE\s+(ENGINEERING|ENGG?)?$", re.I), AUTOMOBILE),
    (re.compile(r"^(MT\s+)?MECHATRONICS$", re.I), MECHATRONICS),
    (re.compile(r"ROBOTICS\s+(AND|&)\s+(AUTOMATION|AI)", re.I), ROBOTICS),
    (re.compile(r"^(RA|RO|RI)\s+.*ROBOTICS", re.I), ROBOTICS),
    (re.compile(r"^(AR\s+)?ARCHITECTURE$", re.I), ARCHITECTURE),
    (re.compile(r"^(UP|UR|LA)\s+.*PLANNING|B\.?\s*PLAN$", re.I), PLANNING),
]

_SMALL_WORDS = {"and", "of", "in", "the", "&"}


def _match_course(text: str) -> str | None:
    for pattern, canonical in COURSE_PATTERNS:
        if pattern.search(text):
            return canonical
    return None


def normalize_course(raw: str) -> str:
    """Map a raw course name to its canonical display name."""
    if not raw:
        return raw
    cleaned = collapse_whitespace(raw)
    if not cleaned:
        return raw

    canonical = _match_course(cleaned)
    if canonical:
        return canonical

    code_match = re.match(r"^([A-Z]{2})\s+(.+)$", cleaned)
    if code_match:
        canonical = _match_course(code_match.group(2).strip())
        if canonical:
            return canonical

    words = []
    for word in cleaned.split(" "):
        lower = word.lower()
        words.append(lower if lower in _SMALL_WORDS else word[:1].upper() + word[1:].lower())
    return " ".join(words)


def course_key(raw: str) -> str:
    """Comparison key: two spellings of one branch share a key."""
    return re.sub(r"[^a-z0-9]", "", normalize_course(raw).lower())
