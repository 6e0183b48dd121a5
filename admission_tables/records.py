"""Output record types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class PreferenceEntry:
    priority: int
    institute_code: str
    branch_code: str
    institute_name: str
    branch_name: str
    fee: Optional[str] = None
    location: str = ""

    @property
    def course_code(self) -> str:
        return f"{self.institute_code}{self.branch_code}"

    @property
    def id(self) -> str:
        return f"opt-{self.priority}-{self.course_code}"

    def to_json_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "priority": self.priority,
            "institute_code": self.institute_code,
            "branch_code": self.branch_code,
            "course_code": self.course_code,
            "institute_name": self.institute_name,
            "branch_name": self.branch_name,
            "fee": self.fee,
            "location": self.location,
        }

    def to_csv_row(self) -> Dict[str, str]:
        return {
            "PRIORITY": str(self.priority),
            "COURSE CODE": self.course_code,
            "INSTITUTE CODE": self.institute_code,
            "BRANCH CODE": self.branch_code,
            "INSTITUTE NAME": self.institute_name,
            "BRANCH NAME": self.branch_name,
            "FEE": self.fee or "",
            "LOCATION": self.location,
        }


@dataclass
class CutoffEntry:
    institute: str
    institute_code: str
    course: str
    category: str
    cutoff_rank: int
    year: str
    round: str
    source: str = ""

    def to_json_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "institute": self.institute,
            "institute_code": self.institute_code,
            "course": self.course,
            "category": self.category,
            "cutoff_rank": self.cutoff_rank,
            "year": self.year,
            "round": self.round,
        }
        if self.source:
            payload["source"] = self.source
        return payload

    def to_csv_row(self) -> Dict[str, str]:
        return {
            "INSTITUTE": self.institute,
            "INSTITUTE CODE": self.institute_code,
            "COURSE": self.course,
            "CATEGORY": self.category,
            "CUTOFF RANK": str(self.cutoff_rank),
            "YEAR": self.year,
            "ROUND": self.round,
            "SOURCE": self.source,
        }


PREFERENCE_COLUMNS = list(
    PreferenceEntry(0, "", "", "", "").to_csv_row().keys()
)
CUTOFF_COLUMNS = list(CutoffEntry("", "", "", "", 0, "", "").to_csv_row().keys())
