"""Lab domain models: enums and dataclasses for the per-patient result set.

This is the canonical location for exam records.  The raw LLM response
schema lives in ``izi_lab.extraction.schema`` and is converted into these
types by ``izi_lab.normalization.classifier``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

NO_DATA_SUMMARY = "Sem dados"


class ExamCategory(str, Enum):
    """LAB for quantitative exams, NON_LAB for narrative reports."""

    LAB = "LAB"
    NON_LAB = "NON_LAB"


class Abnormality(str, Enum):
    """Tri-state classification of a lab value against its reference."""

    HIGH = "HIGH"
    LOW = "LOW"
    NORMAL = "NORMAL"


class HistoryPolicy(str, Enum):
    """How repeated analytes across dates are represented."""

    SEPARATE = "separate"
    GROUPED = "grouped"


@dataclass(frozen=True)
class AnalysisPreferences:
    """Per-call preferences supplied by the preferences collaborator."""

    show_reference_values: bool = False
    group_dates: bool = False


@dataclass(frozen=True)
class CustomAbbreviation:
    """User-declared override mapping an exam name to a preferred short code."""

    id: str
    exam_name: str
    abbreviation: str


@dataclass(frozen=True)
class LabResultItem:
    """A single analyte observation."""

    abbreviation: str
    value: str
    abnormality: Abnormality = Abnormality.NORMAL
    reference_range: Optional[str] = None

    @property
    def is_abnormal(self) -> bool:
        return self.abnormality in (Abnormality.HIGH, Abnormality.LOW)


@dataclass(frozen=True)
class NonLabReport:
    """Narrative report: title, bullet findings and conclusion."""

    exam_title: str = ""
    main_findings: tuple[str, ...] = ()
    impression: str = ""


@dataclass(frozen=True)
class ExamRecord:
    """Unit of the per-patient result set.

    ``id`` is empty until the record is appended to a session.
    """

    patient_initials: str
    category: ExamCategory
    patient_age: str = ""
    collection_date: str = ""
    results: tuple[LabResultItem, ...] = ()
    non_lab_data: Optional[NonLabReport] = None
    raw_summary: str = ""
    id: str = ""

    @property
    def is_lab(self) -> bool:
        return self.category == ExamCategory.LAB

    @property
    def has_content(self) -> bool:
        """False when extraction produced neither results nor a report."""
        return bool(self.results) or self.non_lab_data is not None

    def to_dict(self) -> dict[str, Any]:
        """Export shape consumed by spreadsheet/PDF collaborators."""
        data: dict[str, Any] = {
            "id": self.id,
            "patientInitials": self.patient_initials,
            "patientAge": self.patient_age,
            "collectionDate": self.collection_date,
            "category": self.category.value,
            "results": [
                {
                    "abbreviation": r.abbreviation,
                    "value": r.value,
                    "referenceRange": r.reference_range,
                    "abnormality": r.abnormality.value,
                }
                for r in self.results
            ],
            "nonLabData": None,
            "rawSummary": self.raw_summary,
        }
        if self.non_lab_data is not None:
            data["nonLabData"] = {
                "examTitle": self.non_lab_data.exam_title,
                "mainFindings": list(self.non_lab_data.main_findings),
                "impression": self.non_lab_data.impression,
            }
        return data
