"""Summary formatter: copy-paste text for clinical notes.

Rendering never mutates the record, and the same record always renders to
the same text.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from izi_lab.domains.lab.categories import CATEGORY_ORDER, PhysiologicalCategory, get_category
from izi_lab.domains.lab.models import Abnormality, ExamRecord, LabResultItem
from izi_lab.normalization.values import to_decimal_comma

DEFAULT_REPORT_TITLE = "Laudo Médico"
ABNORMAL_HEADER = "ALTERAÇÕES"
FINDINGS_HEADER = "ACHADOS:"
CONCLUSION_HEADER = "CONCLUSÃO:"
BULLET = "• "

_ARROWS = {Abnormality.HIGH: "↑", Abnormality.LOW: "↓"}


def today_label(today: Optional[date] = None) -> str:
    """``dd/mm`` of *today* (defaults to the current date)."""
    today = today or date.today()
    return f"{today.day:02d}/{today.month:02d}"


class SummaryFormatter:
    """Renders full and abnormal-only summaries of an ``ExamRecord``."""

    def group_by_category(self, record: ExamRecord) -> list[tuple[PhysiologicalCategory, list[LabResultItem]]]:
        groups: dict[PhysiologicalCategory, list[LabResultItem]] = {}
        for item in record.results:
            groups.setdefault(get_category(item.abbreviation), []).append(item)
        return [(category, groups[category]) for category in CATEGORY_ORDER if groups.get(category)]

    def _lab_line(self, category: PhysiologicalCategory, items: list[LabResultItem]) -> str:
        rendered = []
        for item in items:
            ref = f" (Ref: {item.reference_range})" if item.reference_range else ""
            rendered.append(f"{item.abbreviation} {to_decimal_comma(item.value)}{ref}")
        prefix = "" if category == PhysiologicalCategory.OTHER else f"{category.value}: "
        return prefix + " / ".join(rendered)

    def full_summary(self, record: ExamRecord) -> str:
        """One line per physiological category for LAB; findings and conclusion for NON_LAB."""
        if record.is_lab:
            return "\n".join(self._lab_line(cat, items) for cat, items in self.group_by_category(record))

        report = record.non_lab_data
        if report is None:
            return ""
        findings = "\n".join(f"{BULLET}{f}" for f in report.main_findings)
        return f"{FINDINGS_HEADER}\n{findings}\n\n{CONCLUSION_HEADER}\n{report.impression}"

    def abnormal_summary(self, record: ExamRecord) -> str:
        """HIGH/LOW items with arrows; always empty for NON_LAB records."""
        if not record.is_lab:
            return ""
        return " / ".join(
            f"{item.abbreviation} {to_decimal_comma(item.value)} {_ARROWS[item.abnormality]}"
            for item in record.results
            if item.is_abnormal
        )

    def has_abnormal(self, record: ExamRecord) -> bool:
        return record.is_lab and any(item.is_abnormal for item in record.results)

    def _date(self, record: ExamRecord, today: Optional[date]) -> str:
        return record.collection_date or today_label(today)

    def clipboard_text(self, record: ExamRecord, today: Optional[date] = None) -> str:
        """Full summary prefixed with the patient/date header."""
        date_label = self._date(record, today)
        if record.is_lab:
            return f"{record.patient_initials} - Lab ({date_label}):\n{self.full_summary(record)}"
        title = (record.non_lab_data.exam_title if record.non_lab_data else "") or DEFAULT_REPORT_TITLE
        return f"{record.patient_initials} - {title} ({date_label}):\n\n{self.full_summary(record)}"

    def abnormal_clipboard_text(self, record: ExamRecord, today: Optional[date] = None) -> str:
        """Abnormal-only summary with header; empty when nothing is abnormal."""
        if not self.has_abnormal(record):
            return ""
        date_label = self._date(record, today)
        return (
            f"{record.patient_initials} - Lab ({date_label}) - {ABNORMAL_HEADER}: "
            f"{self.abnormal_summary(record)}"
        )

    def export_rows(self, record: ExamRecord) -> list[dict[str, str]]:
        """Spreadsheet rows for a LAB record; NON_LAB records have none."""
        if not record.is_lab:
            return []
        return [
            {
                "Exame": item.abbreviation,
                "Resultado": item.value,
                "Referência": item.reference_range or "-",
                "Status": item.abnormality.value,
            }
            for item in record.results
        ]
