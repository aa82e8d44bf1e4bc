"""Classifier & normalizer: raw extraction objects to ``ExamRecord``.

Pure and deterministic.  Every fallback here is a documented default, so
nothing in this module raises for missing or odd fields.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from izi_lab.domains.lab import panels
from izi_lab.domains.lab.categories import COMMON_ABBREVIATIONS
from izi_lab.domains.lab.models import (
    NO_DATA_SUMMARY,
    Abnormality,
    AnalysisPreferences,
    CustomAbbreviation,
    ExamCategory,
    ExamRecord,
    LabResultItem,
    NonLabReport,
)
from izi_lab.extraction.schema import RawExtraction, RawLabResult, RawNonLabData
from izi_lab.normalization.values import normalize_value

log = logging.getLogger(__name__)

DEFAULT_INITIALS = "N/A"


def lab_raw_summary(results: Sequence[LabResultItem]) -> str:
    if not results:
        return NO_DATA_SUMMARY
    return " / ".join(f"{r.abbreviation} {r.value}" for r in results)


def non_lab_raw_summary(report: Optional[NonLabReport]) -> str:
    if report is None:
        return NO_DATA_SUMMARY
    return f"{report.exam_title}: {report.impression}"


def _custom_index(custom_abbreviations: Sequence[CustomAbbreviation]) -> dict[str, str]:
    """Map every spelling a custom rule should catch to its abbreviation.

    A rule matches the exam name itself and the default short code the model
    would otherwise produce for that name.
    """
    defaults = {panels.canonical_key(k): v for k, v in COMMON_ABBREVIATIONS.items()}
    defaults.update({panels.canonical_key(k): v for k, v in panels.MANDATORY_SYNONYMS.items()})

    index: dict[str, str] = {}
    for ca in custom_abbreviations:
        name_key = panels.canonical_key(ca.exam_name)
        if not name_key or not ca.abbreviation.strip():
            continue
        index[name_key] = ca.abbreviation.strip()
        default_code = defaults.get(name_key)
        if default_code:
            index.setdefault(panels.canonical_key(default_code), ca.abbreviation.strip())
    return index


def _normalize_items(
    raw_items: Sequence[RawLabResult],
    preferences: AnalysisPreferences,
    custom_index: dict[str, str],
) -> tuple[LabResultItem, ...]:
    items: list[LabResultItem] = []
    dropped = 0
    for raw in raw_items:
        abbreviation = raw.abbreviation.strip()
        if not abbreviation:
            dropped += 1
            continue

        custom = custom_index.get(panels.canonical_key(abbreviation))
        if custom is not None:
            abbreviation = custom
        else:
            if panels.is_excluded(abbreviation):
                dropped += 1
                continue
            abbreviation = panels.resolve_synonym(abbreviation)

        reference: Optional[str] = None
        if preferences.show_reference_values and raw.reference_range:
            reference = raw.reference_range.strip() or None

        items.append(
            LabResultItem(
                abbreviation=abbreviation,
                value=normalize_value(raw.value),
                abnormality=Abnormality(raw.abnormality),
                reference_range=reference,
            )
        )

    if any(item.abbreviation == panels.URINE_RATIO for item in items):
        before = len(items)
        items = [item for item in items if not panels.is_urine_ratio_component(item.abbreviation)]
        dropped += before - len(items)

    if dropped:
        log.debug("Dropped %d lab item(s) during normalization", dropped)
    return tuple(items)


def _normalize_report(raw: Optional[RawNonLabData]) -> Optional[NonLabReport]:
    if raw is None:
        return None
    findings = tuple(f.strip() for f in (raw.main_findings or []) if f and f.strip())
    return NonLabReport(
        exam_title=(raw.exam_title or "").strip(),
        main_findings=findings,
        impression=(raw.impression or "").strip(),
    )


def _resolve_category(raw_category: Optional[str]) -> ExamCategory:
    if raw_category is None:
        return ExamCategory.LAB
    try:
        return ExamCategory(raw_category)
    except ValueError:
        log.warning("Unknown exam category %r; treating as LAB", raw_category)
        return ExamCategory.LAB


def classify(
    raw: RawExtraction,
    *,
    preferences: AnalysisPreferences = AnalysisPreferences(),
    custom_abbreviations: Sequence[CustomAbbreviation] = (),
) -> ExamRecord:
    """Turn one raw extraction object into a normalized record.

    The record's ``id`` is left empty; ids are assigned when a batch is
    appended to a session.
    """
    category = _resolve_category(raw.category)
    initials = (raw.patient_initials or "").strip() or DEFAULT_INITIALS
    age = (raw.patient_age or "").strip()
    date = (raw.collection_date or "").strip()

    if category == ExamCategory.LAB:
        results = _normalize_items(
            raw.lab_results or [], preferences, _custom_index(custom_abbreviations),
        )
        return ExamRecord(
            patient_initials=initials,
            category=category,
            patient_age=age,
            collection_date=date,
            results=results,
            raw_summary=lab_raw_summary(results),
        )

    report = _normalize_report(raw.non_lab_data)
    return ExamRecord(
        patient_initials=initials,
        category=category,
        patient_age=age,
        collection_date=date,
        non_lab_data=report,
        raw_summary=non_lab_raw_summary(report),
    )


def classify_batch(
    raws: Sequence[RawExtraction],
    *,
    preferences: AnalysisPreferences = AnalysisPreferences(),
    custom_abbreviations: Sequence[CustomAbbreviation] = (),
) -> list[ExamRecord]:
    records = [
        classify(raw, preferences=preferences, custom_abbreviations=custom_abbreviations)
        for raw in raws
    ]
    lab = sum(1 for r in records if r.is_lab)
    log.info("Classified %d record(s): %d LAB, %d NON_LAB", len(records), lab, len(records) - lab)
    return records
