"""Deterministic anti-duplication check applied after classification."""

from __future__ import annotations

import dataclasses
import logging
from typing import Sequence

from izi_lab.domains.lab.models import ExamRecord, HistoryPolicy, LabResultItem
from izi_lab.normalization.classifier import DEFAULT_INITIALS, lab_raw_summary
from izi_lab.normalization.values import has_history, join_history, latest_value, split_history

log = logging.getLogger(__name__)


def _patient_key(record: ExamRecord, index: int) -> str:
    """Batch-local patient identity.

    Records without real initials never match one another: two "N/A"
    records may be different people.
    """
    initials = record.patient_initials.strip().upper()
    if not initials or initials == DEFAULT_INITIALS:
        return f"#{index}"
    return initials


def _with_results(record: ExamRecord, results: Sequence[LabResultItem], **changes: str) -> ExamRecord:
    results = tuple(results)
    return dataclasses.replace(
        record, results=results, raw_summary=lab_raw_summary(results), **changes,
    )


def _enforce_separate(records: Sequence[ExamRecord]) -> list[ExamRecord]:
    seen: set[tuple[str, str, str]] = set()
    out: list[ExamRecord] = []
    duplicates = 0
    collapsed = 0

    for index, record in enumerate(records):
        if not record.is_lab:
            out.append(record)
            continue

        kept: list[LabResultItem] = []
        changed = False
        for item in record.results:
            key = (_patient_key(record, index), item.abbreviation, record.collection_date)
            if key in seen:
                duplicates += 1
                changed = True
                continue
            seen.add(key)
            if has_history(item.value):
                collapsed += 1
                changed = True
                item = dataclasses.replace(item, value=latest_value(item.value))
            kept.append(item)

        if record.results and not kept:
            # Every analyte repeated an earlier observation.
            continue
        out.append(_with_results(record, kept) if changed else record)

    if duplicates:
        log.warning("Dropped %d duplicate observation(s) from batch", duplicates)
    if collapsed:
        log.warning("Collapsed %d arrow-joined value(s) to their latest segment", collapsed)
    return out


def _fold(target: ExamRecord, others: Sequence[ExamRecord]) -> ExamRecord:
    order: list[str] = []
    values: dict[str, list[str]] = {}
    latest: dict[str, LabResultItem] = {}
    reference: dict[str, str | None] = {}

    for record in (target, *others):
        seen_here: set[str] = set()
        for item in record.results:
            abbr = item.abbreviation
            if abbr in seen_here:
                continue
            seen_here.add(abbr)
            if abbr not in values:
                order.append(abbr)
                values[abbr] = []
                reference[abbr] = None
            values[abbr].extend(split_history(item.value) or [item.value])
            latest[abbr] = item
            if reference[abbr] is None:
                reference[abbr] = item.reference_range

    results = [
        LabResultItem(
            abbreviation=abbr,
            value=join_history(values[abbr]),
            abnormality=latest[abbr].abnormality,
            reference_range=reference[abbr],
        )
        for abbr in order
    ]

    dates: list[str] = []
    for record in (target, *others):
        for date in (d.strip() for d in record.collection_date.split(",")):
            if date and date not in dates:
                dates.append(date)
    age = next((r.patient_age for r in (target, *others) if r.patient_age), "")

    return _with_results(target, results, collection_date=", ".join(dates), patient_age=age)


def _enforce_grouped(records: Sequence[ExamRecord]) -> list[ExamRecord]:
    groups: dict[str, list[int]] = {}
    for index, record in enumerate(records):
        if record.is_lab:
            groups.setdefault(_patient_key(record, index), []).append(index)

    folded_into: dict[int, ExamRecord] = {}
    absorbed: set[int] = set()
    for indexes in groups.values():
        head, *rest = indexes
        folded_into[head] = _fold(records[head], [records[i] for i in rest])
        absorbed.update(rest)

    if absorbed:
        log.info("Grouped %d LAB record(s) into per-patient timelines", len(absorbed))
    return [folded_into.get(i, r) for i, r in enumerate(records) if i not in absorbed]


def enforce_history_policy(records: Sequence[ExamRecord], policy: HistoryPolicy) -> list[ExamRecord]:
    """Apply the batch's history policy to classified records.

    SEPARATE keeps the first observation of each (patient, analyte, date)
    and reduces arrow-joined values to their latest segment.  GROUPED folds
    each patient's LAB records into one, joining repeated analytes with
    ``" -> "`` in batch order.
    """
    if policy == HistoryPolicy.GROUPED:
        return _enforce_grouped(records)
    return _enforce_separate(records)
