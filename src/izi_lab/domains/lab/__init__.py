"""Lab exam domain module.

This is the canonical home for all lab-specific logic:
- Enums: ``ExamCategory``, ``Abnormality``, ``HistoryPolicy``, ``PhysiologicalCategory``
- Records: ``ExamRecord``, ``LabResultItem``, ``NonLabReport``
- Caller inputs: ``AnalysisPreferences``, ``CustomAbbreviation``
- Tables: ``SYSTEM_CATEGORIES`` and the panel lists in ``panels``
- Rules: ``RULE_CATALOG`` / ``build_rule_set``
"""

from __future__ import annotations

from izi_lab.domains.lab.categories import (
    CATEGORY_ORDER,
    SYSTEM_CATEGORIES,
    PhysiologicalCategory,
    get_category,
)
from izi_lab.domains.lab.models import (
    NO_DATA_SUMMARY,
    Abnormality,
    AnalysisPreferences,
    CustomAbbreviation,
    ExamCategory,
    ExamRecord,
    HistoryPolicy,
    LabResultItem,
    NonLabReport,
)
from izi_lab.domains.lab.rules import (
    RULE_CATALOG,
    PromptRule,
    RuleContext,
    RuleSection,
    build_rule_set,
    resolve_history_policy,
)

__all__ = [
    # Enums
    "Abnormality",
    "ExamCategory",
    "HistoryPolicy",
    "PhysiologicalCategory",
    # Records
    "AnalysisPreferences",
    "CustomAbbreviation",
    "ExamRecord",
    "LabResultItem",
    "NonLabReport",
    "NO_DATA_SUMMARY",
    # Tables
    "CATEGORY_ORDER",
    "SYSTEM_CATEGORIES",
    "get_category",
    # Rules
    "PromptRule",
    "RULE_CATALOG",
    "RuleContext",
    "RuleSection",
    "build_rule_set",
    "resolve_history_policy",
]
