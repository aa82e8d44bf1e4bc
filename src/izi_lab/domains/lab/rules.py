"""Declarative extraction rule set.

Each ``PromptRule`` pairs a condition over the call context with an effect:
the name of a prompt fragment plus the parameters it is rendered with.
``build_rule_set`` returns the active rules in catalog order; the text itself
is assembled by ``izi_lab.prompts.builder.build_system_prompt``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from izi_lab.domains.lab import panels
from izi_lab.domains.lab.categories import COMMON_ABBREVIATIONS
from izi_lab.domains.lab.models import (
    AnalysisPreferences,
    CustomAbbreviation,
    HistoryPolicy,
)


class RuleSection(str, Enum):
    """Where a rule's text is placed in the instruction blob."""

    GLOBAL = "global"
    CLASSIFICATION = "classification"
    LAB = "lab"
    NON_LAB = "non_lab"
    OUTPUT = "output"


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule condition may look at."""

    preferences: AnalysisPreferences
    custom_abbreviations: tuple[CustomAbbreviation, ...] = ()
    history_policy: HistoryPolicy = HistoryPolicy.SEPARATE


def _always(ctx: RuleContext) -> bool:
    return True


def _no_params(ctx: RuleContext) -> dict[str, str]:
    return {}


@dataclass(frozen=True)
class PromptRule:
    """A ``{condition, effect}`` pair.

    ``effect`` names a fragment in ``prompts/templates/lab/extraction.py``;
    ``params`` produces the values it is formatted with.
    """

    rule_id: str
    section: RuleSection
    effect: str
    condition: Callable[[RuleContext], bool] = field(default=_always, compare=False)
    params: Callable[[RuleContext], dict[str, str]] = field(default=_no_params, compare=False)

    def applies(self, ctx: RuleContext) -> bool:
        return self.condition(ctx)


# ── Parameter renderers ─────────────────────────────────────────────


def _quoted(items: tuple[str, ...] | list[str]) -> str:
    return ", ".join(f'"{item}"' for item in items)


def _hemogram_params(ctx: RuleContext) -> dict[str, str]:
    return {
        "include": ", ".join(panels.HEMOGRAM_INCLUDE),
        "exclude": ", ".join(panels.HEMOGRAM_EXCLUDE),
    }


def _renal_params(ctx: RuleContext) -> dict[str, str]:
    mandatory = "\n".join(
        f'   - *MANDATORY*: "{name}" -> "{abbr}".' for name, abbr in panels.RENAL_SYNONYMS.items()
    )
    english = [(n, a) for n, a in panels.ELECTROLYTE_SYNONYMS.items() if n.isascii()]
    electrolytes = ", ".join(f'"{name}" -> "{abbr}"' for name, abbr in english)
    return {"mandatory": mandatory, "electrolytes": electrolytes}


def _urine_params(ctx: RuleContext) -> dict[str, str]:
    return {
        "ratio": panels.URINE_RATIO,
        "suffix": panels.URINE_SUFFIX,
        "suffix_examples": _quoted(panels.URINE_SUFFIX_EXAMPLES),
        "exclude": ", ".join(panels.URINE_EXCLUDE),
    }


def _immunosuppressant_params(ctx: RuleContext) -> dict[str, str]:
    return {
        "mapping": ", ".join(f"{name} ({abbr})" for name, abbr in panels.IMMUNOSUPPRESSANTS.items()),
    }


def _common_abbreviation_params(ctx: RuleContext) -> dict[str, str]:
    return {
        "examples": "\n".join(f'   - "{name}" -> "{abbr}"' for name, abbr in COMMON_ABBREVIATIONS.items()),
    }


def _custom_params(ctx: RuleContext) -> dict[str, str]:
    lines = [
        f'   - "{ca.exam_name}" MUST be abbreviated as "{ca.abbreviation}"'
        for ca in ctx.custom_abbreviations
    ]
    return {"custom_rules": "\n".join(lines)}


# ── Rule catalog ────────────────────────────────────────────────────

RULE_CATALOG: tuple[PromptRule, ...] = (
    PromptRule("ROLE", RuleSection.GLOBAL, "ROLE_PROMPT"),
    PromptRule("ANTI_DUPLICATION", RuleSection.GLOBAL, "ANTI_DUPLICATION_RULE"),
    PromptRule(
        "NO_EVOLUTION",
        RuleSection.GLOBAL,
        "NO_EVOLUTION_RULE",
        condition=lambda ctx: ctx.history_policy == HistoryPolicy.SEPARATE,
    ),
    PromptRule(
        "GROUPED_EVOLUTION",
        RuleSection.GLOBAL,
        "GROUPED_EVOLUTION_RULE",
        condition=lambda ctx: ctx.history_policy == HistoryPolicy.GROUPED,
    ),
    PromptRule("CLASSIFICATION", RuleSection.CLASSIFICATION, "CLASSIFICATION_RULE"),
    PromptRule("ANONYMIZATION", RuleSection.LAB, "ANONYMIZATION_RULE"),
    PromptRule("NUMERIC_FORMAT", RuleSection.LAB, "NUMERIC_FORMAT_RULE"),
    PromptRule("ABNORMALITY", RuleSection.LAB, "ABNORMALITY_RULE"),
    PromptRule(
        "COMMON_ABBREVIATIONS", RuleSection.LAB, "COMMON_ABBREVIATIONS_RULE",
        params=_common_abbreviation_params,
    ),
    PromptRule("HEMOGRAM", RuleSection.LAB, "HEMOGRAM_RULE", params=_hemogram_params),
    PromptRule("RENAL_ELECTROLYTES", RuleSection.LAB, "RENAL_ELECTROLYTES_RULE", params=_renal_params),
    PromptRule("URINE", RuleSection.LAB, "URINE_RULE", params=_urine_params),
    PromptRule(
        "IMMUNOSUPPRESSANTS", RuleSection.LAB, "IMMUNOSUPPRESSANTS_RULE",
        params=_immunosuppressant_params,
    ),
    PromptRule("PCR", RuleSection.LAB, "PCR_RULE"),
    PromptRule(
        "REFERENCE_INCLUDE",
        RuleSection.LAB,
        "REFERENCE_INCLUDE_RULE",
        condition=lambda ctx: ctx.preferences.show_reference_values,
    ),
    PromptRule(
        "REFERENCE_EXCLUDE",
        RuleSection.LAB,
        "REFERENCE_EXCLUDE_RULE",
        condition=lambda ctx: not ctx.preferences.show_reference_values,
    ),
    PromptRule(
        "CUSTOM_ABBREVIATIONS",
        RuleSection.LAB,
        "CUSTOM_ABBREVIATIONS_RULE",
        condition=lambda ctx: bool(ctx.custom_abbreviations),
        params=_custom_params,
    ),
    PromptRule("NON_LAB_SUMMARY", RuleSection.NON_LAB, "NON_LAB_RULE"),
    PromptRule("OUTPUT", RuleSection.OUTPUT, "OUTPUT_RULE"),
)


def resolve_history_policy(setting: str, preferences: AnalysisPreferences) -> HistoryPolicy:
    """Turn the configured policy into a concrete one.

    ``"preference"`` defers to the caller's ``group_dates`` flag.
    """
    if setting == "preference":
        return HistoryPolicy.GROUPED if preferences.group_dates else HistoryPolicy.SEPARATE
    return HistoryPolicy(setting)


def build_rule_set(
    preferences: AnalysisPreferences,
    custom_abbreviations: list[CustomAbbreviation] | tuple[CustomAbbreviation, ...] = (),
    history_policy: HistoryPolicy = HistoryPolicy.SEPARATE,
    *,
    catalog: tuple[PromptRule, ...] = RULE_CATALOG,
) -> list[tuple[PromptRule, dict[str, str]]]:
    """Return the active rules, in catalog order, with their rendered params."""
    ctx = RuleContext(
        preferences=preferences,
        custom_abbreviations=tuple(custom_abbreviations),
        history_policy=history_policy,
    )
    return [(rule, rule.params(ctx)) for rule in catalog if rule.applies(ctx)]
