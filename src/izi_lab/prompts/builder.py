"""Assemble the extraction system instruction from an active rule set."""

from __future__ import annotations

from izi_lab.domains.lab.rules import PromptRule, RuleSection
from izi_lab.prompts.registry import get_prompt

_SECTION_ORDER: tuple[RuleSection, ...] = (
    RuleSection.GLOBAL,
    RuleSection.CLASSIFICATION,
    RuleSection.LAB,
    RuleSection.NON_LAB,
    RuleSection.OUTPUT,
)


def render_rule(rule: PromptRule, params: dict[str, str]) -> str:
    """Render one rule's fragment with its parameters."""
    template = get_prompt("lab", "extraction", rule.effect)
    return template.format(**params) if params else template


def build_system_prompt(rules: list[tuple[PromptRule, dict[str, str]]]) -> str:
    """Render *rules* into a single instruction blob.

    Sections keep their fixed order whatever the input order; LAB rules are
    numbered under the LAB header.
    """
    by_section: dict[RuleSection, list[str]] = {section: [] for section in _SECTION_ORDER}
    for rule, params in rules:
        by_section[rule.section].append(render_rule(rule, params))

    blocks: list[str] = []
    for section in _SECTION_ORDER:
        fragments = by_section[section]
        if not fragments:
            continue
        if section == RuleSection.LAB:
            numbered = [f"{i}. {text}" for i, text in enumerate(fragments, start=1)]
            header = get_prompt("lab", "extraction", "LAB_SECTION_HEADER")
            blocks.append("\n".join([header, "", *numbered]))
        else:
            blocks.extend(fragments)

    return "\n\n".join(blocks)
