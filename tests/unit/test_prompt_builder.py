"""Tests for the prompt registry and the system-instruction builder."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from izi_lab.domains.lab.models import AnalysisPreferences, CustomAbbreviation, HistoryPolicy
from izi_lab.domains.lab.rules import PromptRule, RuleSection, build_rule_set
from izi_lab.prompts import available_prompts, build_system_prompt, configure, configure_from_path, get_prompt
from izi_lab.prompts.backends.memory_backend import MemoryPromptBackend


class TestRegistry:
    def test_templates_are_default(self) -> None:
        assert "CRP" in get_prompt("lab", "extraction", "PCR_RULE")

    def test_unknown_prompt_raises_key_error(self) -> None:
        with pytest.raises(KeyError):
            get_prompt("lab", "extraction", "NOT_A_PROMPT")

    def test_unknown_group_raises_key_error(self) -> None:
        with pytest.raises(KeyError):
            get_prompt("lab", "nope", "ROLE_PROMPT")

    def test_override_falls_back_to_templates(self) -> None:
        configure(overrides=MemoryPromptBackend({("lab", "extraction", "PCR_RULE"): "PCR override"}))
        assert get_prompt("lab", "extraction", "PCR_RULE") == "PCR override"
        assert get_prompt("lab", "extraction", "ROLE_PROMPT").startswith("You are an expert")

    def test_override_without_templates(self) -> None:
        configure(overrides=MemoryPromptBackend({}), fallback_to_templates=False)
        with pytest.raises(KeyError):
            get_prompt("lab", "extraction", "ROLE_PROMPT")

    def test_overrides_loaded_from_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "prompts.json"
        path.write_text(json.dumps({"lab/extraction/ROLE_PROMPT": "Custom role"}), encoding="utf-8")
        configure_from_path(path)
        assert get_prompt("lab", "extraction", "ROLE_PROMPT") == "Custom role"
        assert "CRP" in get_prompt("lab", "extraction", "PCR_RULE")

    def test_malformed_override_key_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "prompts.json"
        path.write_text(json.dumps({"ROLE_PROMPT": "x"}), encoding="utf-8")
        with pytest.raises(ValueError):
            configure_from_path(path)

    def test_available_prompts_merges_sources(self) -> None:
        configure(overrides=MemoryPromptBackend({("lab", "extraction", "EXTRA_RULE"): "x"}))
        names = available_prompts("lab", "extraction")
        assert "EXTRA_RULE" in names
        assert "ROLE_PROMPT" in names
        assert names == sorted(names)

    def test_available_prompts_unknown_group_is_empty(self) -> None:
        assert available_prompts("lab", "nope") == []

    def test_module_attribute_delegates_to_registry(self) -> None:
        from izi_lab.prompts.templates.lab import extraction

        assert extraction.OUTPUT_RULE == get_prompt("lab", "extraction", "OUTPUT_RULE")


class TestBuildSystemPrompt:
    def test_sections_in_fixed_order(self) -> None:
        prompt = build_system_prompt(build_rule_set(AnalysisPreferences()))
        role = prompt.index("You are an expert medical assistant")
        classification = prompt.index("STEP 1: CLASSIFICATION")
        lab = prompt.index("STEP 2: EXTRACTION RULES (LAB)")
        non_lab = prompt.index('IF "NON_LAB"')
        output = prompt.index("*OUTPUT*")
        assert role < classification < lab < non_lab < output

    def test_lab_rules_are_numbered(self) -> None:
        prompt = build_system_prompt(build_rule_set(AnalysisPreferences()))
        assert "1. *ANONYMIZATION*" in prompt
        assert "2. *DATA*" in prompt

    def test_reference_preference_changes_text(self) -> None:
        with_refs = build_system_prompt(build_rule_set(AnalysisPreferences(show_reference_values=True)))
        without_refs = build_system_prompt(build_rule_set(AnalysisPreferences()))
        assert "Include reference ranges" in with_refs
        assert "Leave 'referenceRange' empty" in without_refs
        assert "Include reference ranges" not in without_refs

    def test_custom_abbreviations_rendered(self) -> None:
        custom = [CustomAbbreviation(id="1", exam_name="Hemoglobina Glicada", abbreviation="A1c")]
        prompt = build_system_prompt(build_rule_set(AnalysisPreferences(), custom))
        assert "CUSTOM USER ABBREVIATIONS" in prompt
        assert '"Hemoglobina Glicada" MUST be abbreviated as "A1c"' in prompt

    def test_no_custom_section_when_empty(self) -> None:
        prompt = build_system_prompt(build_rule_set(AnalysisPreferences()))
        assert "CUSTOM USER ABBREVIATIONS" not in prompt

    def test_history_policy_text(self) -> None:
        separate = build_system_prompt(build_rule_set(AnalysisPreferences()))
        grouped = build_system_prompt(
            build_rule_set(AnalysisPreferences(), history_policy=HistoryPolicy.GROUPED)
        )
        assert "NO-EVOLUTION" in separate
        assert "HISTORICAL EVOLUTION" in grouped
        assert "NO-EVOLUTION" not in grouped

    def test_input_order_does_not_change_sections(self) -> None:
        rules = [
            (PromptRule("OUTPUT", RuleSection.OUTPUT, "OUTPUT_RULE"), {}),
            (PromptRule("ROLE", RuleSection.GLOBAL, "ROLE_PROMPT"), {}),
        ]
        prompt = build_system_prompt(rules)
        assert prompt.index("You are an expert") < prompt.index("*OUTPUT*")

    def test_empty_rules_render_empty(self) -> None:
        assert build_system_prompt([]) == ""
