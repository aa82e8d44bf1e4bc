"""Shared fixtures for izi-lab tests."""

from __future__ import annotations

from typing import Any, Iterator

import pytest

from izi_lab.core.config import AppSettings, LLMConfig
from izi_lab.domains.lab.models import AnalysisPreferences
from izi_lab.prompts import reset as reset_prompts


@pytest.fixture(autouse=True)
def _fresh_prompt_registry() -> Iterator[None]:
    """Every test starts from the packaged templates."""
    reset_prompts()
    yield
    reset_prompts()


@pytest.fixture
def llm_config() -> LLMConfig:
    """Test LLM config: a dummy key and a single attempt per call."""
    return LLMConfig(api_key="test-key", model="gemini/test-model", max_retries=1)


@pytest.fixture
def settings(llm_config: LLMConfig) -> AppSettings:
    return AppSettings(llm=llm_config)


@pytest.fixture
def refs_on() -> AnalysisPreferences:
    return AnalysisPreferences(show_reference_values=True, group_dates=False)


@pytest.fixture
def hb_na_payload() -> list[dict[str, Any]]:
    """Model reply for the text "Hb 12.5 (12-16) Na 150 (135-145)"."""
    return [
        {
            "patientInitials": "MJR",
            "patientAge": "45 anos",
            "collectionDate": "10/03",
            "category": "LAB",
            "labResults": [
                {"abbreviation": "Hb", "value": "12.5", "referenceRange": "12-16", "abnormality": "NORMAL"},
                {"abbreviation": "Na", "value": "150", "referenceRange": "135-145", "abnormality": "HIGH"},
            ],
        }
    ]


@pytest.fixture
def mri_payload() -> list[dict[str, Any]]:
    """Model reply for a narrative imaging report."""
    return [
        {
            "patientInitials": "JAS",
            "collectionDate": "02/01/2024",
            "category": "NON_LAB",
            "nonLabData": {
                "examTitle": "Ressonância Magnética de Crânio",
                "mainFindings": ["Pequenas lesões em substância branca", "Sem sinais de hemorragia"],
                "impression": "Microangiopatia leve",
            },
        }
    ]
