"""Tests for the nested settings and the first-use credential check."""

from __future__ import annotations

import pytest

from izi_lab.core.config import AppSettings, ExtractionConfig, IngestionConfig, LLMConfig, PromptConfig
from izi_lab.core.credentials import require_api_key
from izi_lab.exceptions import MISSING_API_KEY_MESSAGE, ConfigurationError


class TestLLMConfigDefaults:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("IZI_LLM_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        cfg = LLMConfig()
        assert cfg.provider == "gemini"
        assert cfg.model == "gemini/gemini-2.5-flash"
        assert cfg.temperature == 0.1
        assert cfg.top_p == 1.0
        assert cfg.seed is None
        assert cfg.api_key == ""

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IZI_LLM_MODEL", "openai/gpt-4o-mini")
        monkeypatch.setenv("IZI_LLM_TEMPERATURE", "0.3")
        cfg = LLMConfig()
        assert cfg.model == "openai/gpt-4o-mini"
        assert cfg.temperature == 0.3

    def test_gemini_api_key_is_honored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("IZI_LLM_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "from-gemini-env")
        assert LLMConfig().api_key == "from-gemini-env"

    def test_max_retries_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            LLMConfig(max_retries=0)


class TestOtherConfigs:
    def test_ingestion_defaults(self) -> None:
        cfg = IngestionConfig()
        assert cfg.max_file_bytes == 15 * 1024 * 1024
        assert cfg.allowed_mime_types == ["application/pdf"]
        assert cfg.allowed_mime_prefixes == ["image/"]
        assert cfg.default_audio_mime == "audio/wav"

    def test_history_policy_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IZI_EXTRACTION_HISTORY_POLICY", "grouped")
        assert ExtractionConfig().history_policy == "grouped"

    def test_history_policy_rejects_unknown(self) -> None:
        with pytest.raises(ValueError):
            ExtractionConfig(history_policy="weekly")  # type: ignore[arg-type]

    def test_app_settings_aggregates(self) -> None:
        settings = AppSettings(llm=LLMConfig(seed=42))
        assert settings.llm.seed == 42
        assert settings.extraction.structured_output is True
        assert settings.api.title == "IZI LAB"


class TestRequireApiKey:
    def test_missing_key_raises(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            require_api_key(LLMConfig(api_key=""))
        assert str(exc_info.value) == MISSING_API_KEY_MESSAGE

    def test_placeholder_key_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            require_api_key(LLMConfig(api_key="no-key"))

    def test_present_key_is_returned(self) -> None:
        assert require_api_key(LLMConfig(api_key="abc")) == "abc"

    def test_ollama_needs_no_key(self) -> None:
        assert require_api_key(LLMConfig(provider="ollama", api_key="")) is None


class TestPromptConfig:
    def test_no_overrides_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("IZI_PROMPTS_OVERRIDES_PATH", raising=False)
        assert PromptConfig().overrides_path is None

    def test_overrides_path_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.setenv("IZI_PROMPTS_OVERRIDES_PATH", str(tmp_path / "prompts.json"))
        assert PromptConfig().overrides_path == tmp_path / "prompts.json"
