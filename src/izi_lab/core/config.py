"""Nested pydantic-settings configuration for the application.

Each sub-config reads its own ``IZI_<GROUP>_*`` env vars::

    export IZI_LLM_MODEL=gemini/gemini-2.5-flash
    export IZI_LLM_API_KEY=...
    export IZI_EXTRACTION_HISTORY_POLICY=separate
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

HistoryPolicySetting = Literal["preference", "separate", "grouped"]


class LLMConfig(BaseSettings):
    """LLM backend configuration.

    The API key is not checked here: a missing credential is reported at the
    first extraction call, not at startup. ``GEMINI_API_KEY`` is honored as
    a fallback name.
    """

    model_config = {"env_prefix": "IZI_LLM_"}

    provider: Literal["gemini", "openai", "anthropic", "ollama", "litellm"] = "gemini"
    model: str = "gemini/gemini-2.5-flash"
    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("api_key", "IZI_LLM_API_KEY", "GEMINI_API_KEY"),
    )
    base_url: Optional[str] = None
    temperature: float = 0.1
    top_p: float = 1.0
    seed: Optional[int] = None
    timeout: float = 120.0
    max_retries: int = Field(default=3, ge=1)
    retry_jitter_factor: float = 0.5
    retry_max_delay: float = 30.0


class IngestionConfig(BaseSettings):
    """Upload constraints enforced before normalization.

    Env vars use ``IZI_INGESTION_`` prefix.
    """

    model_config = {"env_prefix": "IZI_INGESTION_"}

    max_file_bytes: int = 15 * 1024 * 1024
    allowed_mime_types: list[str] = Field(default_factory=lambda: ["application/pdf"])
    allowed_mime_prefixes: list[str] = Field(default_factory=lambda: ["image/"])
    default_audio_mime: str = "audio/wav"


class ExtractionConfig(BaseSettings):
    """Extraction pipeline configuration.

    ``history_policy`` decides how repeated analytes across dates are handled:
    ``"preference"`` follows the caller's ``group_dates`` flag, ``"separate"``
    always keeps one entry per date and ``"grouped"`` always folds them into
    an arrow-joined value.

    Env vars use ``IZI_EXTRACTION_`` prefix.
    """

    model_config = {"env_prefix": "IZI_EXTRACTION_"}

    history_policy: HistoryPolicySetting = "preference"
    structured_output: bool = True


class PromptConfig(BaseSettings):
    """Prompt text overrides.

    ``overrides_path`` points to a JSON object keyed ``"domain/category/NAME"``
    whose values replace the packaged templates.  Env vars use
    ``IZI_PROMPTS_`` prefix.
    """

    model_config = {"env_prefix": "IZI_PROMPTS_"}

    overrides_path: Optional[Path] = None


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Env vars use ``IZI_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "IZI_OBSERVABILITY_"}

    service_name: str = "izi-lab"
    log_level: str = "INFO"


class APIConfig(BaseSettings):
    """HTTP API configuration.

    Env vars use ``IZI_API_`` prefix.
    """

    model_config = {"env_prefix": "IZI_API_"}

    title: str = "IZI LAB"
    description: str = "Medical document extraction into de-identified, copy-ready summaries"
    port: int = 8080


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    prompts: PromptConfig = Field(default_factory=PromptConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    api: APIConfig = Field(default_factory=APIConfig)
