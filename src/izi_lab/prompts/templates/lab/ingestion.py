"""User-message fragments that frame each kind of input."""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "TEXT_INPUT_PROMPT": """Analyze the following raw text from a medical document:

{text}""",
    "AUDIO_INPUT_PROMPT": (
        "TRANSCRIPTION & ANALYSIS: The user has recorded an audio reading a medical exam. "
        "Transcribe precisely and analyze."
    ),
    "ANALYZE_DOCUMENTS_PROMPT": (
        "Analyze these medical documents. Identify patients. "
        "Classify as LAB or NON_LAB and extract data accordingly."
    ),
}

_PROMPT_NAMES = frozenset(_PROMPT_DATA.keys())


def __getattr__(name: str) -> str:
    if name in _PROMPT_NAMES:
        from izi_lab.prompts.registry import get_prompt

        return get_prompt("lab", "ingestion", name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(_PROMPT_NAMES) + ["_PROMPT_DATA"]
