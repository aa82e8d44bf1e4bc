"""Value cleanup for lab results: decimal comma, unit stripping, history arrows."""

from __future__ import annotations

import re

ARROW = " -> "

_ARROW_RE = re.compile(r"\s*(?:->|→|=>)\s*")
_WS_RE = re.compile(r"\s+")
_NUMBER_RE = re.compile(r"^(?P<num>[<>≤≥]?\s*[-+]?\d+(?:[.,]\d+)*)\s*(?P<rest>.*)$")
_UNIT_RE = re.compile(r"^(?:[%‰]|/?\s*[A-Za-zµμ][\w/µμ³²^.\-]*(?:\s*/\s*[\w/µμ³²^.\-]+)*|(?:x\s*)?10\^?\d+\s*/\s*\S+)$")


def split_history(value: str) -> list[str]:
    """Split an arrow-joined evolution (``"1.2 -> 1.5"``) into its segments."""
    return [seg for seg in _ARROW_RE.split(value.strip()) if seg]


def has_history(value: str) -> bool:
    return len(split_history(value)) > 1


def join_history(values: list[str]) -> str:
    return ARROW.join(values)


def to_decimal_comma(value: str) -> str:
    return value.replace(".", ",")


def strip_unit(value: str) -> str:
    """Drop a trailing measurement unit from a numeric value.

    Qualitative results (``"Negativo"``) and titers (``"1/80"``) are returned
    as is.
    """
    match = _NUMBER_RE.match(value)
    if match is None:
        return value
    rest = match.group("rest").strip()
    if rest and _UNIT_RE.match(rest):
        return match.group("num")
    return value


def normalize_value(value: str) -> str:
    """Whitespace collapse, unit strip and decimal comma for each history segment."""
    segments = split_history(_WS_RE.sub(" ", value))
    if not segments:
        return ""
    return join_history([to_decimal_comma(strip_unit(seg)) for seg in segments])


def latest_value(value: str) -> str:
    """Last segment of an arrow-joined value."""
    segments = split_history(value)
    return segments[-1] if segments else value
