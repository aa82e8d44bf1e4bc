"""Pluggable inference backends."""

from __future__ import annotations

from izi_lab.inference.protocols import (
    FILTERED,
    FINISHED,
    TRUNCATED,
    IInferenceBackend,
    InferenceResult,
)
from izi_lab.inference.realtime import RealTimeBackend

__all__ = [
    "FILTERED",
    "FINISHED",
    "IInferenceBackend",
    "InferenceResult",
    "RealTimeBackend",
    "TRUNCATED",
]
