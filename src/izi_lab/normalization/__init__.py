"""Classification, value normalization and the anti-duplication check."""

from __future__ import annotations

from izi_lab.normalization.classifier import classify, classify_batch
from izi_lab.normalization.dedup import enforce_history_policy
from izi_lab.normalization.values import normalize_value

__all__ = ["classify", "classify_batch", "enforce_history_policy", "normalize_value"]
