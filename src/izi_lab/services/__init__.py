"""Application services."""

from __future__ import annotations

from izi_lab.services.analysis_service import AnalysisService

__all__ = ["AnalysisService"]
