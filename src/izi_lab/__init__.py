"""izi-lab: medical documents to de-identified, copy-ready lab summaries.

Typical use::

    from izi_lab import AnalysisService, AnalysisPreferences, ExamSession, SummaryFormatter

    service = AnalysisService()
    session = ExamSession()
    await service.analyze(session, "Hb 12.5 (12-16) Na 150 (135-145)",
                          preferences=AnalysisPreferences(show_reference_values=True))
    for record in session.records:
        print(SummaryFormatter().clipboard_text(record))
"""

from __future__ import annotations

from izi_lab.core.config import AppSettings
from izi_lab.domains.lab.models import (
    Abnormality,
    AnalysisPreferences,
    CustomAbbreviation,
    ExamCategory,
    ExamRecord,
    LabResultItem,
    NonLabReport,
)
from izi_lab.exceptions import (
    ConfigurationError,
    ExtractionError,
    InputNormalizationError,
    InputValidationError,
    IziLabError,
)
from izi_lab.formatting.summary import SummaryFormatter
from izi_lab.ingestion.normalizer import normalize_input
from izi_lab.models import AudioBlob, UploadedFile
from izi_lab.normalization.classifier import classify
from izi_lab.providers.client import LLMClient
from izi_lab.services.analysis_service import AnalysisService
from izi_lab.session.merge import ExamSession, SessionStatus

__all__ = [
    "Abnormality",
    "AnalysisPreferences",
    "AnalysisService",
    "AppSettings",
    "AudioBlob",
    "ConfigurationError",
    "CustomAbbreviation",
    "ExamCategory",
    "ExamRecord",
    "ExamSession",
    "ExtractionError",
    "InputNormalizationError",
    "InputValidationError",
    "IziLabError",
    "LabResultItem",
    "LLMClient",
    "NonLabReport",
    "SessionStatus",
    "SummaryFormatter",
    "UploadedFile",
    "classify",
    "normalize_input",
]
