"""Analysis service: normalize -> extract -> classify -> dedup -> merge."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from izi_lab.core.config import AppSettings
from izi_lab.domains.lab.models import AnalysisPreferences, CustomAbbreviation, ExamRecord
from izi_lab.domains.lab.rules import resolve_history_policy
from izi_lab.exceptions import EXTRACTION_FAILED_MESSAGE, ExtractionError, IziLabError
from izi_lab.extraction.invoker import ExtractionInvoker
from izi_lab.inference.protocols import IInferenceBackend
from izi_lab.ingestion.normalizer import InputNormalizer
from izi_lab.models import InputSource
from izi_lab.normalization.classifier import classify_batch
from izi_lab.normalization.dedup import enforce_history_policy
from izi_lab.providers.client import LLMClient
from izi_lab.session.merge import ExamSession, SessionStatus

log = logging.getLogger(__name__)


class AnalysisService:
    """Runs one analysis batch end to end.

    Preferences and custom abbreviations are passed on every call; nothing
    about them is cached between batches.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        *,
        client: Optional[LLMClient] = None,
        backend: Optional[IInferenceBackend] = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._normalizer = InputNormalizer(
            default_audio_mime=self._settings.ingestion.default_audio_mime,
        )
        self._invoker = ExtractionInvoker(
            client or LLMClient(self._settings.llm, backend=backend),
            structured_output=self._settings.extraction.structured_output,
        )

    async def run_pipeline(
        self,
        source: InputSource,
        *,
        preferences: AnalysisPreferences,
        custom_abbreviations: Sequence[CustomAbbreviation] = (),
    ) -> list[ExamRecord]:
        """Classified, deduplicated records for one input, without ids."""
        parts = self._normalizer.normalize(source)
        if not parts:
            log.info("Input produced no parts; nothing to extract")
            return []

        policy = resolve_history_policy(self._settings.extraction.history_policy, preferences)
        raws = await self._invoker.extract(parts, preferences, custom_abbreviations, policy)
        records = classify_batch(
            raws, preferences=preferences, custom_abbreviations=custom_abbreviations,
        )
        return enforce_history_policy(records, policy)

    async def process_analysis(
        self,
        source: InputSource,
        prior_records: Optional[Sequence[ExamRecord]] = None,
        *,
        preferences: AnalysisPreferences = AnalysisPreferences(),
        custom_abbreviations: Sequence[CustomAbbreviation] = (),
    ) -> list[ExamRecord]:
        """Return *prior_records* followed by the records extracted from *source*.

        On failure the exception propagates and *prior_records* is untouched.
        """
        new_records = await self.run_pipeline(
            source, preferences=preferences, custom_abbreviations=custom_abbreviations,
        )
        scratch = ExamSession.from_records(prior_records or ())
        scratch.append_batch(new_records)
        return list(scratch.records)

    async def analyze(
        self,
        session: ExamSession,
        source: Optional[InputSource] = None,
        *,
        preferences: AnalysisPreferences = AnalysisPreferences(),
        custom_abbreviations: Sequence[CustomAbbreviation] = (),
    ) -> list[ExamRecord]:
        """Analyze *source* (or the session's pending inputs) into *session*.

        Holds ``session.lock`` for the whole batch.  On failure the session
        moves to ERROR with a user-facing message, its records are unchanged
        and pending inputs are put back for a retry.
        """
        async with session.lock:
            from_queue = source is None
            sources = session.take_pending() if from_queue else [source]
            session.begin_analysis()

            try:
                batch: list[ExamRecord] = []
                for item in sources:
                    batch.extend(
                        await self.run_pipeline(
                            item,
                            preferences=preferences,
                            custom_abbreviations=custom_abbreviations,
                        )
                    )
            except IziLabError as exc:
                self._restore(session, sources if from_queue else [])
                session.fail(str(exc))
                raise
            except Exception as exc:
                log.exception("Unexpected failure during analysis")
                self._restore(session, sources if from_queue else [])
                session.fail(EXTRACTION_FAILED_MESSAGE)
                raise ExtractionError() from exc

            if not batch and session.is_empty:
                session.status = SessionStatus.IDLE
                return []
            return session.append_batch(batch)

    @staticmethod
    def _restore(session: ExamSession, sources: Sequence[InputSource]) -> None:
        for item in sources:
            session.enqueue(item)
