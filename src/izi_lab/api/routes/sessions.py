"""Session endpoints: create, analyze (text/files/audio), remove, reset, export."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, Form, Request, Response, UploadFile
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from izi_lab.domains.lab.models import AnalysisPreferences, CustomAbbreviation, ExamRecord
from izi_lab.exceptions import InputValidationError
from izi_lab.formatters.json_formatter import JSONFormatter
from izi_lab.formatting.summary import SummaryFormatter
from izi_lab.ingestion.validation import validate_upload
from izi_lab.models import AudioBlob, UploadedFile
from izi_lab.services.analysis_service import AnalysisService
from izi_lab.session.merge import ExamSession
from izi_lab.session.store import SessionStore

router = APIRouter(tags=["sessions"])

_summaries = SummaryFormatter()


# ── Request models ──────────────────────────────────────────────────


class PreferencesBody(BaseModel):
    """Per-call analysis preferences."""

    show_reference_values: bool = False
    group_dates: bool = False

    def to_domain(self) -> AnalysisPreferences:
        return AnalysisPreferences(
            show_reference_values=self.show_reference_values,
            group_dates=self.group_dates,
        )


class CustomAbbreviationBody(BaseModel):
    """A user-declared exam name -> abbreviation override."""

    id: str = ""
    exam_name: str
    abbreviation: str

    def to_domain(self) -> CustomAbbreviation:
        return CustomAbbreviation(id=self.id, exam_name=self.exam_name, abbreviation=self.abbreviation)


_ABBREVIATIONS_ADAPTER = TypeAdapter(list[CustomAbbreviationBody])


class AnalyzeTextRequest(BaseModel):
    """Pasted document text plus the caller's current preferences."""

    text: str
    preferences: PreferencesBody = Field(default_factory=PreferencesBody)
    custom_abbreviations: list[CustomAbbreviationBody] = Field(default_factory=list)


# ── Response models ─────────────────────────────────────────────────


class LabResultResponse(BaseModel):
    abbreviation: str
    value: str
    reference_range: Optional[str] = None
    abnormality: str


class NonLabResponse(BaseModel):
    exam_title: str = ""
    main_findings: list[str] = Field(default_factory=list)
    impression: str = ""


class RecordResponse(BaseModel):
    """One exam record with its rendered summaries."""

    id: str
    patient_initials: str
    patient_age: str = ""
    collection_date: str = ""
    category: str
    results: list[LabResultResponse] = Field(default_factory=list)
    non_lab_data: Optional[NonLabResponse] = None
    raw_summary: str = ""
    full_summary: str = ""
    abnormal_summary: str = ""
    clipboard_text: str = ""
    abnormal_clipboard_text: str = ""


class SessionResponse(BaseModel):
    session_id: str
    status: str
    error: Optional[str] = None
    records: list[RecordResponse] = Field(default_factory=list)


class AnalyzeResponse(BaseModel):
    session_id: str
    added: list[RecordResponse] = Field(default_factory=list)
    total: int = 0


class CreateSessionResponse(BaseModel):
    session_id: str


# ── Helpers ─────────────────────────────────────────────────────────


def _record_response(record: ExamRecord) -> RecordResponse:
    report = record.non_lab_data
    return RecordResponse(
        id=record.id,
        patient_initials=record.patient_initials,
        patient_age=record.patient_age,
        collection_date=record.collection_date,
        category=record.category.value,
        results=[
            LabResultResponse(
                abbreviation=r.abbreviation,
                value=r.value,
                reference_range=r.reference_range,
                abnormality=r.abnormality.value,
            )
            for r in record.results
        ],
        non_lab_data=(
            NonLabResponse(
                exam_title=report.exam_title,
                main_findings=list(report.main_findings),
                impression=report.impression,
            )
            if report is not None
            else None
        ),
        raw_summary=record.raw_summary,
        full_summary=_summaries.full_summary(record),
        abnormal_summary=_summaries.abnormal_summary(record),
        clipboard_text=_summaries.clipboard_text(record),
        abnormal_clipboard_text=_summaries.abnormal_clipboard_text(record),
    )


def _session_response(session: ExamSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        status=session.status.value,
        error=session.error_message,
        records=[_record_response(r) for r in session.records],
    )


def _store(req: Request) -> SessionStore:
    return req.app.state.sessions


def _service(req: Request) -> AnalysisService:
    return req.app.state.analysis


def _parse_abbreviations(raw: str) -> list[CustomAbbreviation]:
    if not raw.strip():
        return []
    try:
        bodies = _ABBREVIATIONS_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise InputValidationError("Abreviações personalizadas inválidas.") from exc
    return [b.to_domain() for b in bodies]


async def _run(
    req: Request,
    session_id: str,
    source: object,
    preferences: AnalysisPreferences,
    custom_abbreviations: list[CustomAbbreviation],
) -> AnalyzeResponse:
    session = _store(req).get(session_id)
    added = await _service(req).analyze(
        session,
        source,  # type: ignore[arg-type]
        preferences=preferences,
        custom_abbreviations=custom_abbreviations,
    )
    return AnalyzeResponse(
        session_id=session.session_id,
        added=[_record_response(r) for r in added],
        total=len(session),
    )


# ── Endpoints ───────────────────────────────────────────────────────


@router.post("/sessions", response_model=CreateSessionResponse, status_code=201)
async def create_session(req: Request) -> CreateSessionResponse:
    session = _store(req).create()
    return CreateSessionResponse(session_id=session.session_id)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, req: Request) -> SessionResponse:
    return _session_response(_store(req).get(session_id))


@router.post("/sessions/{session_id}/analyze/text", response_model=AnalyzeResponse)
async def analyze_text(session_id: str, request: AnalyzeTextRequest, req: Request) -> AnalyzeResponse:
    """Analyze pasted document text."""
    return await _run(
        req,
        session_id,
        request.text,
        request.preferences.to_domain(),
        [ca.to_domain() for ca in request.custom_abbreviations],
    )


@router.post("/sessions/{session_id}/analyze/files", response_model=AnalyzeResponse)
async def analyze_files(
    session_id: str,
    req: Request,
    files: list[UploadFile] = File(...),
    show_reference_values: bool = Form(False),
    group_dates: bool = Form(False),
    custom_abbreviations: str = Form("[]"),
) -> AnalyzeResponse:
    """Analyze one or more PDFs/images as a single batch."""
    config = req.app.state.settings.ingestion
    uploads: list[UploadedFile] = []
    for upload in files:
        data = await upload.read()
        mime_type = upload.content_type or ""
        validate_upload(mime_type, len(data), config, filename=upload.filename or "")
        uploads.append(
            UploadedFile(content=data, mime_type=mime_type, filename=upload.filename or "", size=len(data))
        )

    preferences = AnalysisPreferences(show_reference_values=show_reference_values, group_dates=group_dates)
    return await _run(req, session_id, uploads, preferences, _parse_abbreviations(custom_abbreviations))


@router.post("/sessions/{session_id}/analyze/audio", response_model=AnalyzeResponse)
async def analyze_audio(
    session_id: str,
    req: Request,
    audio: UploadFile = File(...),
    show_reference_values: bool = Form(False),
    group_dates: bool = Form(False),
    custom_abbreviations: str = Form("[]"),
) -> AnalyzeResponse:
    """Analyze a recorded dictation."""
    config = req.app.state.settings.ingestion
    data = await audio.read()
    mime_type = audio.content_type or ""
    if mime_type and not mime_type.startswith("audio/"):
        raise InputValidationError(
            f"Tipo de áudio não suportado: {mime_type}.", filename=audio.filename or "",
        )
    if len(data) > config.max_file_bytes:
        raise InputValidationError(
            f"Arquivo excede o limite de {config.max_file_bytes // (1024 * 1024)} MB.",
            filename=audio.filename or "",
        )

    preferences = AnalysisPreferences(show_reference_values=show_reference_values, group_dates=group_dates)
    blob = AudioBlob(content=data, mime_type=mime_type)
    return await _run(req, session_id, blob, preferences, _parse_abbreviations(custom_abbreviations))


@router.delete("/sessions/{session_id}/records/{record_id}", response_model=SessionResponse)
async def remove_record(session_id: str, record_id: str, req: Request) -> SessionResponse:
    session = _store(req).get(session_id)
    session.remove(record_id)
    return _session_response(session)


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str, req: Request) -> SessionResponse:
    session = _store(req).get(session_id)
    session.reset()
    return _session_response(session)


@router.get("/sessions/{session_id}/export")
async def export_session(session_id: str, req: Request) -> Response:
    """JSON export of every record with its summaries and spreadsheet rows."""
    session = _store(req).get(session_id)
    formatter = JSONFormatter(_summaries)
    return Response(
        content=formatter.format(session.records, session_id=session.session_id),
        media_type=formatter.content_type,
    )
