"""Tests for the session HTTP API."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.testclient import TestClient

from izi_lab.api.app import create_app
from izi_lab.core.config import AppSettings, LLMConfig
from izi_lab.services.analysis_service import AnalysisService
from izi_lab.session.store import SessionStore
from tests.fakes.fake_inference import FakeInferenceBackend


def _build_app(backend: FakeInferenceBackend, settings: AppSettings | None = None) -> FastAPI:
    """App wired with an in-memory store and a fake inference backend."""
    settings = settings or AppSettings(llm=LLMConfig(api_key="test-key", max_retries=1))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        app.state.settings = settings
        app.state.sessions = SessionStore()
        app.state.analysis = AnalysisService(settings, backend=backend)
        yield

    return create_app(lifespan_handler=lifespan)


def _create_session(client: TestClient) -> str:
    resp = client.post("/api/sessions")
    assert resp.status_code == 201
    return resp.json()["session_id"]


class TestHealth:
    def test_health_and_ready(self) -> None:
        with TestClient(_build_app(FakeInferenceBackend())) as client:
            assert client.get("/health").json() == {"status": "ok"}
            assert client.get("/ready").json() == {"status": "ready"}


class TestAnalyzeText:
    def test_text_analysis_appends_records(self, hb_na_payload: list[dict]) -> None:
        app = _build_app(FakeInferenceBackend.returning_json(hb_na_payload))
        with TestClient(app) as client:
            session_id = _create_session(client)
            resp = client.post(
                f"/api/sessions/{session_id}/analyze/text",
                json={
                    "text": "Hb 12.5 (12-16) Na 150 (135-145)",
                    "preferences": {"show_reference_values": True},
                },
            )
            assert resp.status_code == 200
            body = resp.json()
            assert body["total"] == 1
            record = body["added"][0]
            assert record["abnormal_summary"] == "Na 150 ↑"
            assert record["full_summary"].startswith("HEMOGRAMA: Hb 12,5 (Ref: 12-16)")
            assert record["clipboard_text"].startswith("MJR - Lab (10/03):")

            state = client.get(f"/api/sessions/{session_id}").json()
            assert state["status"] == "success"
            assert state["records"][0]["id"] == record["id"]

    def test_extraction_failure_maps_to_502(self) -> None:
        app = _build_app(FakeInferenceBackend(default_content="sem json"))
        with TestClient(app) as client:
            session_id = _create_session(client)
            resp = client.post(f"/api/sessions/{session_id}/analyze/text", json={"text": "Hb 12"})
            assert resp.status_code == 502
            assert resp.json()["error"] == "Não foi possível processar o documento. Tente novamente."
            state = client.get(f"/api/sessions/{session_id}").json()
            assert state["status"] == "error"
            assert state["records"] == []

    def test_missing_credential_maps_to_503(self) -> None:
        settings = AppSettings(llm=LLMConfig(api_key="", max_retries=1))
        with TestClient(_build_app(FakeInferenceBackend(), settings)) as client:
            session_id = _create_session(client)
            resp = client.post(f"/api/sessions/{session_id}/analyze/text", json={"text": "Hb 12"})
            assert resp.status_code == 503
            assert resp.json()["error"] == "Chave de API não configurada."

    def test_unknown_session_is_404(self) -> None:
        with TestClient(_build_app(FakeInferenceBackend())) as client:
            resp = client.post("/api/sessions/nope/analyze/text", json={"text": "Hb 12"})
            assert resp.status_code == 404
            assert resp.json()["type"] == "not_found"

    def test_unrelated_key_error_is_not_reported_as_404(self) -> None:
        app = _build_app(FakeInferenceBackend())
        with TestClient(app, raise_server_exceptions=False) as client:
            session_id = _create_session(client)

            def _broken_get(_session_id: str) -> None:
                raise KeyError("settings")

            app.state.sessions.get = _broken_get
            resp = client.get(f"/api/sessions/{session_id}")
            assert resp.status_code == 500


class TestAnalyzeUploads:
    def test_files_are_sent_as_inline_parts(self, mri_payload: list[dict]) -> None:
        backend = FakeInferenceBackend.returning_json(mri_payload)
        with TestClient(_build_app(backend)) as client:
            session_id = _create_session(client)
            resp = client.post(
                f"/api/sessions/{session_id}/analyze/files",
                files=[
                    ("files", ("laudo.pdf", b"%PDF-1.7", "application/pdf")),
                    ("files", ("foto.png", b"\x89PNG", "image/png")),
                ],
                data={
                    "group_dates": "true",
                    "custom_abbreviations": json.dumps([{"exam_name": "Plaquetas", "abbreviation": "Plaq"}]),
                },
            )
            assert resp.status_code == 200
            assert resp.json()["added"][0]["category"] == "NON_LAB"

        blocks = backend.last_user_blocks
        assert blocks[0]["type"] == "file"
        assert blocks[1]["type"] == "image_url"
        assert '"Plaquetas" MUST be abbreviated as "Plaq"' in backend.last_system_prompt

    def test_disallowed_file_type_is_422(self) -> None:
        backend = FakeInferenceBackend()
        with TestClient(_build_app(backend)) as client:
            session_id = _create_session(client)
            resp = client.post(
                f"/api/sessions/{session_id}/analyze/files",
                files=[("files", ("notes.txt", b"hello", "text/plain"))],
            )
            assert resp.status_code == 422
            assert resp.json()["filename"] == "notes.txt"
        assert backend.calls == []

    def test_bad_custom_abbreviations_is_422(self) -> None:
        with TestClient(_build_app(FakeInferenceBackend())) as client:
            session_id = _create_session(client)
            resp = client.post(
                f"/api/sessions/{session_id}/analyze/files",
                files=[("files", ("a.pdf", b"%PDF", "application/pdf"))],
                data={"custom_abbreviations": "not json"},
            )
            assert resp.status_code == 422

    def test_audio_upload(self, hb_na_payload: list[dict]) -> None:
        backend = FakeInferenceBackend.returning_json(hb_na_payload)
        with TestClient(_build_app(backend)) as client:
            session_id = _create_session(client)
            resp = client.post(
                f"/api/sessions/{session_id}/analyze/audio",
                files={"audio": ("ditado.webm", b"\x1aE\xdf\xa3", "audio/webm")},
            )
            assert resp.status_code == 200
        blocks = backend.last_user_blocks
        assert blocks[0]["type"] == "input_audio"
        assert blocks[0]["input_audio"]["format"] == "webm"
        assert "Transcribe precisely" in blocks[1]["text"]


class TestSessionLifecycle:
    def test_remove_reset_and_export(self, hb_na_payload: list[dict]) -> None:
        app = _build_app(FakeInferenceBackend.returning_json(hb_na_payload))
        with TestClient(app) as client:
            session_id = _create_session(client)
            for _ in range(2):
                client.post(f"/api/sessions/{session_id}/analyze/text", json={"text": "Hb"})

            state = client.get(f"/api/sessions/{session_id}").json()
            first_id, second_id = [r["id"] for r in state["records"]]

            exported = client.get(f"/api/sessions/{session_id}/export")
            assert exported.headers["content-type"].startswith("application/json")
            assert [r["id"] for r in exported.json()["records"]] == [first_id, second_id]

            resp = client.delete(f"/api/sessions/{session_id}/records/{first_id}")
            assert [r["id"] for r in resp.json()["records"]] == [second_id]

            assert client.delete(f"/api/sessions/{session_id}/records/{first_id}").status_code == 404

            resp = client.post(f"/api/sessions/{session_id}/reset")
            assert resp.json()["status"] == "idle"
            assert resp.json()["records"] == []
