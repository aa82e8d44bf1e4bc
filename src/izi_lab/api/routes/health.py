"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: always returns 200 if the process is up."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request) -> dict[str, str]:
    """Readiness probe: the session store and analysis service are wired."""
    state = request.app.state
    if getattr(state, "sessions", None) is None or getattr(state, "analysis", None) is None:
        return {"status": "starting"}
    return {"status": "ready"}
