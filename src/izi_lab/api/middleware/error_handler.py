"""Global exception handlers mapping domain exceptions to HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from izi_lab.exceptions import (
    ConfigurationError,
    ExtractionError,
    InputValidationError,
    IziLabError,
    NotFoundError,
)


def register_error_handlers(app: FastAPI) -> None:
    """Register exception-to-HTTP-status mappings."""

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"error": str(exc), "type": "configuration_error"})

    @app.exception_handler(InputValidationError)
    async def handle_input_error(request: Request, exc: InputValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"error": str(exc), "type": "input_validation_error", "filename": exc.filename},
        )

    @app.exception_handler(ExtractionError)
    async def handle_extraction_error(request: Request, exc: ExtractionError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"error": str(exc), "type": "extraction_error"})

    @app.exception_handler(IziLabError)
    async def handle_generic_error(request: Request, exc: IziLabError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": str(exc), "type": "izi_lab_error"})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc), "type": "not_found"})
