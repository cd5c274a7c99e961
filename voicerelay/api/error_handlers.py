"""
voicerelay/api/error_handlers.py
=================================
HTTP error mapping — VoiceRelay

Every error becomes ``{"error": <message>}``:
    - ValidationError         → 400 with its own message
    - RequestValidationError  → 400 (FastAPI could not bind the form,
                                e.g. ``audio`` sent as a text field)
    - any other RelayError    → 500 with the generic "Failed to interpret."
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from voicerelay.errors import INVALID_REQUEST_MESSAGE, MISSING_AUDIO_MESSAGE, RelayError

logger = logging.getLogger("voicerelay.api.errors")


def register_error_handlers(app: FastAPI) -> None:
    """Install the RelayError and request-validation handlers on *app*."""

    @app.exception_handler(RelayError)
    async def handle_relay_error(request: Request, exc: RelayError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s", request.method, request.url.path, exc.message,
            )
        else:
            logger.info(
                "%s %s rejected: %s", request.method, request.url.path, exc.message,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.public_message},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        fields = {err["loc"][-1] for err in exc.errors() if err.get("loc")}
        message = MISSING_AUDIO_MESSAGE if "audio" in fields else INVALID_REQUEST_MESSAGE
        logger.info(
            "%s %s rejected: %s (%s)",
            request.method, request.url.path, message, sorted(map(str, fields)),
        )
        return JSONResponse(status_code=400, content={"error": message})
