"""
voicerelay/api/routes.py
=========================
HTTP Endpoints — VoiceRelay

    POST /interpret       submit an utterance (multipart/form-data)
    GET  /stream/{mode}   poll the next utterance for participant A or B
    GET  /health          queue depths
    GET  /                liveness string

Handlers stay thin: they validate, delegate to the pipeline or the relay,
and serialise. The relay and pipeline are taken from app.state through
FastAPI dependencies, never from module globals.
"""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from voicerelay import __version__
from voicerelay.errors import InternalError, RelayError
from voicerelay.pipeline import InterpretationPipeline, validate_submission
from voicerelay.relay.session import ParticipantSlot, SessionRelay

logger = logging.getLogger("voicerelay.api")

router = APIRouter()

DISCONNECT_POLL_SECONDS = 0.25
CLIENT_CLOSED_REQUEST = 499


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


async def get_relay(request: Request) -> SessionRelay:
    return request.app.state.relay


async def get_pipeline(request: Request) -> InterpretationPipeline:
    return request.app.state.pipeline


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/interpret")
async def interpret(
    request: Request,
    audio: UploadFile | None = File(None),
    sourceLang: str | None = Form(None),
    targetLang: str | None = Form(None),
    mode: str | None = Form(None),
    pipeline: InterpretationPipeline = Depends(get_pipeline),
):
    """
    Transcribe, translate and synthesise one utterance.

    The sender receives the result immediately; the translated audio and
    text are queued for the other participant.

    Returns:
        {"transcript": str, "interpretedText": str, "audioBase64": str}
    """
    has_audio = audio is not None and bool(audio.filename)
    submission = validate_submission(has_audio, sourceLang, targetLang, mode)

    audio_bytes = await audio.read()
    logger.info(
        "Submission from %s: %s → %s (%.2f KB)",
        submission.sender.value,
        submission.source_lang,
        submission.target_lang,
        len(audio_bytes) / 1024,
    )

    task = asyncio.create_task(pipeline.ingest(audio_bytes, submission))
    watcher = asyncio.create_task(_cancel_on_disconnect(request, task))
    try:
        result = await task
    except asyncio.CancelledError:
        if watcher.done() and not watcher.cancelled() and watcher.result():
            logger.info(
                "Client %s disconnected — interpretation cancelled.",
                submission.sender.value,
            )
            return Response(status_code=CLIENT_CLOSED_REQUEST)
        raise
    except RelayError:
        raise
    except Exception as exc:
        logger.error("Unexpected interpretation error: %s", exc, exc_info=True)
        raise InternalError(str(exc)) from exc
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher

    return JSONResponse(status_code=200, content=result.to_dict())


@router.get("/stream/{mode}")
async def stream(mode: str, relay: SessionRelay = Depends(get_relay)):
    """
    Hand out the oldest pending utterance for *mode*.

    Each call removes the item it returns. An empty queue yields
    {"audioBase64": null, "text": null, "timestamp": null}.
    """
    slot = ParticipantSlot.parse(mode, message="Invalid stream mode.")
    return JSONResponse(status_code=200, content=relay.dequeue(slot).to_dict())


@router.get("/health")
async def health(relay: SessionRelay = Depends(get_relay)):
    return {
        "status": "healthy",
        "service": "voicerelay",
        "version": __version__,
        "pending": {slot.value: relay.pending(slot) for slot in ParticipantSlot},
    }


@router.get("/", response_class=PlainTextResponse)
async def root():
    return "Hello from the backend!"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _cancel_on_disconnect(request: Request, task: asyncio.Task) -> bool:
    """Cancel *task* if the client goes away first. Returns True if it did."""
    while not task.done():
        if await request.is_disconnected():
            task.cancel()
            return True
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)
    return False
