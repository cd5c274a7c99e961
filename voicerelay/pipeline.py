"""
voicerelay/pipeline.py
=======================
Ingestion Pipeline — VoiceRelay

Responsibility (strictly sequential, each step needs the previous result):
    1. Validate the submission (audio present, languages, sender slot)
    2. Stage the audio on disk (scoped; removed on every exit path)
    3. Transcribe           → transcript
    4. Translate            → interpreted text
    5. Resolve voice + synthesise → audio bytes
    6. Enqueue {audio, text, timestamp} for the OTHER participant
    7. Return {transcript, interpreted text, audio} to the sender

Failure policy:
    - Validation failures raise ValidationError before any provider call
      and before anything is staged.
    - Each provider call runs under its own deadline. A failure or timeout
      aborts the pipeline with the stage's ProviderError subclass. There
      are no retries and no partial results; nothing is enqueued.
    - A blank transcript short-circuits after step 3: nothing is
      translated, synthesised or enqueued.
    - Cancellation (client disconnect) propagates untouched.

This module does NOT:
    - Parse HTTP requests or build HTTP responses
    - Own the delivery queues (see voicerelay/relay/session.py)
"""

import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, TypeVar

from voicerelay.config import Settings
from voicerelay.errors import (
    MISSING_AUDIO_MESSAGE,
    ProviderError,
    SynthesisError,
    TranscriptionError,
    TranslationError,
    ValidationError,
)
from voicerelay.languages import display_name, is_supported, primary_subtag
from voicerelay.providers.base import CapabilityProvider
from voicerelay.relay.session import ParticipantSlot, SessionRelay, Utterance
from voicerelay.uploads import staged_audio
from voicerelay.voice_resolver import resolve_voice

logger = logging.getLogger("voicerelay.pipeline")

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Submission:
    """A validated /interpret request, minus the audio payload."""

    source_lang: str
    target_lang: str
    sender: ParticipantSlot


@dataclass(frozen=True)
class IngestionResult:
    """Synchronous reply returned to the sender."""

    transcript: str
    interpreted_text: str
    audio: bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "transcript": self.transcript,
            "interpretedText": self.interpreted_text,
            "audioBase64": base64.b64encode(self.audio).decode("ascii"),
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_submission(
    has_audio: bool,
    source_lang: str | None,
    target_lang: str | None,
    mode: str | None,
) -> Submission:
    """
    Check the request fields in the order the caller is told about them.

    Raises:
        ValidationError: On the first missing or invalid field.
    """
    if not has_audio:
        raise ValidationError(MISSING_AUDIO_MESSAGE)

    if not source_lang or not target_lang:
        raise ValidationError("Missing sourceLang or targetLang.")

    sender = ParticipantSlot.parse(mode)

    for code in (source_lang, target_lang):
        if not is_supported(code):
            raise ValidationError(f"Unsupported language code: {code}.")

    return Submission(source_lang=source_lang, target_lang=target_lang, sender=sender)


def build_translation_prompt(transcript: str, target_lang: str) -> str:
    """Prompt asking the text model to translate *transcript*."""
    return f"Translate this text to {display_name(target_lang)}:\n{transcript}"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class InterpretationPipeline:
    """Drives transcribe → translate → synthesise → enqueue."""

    def __init__(
        self,
        provider: CapabilityProvider,
        relay: SessionRelay,
        settings: Settings,
    ):
        self.provider = provider
        self.relay = relay
        self.settings = settings

    async def ingest(self, audio: bytes, submission: Submission) -> IngestionResult:
        """
        Interpret one utterance and relay it to the other participant.

        Args:
            audio: Raw bytes of the uploaded clip.
            submission: Output of validate_submission().

        Returns:
            IngestionResult for the sender.

        Raises:
            TranscriptionError, TranslationError, SynthesisError: When the
                corresponding provider call fails or times out.
        """
        recipient = submission.sender.opposite()

        async with staged_audio(audio, self.settings.upload_dir) as audio_path:
            # ----------------------------------------------------------
            # Step 1: Transcribe
            # ----------------------------------------------------------
            transcript = await _run_stage(
                TranscriptionError,
                self.provider.transcribe(
                    audio_path, primary_subtag(submission.source_lang)
                ),
                self.settings.transcribe_timeout,
            )
        logger.info("Transcript (%s): %s", submission.sender.value, transcript)

        if not transcript or not transcript.strip():
            logger.warning(
                "Blank transcript from %s — skipping translation and relay.",
                submission.sender.value,
            )
            return IngestionResult(transcript="", interpreted_text="", audio=b"")

        # --------------------------------------------------------------
        # Step 2: Translate
        # --------------------------------------------------------------
        interpreted_text = await _run_stage(
            TranslationError,
            self.provider.chat_complete(
                build_translation_prompt(transcript, submission.target_lang)
            ),
            self.settings.translate_timeout,
        )
        logger.info("Translated (%s): %s", submission.target_lang, interpreted_text)

        # --------------------------------------------------------------
        # Step 3: Synthesise
        # --------------------------------------------------------------
        speech = await _run_stage(
            SynthesisError,
            self.provider.synthesize_speech(
                interpreted_text, resolve_voice(submission.target_lang)
            ),
            self.settings.synthesize_timeout,
        )

        # --------------------------------------------------------------
        # Step 4: Relay to the other participant
        # --------------------------------------------------------------
        self.relay.enqueue(
            recipient,
            Utterance(
                audio=speech,
                text=interpreted_text,
                timestamp=int(time.time() * 1000),
            ),
        )

        return IngestionResult(
            transcript=transcript,
            interpreted_text=interpreted_text,
            audio=speech,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _run_stage(
    error_cls: type[ProviderError],
    call: Awaitable[T],
    timeout: float,
) -> T:
    """Await one provider call under *timeout*, mapping failures to *error_cls*."""
    try:
        return await asyncio.wait_for(call, timeout)
    except asyncio.TimeoutError:
        raise error_cls(f"timed out after {timeout:g}s") from None
    except Exception as exc:
        raise error_cls(str(exc) or type(exc).__name__) from exc
