"""
voicerelay/config.py
=====================
Runtime Configuration — VoiceRelay

Responsibility:
    - Read the provider credential and service settings from the process
      environment (populated from .env by main.py via python-dotenv)
    - Provide a single immutable Settings object to the app factory

The language and voice tables are compiled in, not configured
(see voicerelay/languages.py and voicerelay/voice_resolver.py).
"""

import os
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_UPLOAD_DIR = "uploads"

DEFAULT_TRANSCRIPTION_MODEL = "whisper-1"
DEFAULT_TRANSLATION_MODEL = "gpt-4"
DEFAULT_SPEECH_MODEL = "tts-1"

DEFAULT_STAGE_TIMEOUT = 60.0  # seconds, per provider call


@dataclass(frozen=True)
class Settings:
    """Service settings, read once at startup."""

    openai_api_key: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    upload_dir: str = DEFAULT_UPLOAD_DIR

    transcription_model: str = DEFAULT_TRANSCRIPTION_MODEL
    translation_model: str = DEFAULT_TRANSLATION_MODEL
    speech_model: str = DEFAULT_SPEECH_MODEL

    transcribe_timeout: float = DEFAULT_STAGE_TIMEOUT
    translate_timeout: float = DEFAULT_STAGE_TIMEOUT
    synthesize_timeout: float = DEFAULT_STAGE_TIMEOUT


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_settings() -> Settings:
    """
    Build Settings from environment variables.

    Raises:
        ValueError: If a numeric variable cannot be parsed or a timeout
            is not positive.
    """
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        host=os.getenv("VOICERELAY_HOST", DEFAULT_HOST),
        port=_int_env("VOICERELAY_PORT", DEFAULT_PORT),
        upload_dir=os.getenv("VOICERELAY_UPLOAD_DIR", DEFAULT_UPLOAD_DIR),
        transcription_model=os.getenv(
            "VOICERELAY_TRANSCRIPTION_MODEL", DEFAULT_TRANSCRIPTION_MODEL
        ),
        translation_model=os.getenv(
            "VOICERELAY_TRANSLATION_MODEL", DEFAULT_TRANSLATION_MODEL
        ),
        speech_model=os.getenv("VOICERELAY_SPEECH_MODEL", DEFAULT_SPEECH_MODEL),
        transcribe_timeout=_timeout_env("VOICERELAY_TRANSCRIBE_TIMEOUT"),
        translate_timeout=_timeout_env("VOICERELAY_TRANSLATE_TIMEOUT"),
        synthesize_timeout=_timeout_env("VOICERELAY_SYNTHESIZE_TIMEOUT"),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _timeout_env(name: str) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return DEFAULT_STAGE_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value
