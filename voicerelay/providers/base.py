"""
voicerelay/providers/base.py
=============================
Capability Provider Interface — VoiceRelay

The three external capabilities the ingestion pipeline depends on:
speech-to-text, text generation (used for translation), and text-to-speech.
Every method is a coroutine and therefore a suspension point on the
event loop. Implementations raise whatever their backend raises; the
pipeline maps failures to the stage-specific ProviderError subclasses.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class CapabilityProvider(ABC):
    """Abstract boundary to the speech / language backend."""

    @abstractmethod
    async def transcribe(self, audio_path: Path, language_hint: str) -> str:
        """
        Transcribe an audio file.

        Args:
            audio_path: File holding the submitted audio (named with a
                container extension the backend recognises).
            language_hint: Primary language subtag, e.g. "en".

        Returns:
            The transcript text (may be empty for silence).
        """

    @abstractmethod
    async def chat_complete(self, prompt: str) -> str:
        """Return the model's reply to a single user prompt."""

    @abstractmethod
    async def synthesize_speech(self, text: str, voice: str) -> bytes:
        """Render *text* with *voice* and return the encoded audio bytes."""
