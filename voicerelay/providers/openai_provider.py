"""
voicerelay/providers/openai_provider.py
========================================
OpenAI Capability Provider — VoiceRelay

Responsibility:
    - Transcribe audio with OpenAI Whisper (model: whisper-1 by default)
    - Translate text through a single chat completion (model: gpt-4)
    - Synthesise speech with OpenAI TTS (model: tts-1)

The AsyncOpenAI client is created on first use, so the service can start
without a credential; calls made without OPENAI_API_KEY raise RuntimeError.

This module does NOT:
    - Retry failed calls
    - Apply timeouts (the pipeline wraps every call in its own deadline)
    - Build translation prompts or choose voices
"""

import logging
from pathlib import Path

from openai import AsyncOpenAI

from voicerelay.config import Settings
from voicerelay.providers.base import CapabilityProvider

logger = logging.getLogger("voicerelay.providers.openai")


class OpenAIProvider(CapabilityProvider):
    """CapabilityProvider backed by the OpenAI API."""

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        self._settings = settings
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._settings.openai_api_key:
                raise RuntimeError("OPENAI_API_KEY environment variable is not set.")
            self._client = AsyncOpenAI(api_key=self._settings.openai_api_key)
        return self._client

    # ------------------------------------------------------------------
    # Speech-to-text
    # ------------------------------------------------------------------

    async def transcribe(self, audio_path: Path, language_hint: str) -> str:
        response = await self.client.audio.transcriptions.create(
            model=self._settings.transcription_model,
            file=audio_path,
            language=language_hint,
        )
        return response.text

    # ------------------------------------------------------------------
    # Text generation
    # ------------------------------------------------------------------

    async def chat_complete(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self._settings.translation_model,
            messages=[{"role": "user", "content": prompt}],
        )
        content = response.choices[0].message.content
        if content is None:
            raise RuntimeError("Chat completion returned no content.")
        return content

    # ------------------------------------------------------------------
    # Text-to-speech
    # ------------------------------------------------------------------

    async def synthesize_speech(self, text: str, voice: str) -> bytes:
        response = await self.client.audio.speech.create(
            model=self._settings.speech_model,
            voice=voice,
            input=text,
        )
        audio = response.content
        logger.debug("Synthesised %.2f KB of audio (voice: %s).", len(audio) / 1024, voice)
        return audio
