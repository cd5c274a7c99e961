# voicerelay/providers/__init__.py
# =================================
# Capability Providers — VoiceRelay
#
# External speech / language backends behind one interface:
#   transcribe(audio_path, language_hint) → str
#   chat_complete(prompt)                 → str
#   synthesize_speech(text, voice)        → bytes

from voicerelay.providers.base import CapabilityProvider  # noqa: F401
from voicerelay.providers.openai_provider import OpenAIProvider  # noqa: F401

__all__ = [
    "CapabilityProvider",
    "OpenAIProvider",
]
