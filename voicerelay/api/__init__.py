# voicerelay/api/__init__.py
# ===========================
# API Layer — VoiceRelay
#
#   POST /interpret       multipart: audio, sourceLang, targetLang, mode
#   GET  /stream/{mode}   poll the next translated utterance for A or B
#   GET  /health          queue depths
#   GET  /                liveness
#
# Public API:
#   create_app(settings, provider, relay) → FastAPI

from voicerelay.api.app import create_app  # noqa: F401

__all__ = ["create_app"]
