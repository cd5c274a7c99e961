"""
voicerelay/api/app.py
======================
Application factory — VoiceRelay

create_app() wires one SessionRelay, one capability provider and the
ingestion pipeline into a FastAPI application. Each call builds an
independent session, so tests and embedders never share queue state.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voicerelay import __version__
from voicerelay.api.error_handlers import register_error_handlers
from voicerelay.api.routes import router
from voicerelay.config import Settings, load_settings
from voicerelay.pipeline import InterpretationPipeline
from voicerelay.providers.base import CapabilityProvider
from voicerelay.providers.openai_provider import OpenAIProvider
from voicerelay.relay.session import SessionRelay

logger = logging.getLogger("voicerelay.api.app")


def create_app(
    settings: Settings | None = None,
    provider: CapabilityProvider | None = None,
    relay: SessionRelay | None = None,
) -> FastAPI:
    """
    Build the VoiceRelay application.

    Args:
        settings: Service settings; read from the environment when omitted.
        provider: Capability provider; OpenAIProvider when omitted.
        relay: Session relay; a fresh, empty one when omitted.
    """
    settings = settings or load_settings()

    if provider is None:
        if not settings.openai_api_key:
            logger.warning(
                "OPENAI_API_KEY not set — every /interpret call will fail until it is."
            )
        provider = OpenAIProvider(settings)

    relay = relay or SessionRelay()

    app = FastAPI(
        title="VoiceRelay",
        description="Two-party speech-to-speech interpretation relay.",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(router)

    app.state.settings = settings
    app.state.relay = relay
    app.state.pipeline = InterpretationPipeline(provider, relay, settings)

    return app
