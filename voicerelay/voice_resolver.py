"""
voicerelay/voice_resolver.py
=============================
Voice Resolver — VoiceRelay

Maps a target language code to a speech-synthesis voice. Total function:
any code without an entry (unknown, empty, or supported but unmapped)
resolves to DEFAULT_VOICE.
"""

DEFAULT_VOICE = "nova"

VOICES: dict[str, str] = {
    "en-US": "nova",
    "fr-FR": "onyx",
    "es-ES": "shimmer",
    "de-DE": "echo",
}


def resolve_voice(lang: str) -> str:
    return VOICES.get(lang, DEFAULT_VOICE)
