"""
voicerelay/languages.py
========================
Supported Languages — VoiceRelay

Responsibility:
    - Define the fixed set of supported language codes
    - Map each code to the display name used in translation prompts
    - Derive the transcription language hint (primary subtag)

This module does NOT:
    - Select synthesis voices (see voice_resolver.py)
    - Detect languages from audio
"""

# ---------------------------------------------------------------------------
# Supported language codes → display names
# ---------------------------------------------------------------------------

LANGUAGES: dict[str, str] = {
    "en-US": "English",
    "fr-FR": "French",
    "tr-TR": "Turkish",
    "es-ES": "Spanish",
    "pl-PL": "Polish",
    "it-IT": "Italian",
    "pt-PT": "Portuguese",
    "cmn-CN": "Chinese",
    "ar-XA": "Arabic",
    "de-DE": "German",
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def is_supported(code: str) -> bool:
    """Return True if *code* is one of the supported language codes."""
    return code in LANGUAGES


def display_name(code: str) -> str:
    """
    Return the human-readable name for a supported code ("fr-FR" → "French").

    Raises:
        KeyError: If the code is not supported.
    """
    return LANGUAGES[code]


def primary_subtag(code: str) -> str:
    """Return the part before the first hyphen ("en-US" → "en")."""
    return code.split("-", 1)[0]
