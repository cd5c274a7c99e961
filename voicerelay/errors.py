"""
voicerelay/errors.py
=====================
Exception Hierarchy — VoiceRelay

    RelayError
    ├── ValidationError      400, message shown to the caller
    ├── ProviderError        500, message hidden from the caller
    │   ├── TranscriptionError
    │   ├── TranslationError
    │   └── SynthesisError
    └── InternalError        500, message hidden from the caller

HTTP mapping lives in voicerelay/api/error_handlers.py.
"""

GENERIC_FAILURE_MESSAGE = "Failed to interpret."
MISSING_AUDIO_MESSAGE = "No audio file uploaded."
INVALID_REQUEST_MESSAGE = "Invalid request."


class RelayError(Exception):
    """Base class for all VoiceRelay errors."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def public_message(self) -> str:
        """Text that may be returned to the HTTP caller."""
        return GENERIC_FAILURE_MESSAGE


class ValidationError(RelayError):
    """Raised when a request is missing fields or carries invalid values."""

    status_code = 400

    @property
    def public_message(self) -> str:
        return self.message


class ProviderError(RelayError):
    """Raised when a capability provider call fails or times out."""

    stage: str = "provider"

    def __init__(self, message: str):
        super().__init__(f"{self.stage} failed: {message}")


class TranscriptionError(ProviderError):
    stage = "transcription"


class TranslationError(ProviderError):
    stage = "translation"


class SynthesisError(ProviderError):
    stage = "synthesis"


class InternalError(RelayError):
    """Raised for unexpected failures inside the service."""
