# voicerelay/relay/__init__.py
# =============================
# Session Relay Layer — VoiceRelay
#
# Two participant slots (A, B), one FIFO delivery queue each.
# A submission from one slot is always delivered to the other.
#
# Public API:
#   SessionRelay.enqueue(recipient, utterance)
#   SessionRelay.dequeue(slot) → Utterance | EMPTY

from voicerelay.relay.session import (  # noqa: F401
    EMPTY,
    EmptyPoll,
    ParticipantSlot,
    SessionRelay,
    Utterance,
)

__all__ = [
    "EMPTY",
    "EmptyPoll",
    "ParticipantSlot",
    "SessionRelay",
    "Utterance",
]
