"""
voicerelay/relay/session.py
============================
Session Relay — VoiceRelay

Responsibility:
    - Define the two participant slots (A, B) of the single session
    - Hold one FIFO delivery queue per slot
    - Enqueue translated utterances for a recipient slot
    - Hand out the oldest pending utterance for a polling slot, or EMPTY

Concurrency:
    All requests run on one asyncio event loop. enqueue() and dequeue()
    contain no await, so each executes atomically with respect to other
    requests; no lock is needed.

Ordering:
    Retrieval follows insertion order. Utterances are inserted when their
    ingestion pipeline finishes, so two submissions from the same sender
    are delivered in completion order, not arrival order.

This module does NOT:
    - Check that the recipient differs from the sender (the pipeline always
      targets sender.opposite())
    - Bound queue length or persist anything
"""

import base64
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any

from voicerelay.errors import ValidationError

logger = logging.getLogger("voicerelay.relay.session")


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class ParticipantSlot(str, Enum):
    """One of the two ends of the session."""

    A = "A"
    B = "B"

    @classmethod
    def parse(cls, value: str | None, message: str = "Invalid mode value.") -> "ParticipantSlot":
        """
        Convert a raw request value into a slot.

        Matching is exact and case-sensitive: only "A" and "B" are accepted.

        Raises:
            ValidationError: If the value is not a slot name.
        """
        if value == "A":
            return cls.A
        if value == "B":
            return cls.B
        raise ValidationError(message)

    def opposite(self) -> "ParticipantSlot":
        if self is ParticipantSlot.A:
            return ParticipantSlot.B
        if self is ParticipantSlot.B:
            return ParticipantSlot.A
        raise AssertionError(f"unhandled slot {self!r}")


@dataclass(frozen=True)
class Utterance:
    """A translated, synthesised message waiting for its recipient."""

    audio: bytes
    text: str
    timestamp: int  # epoch milliseconds, observability only

    def to_dict(self) -> dict[str, Any]:
        return {
            "audioBase64": base64.b64encode(self.audio).decode("ascii"),
            "text": self.text,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class EmptyPoll:
    """Returned by dequeue() when nothing is pending for the slot."""

    audio: None = None
    text: None = None
    timestamp: None = None

    def to_dict(self) -> dict[str, Any]:
        return {"audioBase64": None, "text": None, "timestamp": None}


EMPTY = EmptyPoll()


# ---------------------------------------------------------------------------
# Relay
# ---------------------------------------------------------------------------


class SessionRelay:
    """Owns the delivery queues of one two-party session."""

    def __init__(self) -> None:
        self._queues: dict[ParticipantSlot, deque[Utterance]] = {
            ParticipantSlot.A: deque(),
            ParticipantSlot.B: deque(),
        }

    def enqueue(self, recipient: ParticipantSlot, utterance: Utterance) -> None:
        """Append *utterance* to the recipient's queue."""
        queue = self._queues[recipient]
        queue.append(utterance)
        logger.info(
            "Utterance queued for %s (pending: %d).", recipient.value, len(queue),
        )

    def dequeue(self, slot: ParticipantSlot) -> Utterance | EmptyPoll:
        """Remove and return the oldest utterance for *slot*, or EMPTY."""
        queue = self._queues[slot]
        if not queue:
            logger.debug("Poll for %s — queue empty.", slot.value)
            return EMPTY

        utterance = queue.popleft()
        logger.info(
            "Utterance delivered to %s (remaining: %d).", slot.value, len(queue),
        )
        return utterance

    def pending(self, slot: ParticipantSlot) -> int:
        """Number of utterances waiting for *slot*."""
        return len(self._queues[slot])
