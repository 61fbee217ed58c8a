from __future__ import annotations

import logging
from typing import Any, Protocol

from pydantic import BaseModel

from .schemas import dump_message

logger = logging.getLogger(__name__)


class MessageSink(Protocol):
    """Send-only outbound channel of one connection (a ``WebSocket`` fits)."""

    async def send_json(self, data: Any) -> None: ...


class Participant:
    """One connected client attached to a room.

    Identity is the object itself: two participants may share a display
    name, so rooms keep and compare the handles, never the names.
    """

    __slots__ = ("name", "avatar", "sink")

    def __init__(self, name: str, sink: MessageSink, avatar: str = ""):
        self.name = name
        self.avatar = avatar
        self.sink = sink

    def __repr__(self) -> str:
        return f"Participant(name={self.name!r})"


async def deliver(participant: Participant, message: BaseModel) -> bool:
    """Best-effort write of *message* to *participant*; ``False`` on failure.

    A broken sink never raises here so a broadcast keeps going for the
    remaining participants.
    """
    try:
        await participant.sink.send_json(dump_message(message))
    except Exception as exc:
        logger.warning("Delivery of %s to %r failed: %s", type(message).__name__, participant, exc)
        return False
    return True


__all__ = ["MessageSink", "Participant", "deliver"]
