"""Pydantic data schemas used across the backend service.

Every websocket frame is an envelope ``{"type": <tag>, "payload": ...}``.
Outbound envelopes are modelled one class per tag so each carries its own
payload type; inbound frames are decoded by tag first and only then
validated against the model for that tag.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import ERROR, MATCH_RESULT, PARTICIPANT_LIST_UPDATE, START_GAME

# -----------------------------
# Outbound (server -> client)
# -----------------------------


class ParticipantView(BaseModel):
    """Public view of one participant inside a participant-list-update."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    avatar: str = ""
    is_host: bool = Field(default=False, alias="isHost")


class ParticipantListUpdate(BaseModel):
    type: Literal["participant-list-update"] = PARTICIPANT_LIST_UPDATE
    payload: List[ParticipantView]


class MatchResult(BaseModel):
    """Private draw result: the display name the recipient has to gift."""

    type: Literal["match-result"] = MATCH_RESULT
    payload: str


class ErrorMessage(BaseModel):
    type: Literal["error"] = ERROR
    payload: str


# -----------------------------
# Inbound (client -> server)
# -----------------------------


class StartGame(BaseModel):
    type: Literal["start-game"] = START_GAME


class Envelope(BaseModel):
    """Loose first pass over an inbound frame; only the tag is trusted."""

    type: str
    payload: Any = None


INBOUND_MESSAGES: Dict[str, Type[BaseModel]] = {
    START_GAME: StartGame,
}


def decode_client_message(raw: str) -> Optional[BaseModel]:
    """Return the typed inbound message for *raw* or ``None`` if unusable.

    Malformed JSON, a missing tag, an unknown tag and a payload that does
    not fit the tag's model are all treated the same: the frame is dropped.
    """
    try:
        envelope = Envelope.model_validate_json(raw)
    except ValidationError:
        return None
    model = INBOUND_MESSAGES.get(envelope.type)
    if model is None:
        return None
    try:
        return model.model_validate(envelope.model_dump(exclude_none=True))
    except ValidationError:
        return None


def dump_message(message: BaseModel) -> dict:
    """Wire form of an outbound envelope (aliases such as ``isHost`` applied)."""
    return message.model_dump(by_alias=True)


# -----------------------------
# REST responses
# -----------------------------


class RoomSummary(BaseModel):
    room_id: str
    participant_count: int
    started: bool


__all__ = [
    "ParticipantView",
    "ParticipantListUpdate",
    "MatchResult",
    "ErrorMessage",
    "StartGame",
    "Envelope",
    "INBOUND_MESSAGES",
    "decode_client_message",
    "dump_message",
    "RoomSummary",
]
