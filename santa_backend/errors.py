"""Room lifecycle failures surfaced to a single connection.

Each error carries the human readable ``detail`` that the websocket
handler forwards verbatim inside an ``error`` envelope before closing the
offending connection. None of them mutate room state.
"""
from __future__ import annotations

from .constants import GAME_STARTED_MESSAGE, ROOM_EXISTS_MESSAGE, ROOM_MISSING_MESSAGE


class RoomError(Exception):
    """Base class for failures attaching a connection to a room."""

    default_detail = "Room error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class RoomConflict(RoomError):
    """``create`` was requested for an identifier that is already active."""

    default_detail = ROOM_EXISTS_MESSAGE


class RoomNotFound(RoomError):
    """``join`` targeted an identifier with no active room (or one closing)."""

    default_detail = ROOM_MISSING_MESSAGE


class GameAlreadyStarted(RoomError):
    default_detail = GAME_STARTED_MESSAGE


__all__ = ["RoomError", "RoomConflict", "RoomNotFound", "GameAlreadyStarted"]
