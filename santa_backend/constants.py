MIN_PARTICIPANTS = 2

# Wire tags for the websocket envelope ``{"type": ..., "payload": ...}``.
PARTICIPANT_LIST_UPDATE = "participant-list-update"
MATCH_RESULT = "match-result"
ERROR = "error"
START_GAME = "start-game"

# Error texts sent to the offending connection before it is closed.
ROOM_EXISTS_MESSAGE = "Room already exists"
ROOM_MISSING_MESSAGE = "Room does not exist"
GAME_STARTED_MESSAGE = "Game already started"

__all__ = [
    "MIN_PARTICIPANTS",
    "PARTICIPANT_LIST_UPDATE",
    "MATCH_RESULT",
    "ERROR",
    "START_GAME",
    "ROOM_EXISTS_MESSAGE",
    "ROOM_MISSING_MESSAGE",
    "GAME_STARTED_MESSAGE",
]
