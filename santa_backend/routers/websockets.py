from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from ..errors import RoomError
from ..participant import Participant
from ..registry import RoomRegistry
from ..room import Room
from ..schemas import ErrorMessage, StartGame, decode_client_message, dump_message

router = APIRouter(prefix="", tags=["ws"])

logger = logging.getLogger(__name__)


async def attach(registry: RoomRegistry, room_id: str, action: str, participant: Participant) -> Room:
    if action == "create":
        return await registry.create(room_id, participant)
    return await registry.join(room_id, participant)


async def handle_client_message(room: Room, participant: Participant, raw: str) -> None:
    message = decode_client_message(raw)
    if message is None:
        logger.debug("Ignoring unusable frame from %r in room %s", participant, room.room_id)
        return
    if isinstance(message, StartGame):
        # Non-host requests and unmet preconditions are silently ignored.
        await room.start(participant)


async def reject(ws: WebSocket, detail: str) -> None:
    """Send one error envelope and close; a client that already left is fine."""
    try:
        await ws.send_json(dump_message(ErrorMessage(payload=detail)))
        await ws.close()
    except Exception as exc:
        logger.debug("Could not deliver rejection \"%s\": %s", detail, exc)


@router.websocket("/ws")
async def room_endpoint(
    ws: WebSocket,
    room_id: str = Query(..., alias="room", min_length=1),
    name: str = Query(..., min_length=1),
    avatar: str = Query(default=""),
    action: Literal["create", "join"] = Query(...),
):
    registry: RoomRegistry = ws.app.state.registry
    await ws.accept()
    participant = Participant(name=name, avatar=avatar, sink=ws)

    try:
        room = await attach(registry, room_id, action, participant)
    except RoomError as exc:
        logger.info("Rejected %s of room %s by %r: %s", action, room_id, participant, exc.detail)
        await reject(ws, exc.detail)
        return

    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                logger.debug("Ignoring binary frame from %r in room %s", participant, room.room_id)
                continue
            await handle_client_message(room, participant, raw)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WebSocket error for %r in room %s", participant, room.room_id)
    finally:
        await room.leave(participant)
