from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Request

from ..constants import ROOM_MISSING_MESSAGE
from ..registry import RoomRegistry
from ..schemas import RoomSummary

router = APIRouter(prefix="", tags=["rooms"])


@router.get("/rooms", response_model=List[RoomSummary])
async def list_rooms(request: Request):
    registry: RoomRegistry = request.app.state.registry
    return registry.summaries()


@router.get("/rooms/{room_id}", response_model=RoomSummary)
async def get_room(room_id: str, request: Request):
    """Lobby status of an active room; membership and draw results stay private."""
    registry: RoomRegistry = request.app.state.registry
    room = registry.get(room_id)
    if room is None or room.closed:
        raise HTTPException(status_code=404, detail=ROOM_MISSING_MESSAGE)
    return room.summary()
