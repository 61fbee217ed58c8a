"""Process-wide directory of active rooms.

The registry is the only state shared between rooms. Its lock guards the
``room id -> Room`` map and nothing else: per-room work (joining,
broadcasting, drawing) always happens on the room's own worker, outside
this lock.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from .errors import RoomConflict, RoomNotFound
from .participant import Participant
from .room import Room
from .schemas import RoomSummary

logger = logging.getLogger(__name__)


class RoomRegistry:
    def __init__(self, queue_size: Optional[int] = None):
        self._rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()
        self._queue_size = queue_size

    async def create(self, room_id: str, creator: Participant) -> Room:
        """Register a new room with *creator* as its sole participant and host."""
        async with self._lock:
            if room_id in self._rooms:
                raise RoomConflict()
            room = Room(room_id, creator, registry=self, queue_size=self._queue_size)
            self._rooms[room_id] = room
        room.start_worker()
        return room

    async def lookup(self, room_id: str) -> Room:
        async with self._lock:
            room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFound()
        return room

    async def remove(self, room_id: str) -> None:
        """Forget *room_id*; missing ids are ignored."""
        async with self._lock:
            if self._rooms.pop(room_id, None) is not None:
                logger.info("Room %s deregistered (%d active)", room_id, len(self._rooms))

    async def join(self, room_id: str, participant: Participant) -> Room:
        """Look up *room_id* and attach *participant* through the room's worker."""
        room = await self.lookup(room_id)
        await room.join(participant)
        return room

    def summaries(self) -> List[RoomSummary]:
        return [room.summary() for room in list(self._rooms.values()) if not room.closed]

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    async def shutdown(self) -> None:
        """Stop every room worker; used when the process exits."""
        async with self._lock:
            rooms = list(self._rooms.values())
            self._rooms.clear()
        for room in rooms:
            await room.stop()
        if rooms:
            logger.info("Stopped %d active rooms", len(rooms))


__all__ = ["RoomRegistry"]
