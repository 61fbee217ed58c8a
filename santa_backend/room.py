from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

from pydantic import BaseModel

from .constants import MIN_PARTICIPANTS
from .draw import perform_draw
from .errors import GameAlreadyStarted, RoomNotFound
from .participant import Participant, deliver
from .schemas import ParticipantListUpdate, ParticipantView, RoomSummary
from .settings import settings

if TYPE_CHECKING:
    from .registry import RoomRegistry

logger = logging.getLogger(__name__)

# NOTE: connection tasks never touch ``participants``, ``host`` or
# ``started`` directly. They enqueue commands and the room's own worker
# (``Room.run``) applies them one at a time.


def _resolve(reply: asyncio.Future, result: object) -> None:
    if not reply.done():
        reply.set_result(result)


@dataclass
class _Join:
    participant: Participant
    reply: asyncio.Future


@dataclass
class _Leave:
    participant: Participant
    reply: asyncio.Future


@dataclass
class _Start:
    requester: Participant
    reply: asyncio.Future


@dataclass
class _Broadcast:
    message: BaseModel


class Room:
    """Runtime state of one draw room plus the worker that serializes it.

    Lifecycle: *lobby* (``started`` false) -> *started* -> *closed*. A room
    is closed, and deregistered, the moment its last participant leaves.
    """

    def __init__(
        self,
        room_id: str,
        creator: Participant,
        registry: "RoomRegistry",
        queue_size: Optional[int] = None,
    ):
        self.room_id = room_id
        # Insertion ordered; values unused.
        self.participants: Dict[Participant, None] = {creator: None}
        self.host: Participant = creator
        self.started: bool = False
        self.closed: bool = False
        self._registry = registry
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size or settings.ROOM_QUEUE_SIZE)
        self._task: Optional[asyncio.Task] = None

    # ---------------------------------------------------------------------
    # Public API used by connection tasks
    # ---------------------------------------------------------------------

    def start_worker(self) -> None:
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self.run(), name=f"room:{self.room_id}")

    async def join(self, participant: Participant) -> None:
        """Attach *participant*; raises ``GameAlreadyStarted`` / ``RoomNotFound``."""
        reply = asyncio.get_running_loop().create_future()
        await self._submit(_Join(participant, reply))
        await reply

    async def leave(self, participant: Participant) -> None:
        """Detach *participant* and wait until the room has applied it.

        Leaving a closed room, or leaving twice, is a no-op.
        """
        reply = asyncio.get_running_loop().create_future()
        try:
            await self._submit(_Leave(participant, reply))
        except RoomNotFound:
            return
        await reply

    async def start(self, requester: Participant) -> bool:
        """Ask for the draw; ``True`` only if it actually ran."""
        reply = asyncio.get_running_loop().create_future()
        try:
            await self._submit(_Start(requester, reply))
        except RoomNotFound:
            return False
        return await reply

    async def broadcast(self, message: BaseModel) -> None:
        with suppress(RoomNotFound):
            await self._submit(_Broadcast(message))

    async def stop(self) -> None:
        """Cancel the worker without the usual teardown (process shutdown)."""
        self.closed = True
        self._drain()
        if self._task is not None:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task

    # -------------------- Read-only helpers -------------------- #

    def __len__(self) -> int:
        return len(self.participants)

    def __contains__(self, participant: object) -> bool:
        return participant in self.participants

    def participant_views(self) -> List[ParticipantView]:
        return [
            ParticipantView(name=p.name, avatar=p.avatar, is_host=p is self.host)
            for p in self.participants
        ]

    def summary(self) -> RoomSummary:
        return RoomSummary(room_id=self.room_id, participant_count=len(self.participants), started=self.started)

    # ---------------------------------------------------------------------
    # Event loop
    # ---------------------------------------------------------------------

    async def run(self) -> None:
        """Process commands for this room strictly one at a time until it closes."""
        logger.info("Room %s created by %r", self.room_id, self.host)
        await self._broadcast_participants()
        while not self.closed:
            command = await self._queue.get()
            try:
                await self._handle(command)
            except Exception as exc:
                logger.exception("Room %s failed to handle %s", self.room_id, type(command).__name__)
                reply = getattr(command, "reply", None)
                if reply is not None and not reply.done():
                    reply.set_exception(exc)
            finally:
                self._queue.task_done()
        logger.info("Room %s closed", self.room_id)

    async def _submit(self, command: object) -> None:
        if self.closed:
            raise RoomNotFound()
        await self._queue.put(command)
        if self.closed:
            # The worker exited while we were waiting for queue space.
            self._drain()

    def _drain(self) -> None:
        """Fail whatever is still queued once the room can no longer serve it."""
        while True:
            try:
                command = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._queue.task_done()
            if isinstance(command, _Join) and not command.reply.done():
                command.reply.set_exception(RoomNotFound())
            elif isinstance(command, _Start):
                _resolve(command.reply, False)
            elif isinstance(command, _Leave):
                _resolve(command.reply, None)

    async def _handle(self, command: object) -> None:
        if isinstance(command, _Join):
            await self._handle_join(command)
        elif isinstance(command, _Leave):
            await self._handle_leave(command.participant)
            _resolve(command.reply, None)
        elif isinstance(command, _Start):
            await self._handle_start(command)
        elif isinstance(command, _Broadcast):
            await self._broadcast(command.message)

    # -------------------- Transitions -------------------- #

    async def _handle_join(self, command: _Join) -> None:
        if command.reply.done():
            # Joiner went away before we got to it.
            return
        if self.started:
            command.reply.set_exception(GameAlreadyStarted())
            return
        self.participants[command.participant] = None
        command.reply.set_result(None)
        logger.info("%r joined room %s (%d participants)", command.participant, self.room_id, len(self.participants))
        await self._broadcast_participants()

    async def _handle_leave(self, participant: Participant) -> None:
        if participant not in self.participants:
            return
        del self.participants[participant]
        logger.info("%r left room %s", participant, self.room_id)

        if not self.participants:
            self.closed = True
            await self._registry.remove(self.room_id)
            self._drain()
            return

        if participant is self.host:
            # Any remaining participant will do; take the longest present.
            self.host = next(iter(self.participants))
            logger.info("Host of room %s handed to %r", self.room_id, self.host)
        await self._broadcast_participants()

    async def _handle_start(self, command: _Start) -> None:
        if command.requester is not self.host or self.started:
            logger.debug("Ignoring start request from %r in room %s", command.requester, self.room_id)
            _resolve(command.reply, False)
            return
        if len(self.participants) < MIN_PARTICIPANTS:
            logger.debug("Room %s has too few participants to draw", self.room_id)
            _resolve(command.reply, False)
            return
        self.started = True
        await perform_draw(self.room_id, self.participants)
        _resolve(command.reply, True)

    # -------------------- Broadcasting helpers -------------------- #

    async def _broadcast(self, message: BaseModel) -> None:
        for participant in list(self.participants):
            await deliver(participant, message)

    async def _broadcast_participants(self) -> None:
        await self._broadcast(ParticipantListUpdate(payload=self.participant_views()))


__all__ = ["Room"]
