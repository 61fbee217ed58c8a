import asyncio
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from santa_backend.app import app
from santa_backend.participant import Participant
from santa_backend.registry import RoomRegistry


class RecordingSink:
    """Stand-in for a websocket that keeps every JSON payload it is sent."""

    def __init__(self, fail: bool = False):
        self.sent: List[Dict[str, Any]] = []
        self.fail = fail

    async def send_json(self, data: Any) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def of_type(self, tag: str) -> List[Dict[str, Any]]:
        return [m for m in self.sent if m["type"] == tag]


def make_participant(name: str, avatar: str = "", fail: bool = False) -> Participant:
    return Participant(name=name, avatar=avatar, sink=RecordingSink(fail=fail))


async def settle(room) -> None:
    """Wait until the room worker has processed everything queued so far."""
    await asyncio.sleep(0)
    await room._queue.join()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def registry(anyio_backend):
    reg = RoomRegistry(queue_size=8)
    yield reg
    await reg.shutdown()


@pytest.fixture()
def client():
    # One TestClient context keeps a single event loop for every connection.
    with TestClient(app) as test_client:
        yield test_client
