import asyncio

import pytest

from conftest import make_participant, settle
from santa_backend.errors import GameAlreadyStarted, RoomNotFound
from santa_backend.schemas import ErrorMessage

pytestmark = pytest.mark.anyio


def _last_list(participant):
    return participant.sink.of_type("participant-list-update")[-1]["payload"]


async def _room_with(registry, *names):
    people = [make_participant(name) for name in names]
    room = await registry.create("X42", people[0])
    for person in people[1:]:
        await room.join(person)
    await settle(room)
    return room, people


async def test_join_broadcasts_membership_to_everyone(registry):
    room, (alice, bob) = await _room_with(registry, "Alice", "Bob")

    expected = [
        {"name": "Alice", "avatar": "", "isHost": True},
        {"name": "Bob", "avatar": "", "isHost": False},
    ]
    assert _last_list(alice) == expected
    assert _last_list(bob) == expected
    assert len(room) == 2


async def test_every_update_has_exactly_one_host(registry):
    room, people = await _room_with(registry, "Alice", "Bob", "Carol", "Dan")
    await room.leave(people[0])
    await room.leave(people[2])
    await settle(room)

    for person in people:
        for update in person.sink.of_type("participant-list-update"):
            assert sum(entry["isHost"] for entry in update["payload"]) == 1


async def test_host_departure_hands_off_to_remaining_participant(registry):
    room, (alice, bob, carol) = await _room_with(registry, "Alice", "Bob", "Carol")

    await room.leave(alice)

    assert room.host in (bob, carol)
    assert alice not in room
    for person in (bob, carol):
        update = _last_list(person)
        assert [entry["name"] for entry in update if entry["isHost"]] == [room.host.name]
        assert "Alice" not in [entry["name"] for entry in update]


async def test_non_host_leave_keeps_host(registry):
    room, (alice, bob, carol) = await _room_with(registry, "Alice", "Bob", "Carol")

    await room.leave(bob)

    assert room.host is alice
    assert _last_list(carol) == [
        {"name": "Alice", "avatar": "", "isHost": True},
        {"name": "Carol", "avatar": "", "isHost": False},
    ]


async def test_leaving_twice_is_harmless(registry):
    room, (alice, bob) = await _room_with(registry, "Alice", "Bob")
    await room.leave(bob)
    sent_before = len(alice.sink.sent)

    await room.leave(bob)

    assert list(room.participants) == [alice]
    assert len(alice.sink.sent) == sent_before


async def test_two_person_draw_forms_mutual_pair(registry):
    room, (alice, bob) = await _room_with(registry, "Alice", "Bob")

    assert await room.start(alice) is True

    assert room.started
    assert alice.sink.of_type("match-result") == [{"type": "match-result", "payload": "Bob"}]
    assert bob.sink.of_type("match-result") == [{"type": "match-result", "payload": "Alice"}]


async def test_lone_host_start_is_silent_noop(registry):
    room, (alice,) = await _room_with(registry, "Alice")

    assert await room.start(alice) is False

    assert not room.started
    assert alice.sink.of_type("match-result") == []
    assert alice.sink.of_type("error") == []


async def test_non_host_cannot_start(registry):
    room, (alice, bob, carol) = await _room_with(registry, "Alice", "Bob", "Carol")

    assert await room.start(bob) is False

    assert not room.started
    assert all(p.sink.of_type("match-result") == [] for p in (alice, bob, carol))


async def test_draw_happens_once(registry):
    room, people = await _room_with(registry, "Alice", "Bob", "Carol")

    assert await room.start(people[0]) is True
    assert await room.start(people[0]) is False

    assert room.started
    for person in people:
        results = person.sink.of_type("match-result")
        assert len(results) == 1
        assert results[0]["payload"] != person.name


async def test_started_room_rejects_join_and_keeps_members(registry):
    room, (alice, bob) = await _room_with(registry, "Alice", "Bob")
    await room.start(alice)
    carol = make_participant("Carol")

    with pytest.raises(GameAlreadyStarted):
        await room.join(carol)

    assert list(room.participants) == [alice, bob]
    assert carol.sink.sent == []


async def test_started_flag_survives_departures(registry):
    room, (alice, bob, carol) = await _room_with(registry, "Alice", "Bob", "Carol")
    await room.start(alice)

    await room.leave(alice)

    assert room.started
    assert room.host in (bob, carol)


async def test_privacy_of_results(registry):
    room, people = await _room_with(registry, "Alice", "Bob", "Carol", "Dan", "Eve")
    await room.start(people[0])

    for person in people:
        seen = [m["payload"] for m in person.sink.sent if m["type"] == "match-result"]
        assert len(seen) == 1
    receivers = sorted(p.sink.of_type("match-result")[0]["payload"] for p in people)
    assert receivers == sorted(p.name for p in people)


async def test_broadcast_survives_broken_sink(registry):
    room, (alice, bob) = await _room_with(registry, "Alice", "Bob")
    broken = make_participant("Mallory", fail=True)
    await room.join(broken)

    await room.broadcast(ErrorMessage(payload="hello"))
    await settle(room)

    assert alice.sink.of_type("error") == [{"type": "error", "payload": "hello"}]
    assert bob.sink.of_type("error") == [{"type": "error", "payload": "hello"}]


async def test_join_after_close_reports_missing_room(registry):
    room, (alice,) = await _room_with(registry, "Alice")
    await room.leave(alice)

    with pytest.raises(RoomNotFound):
        await room.join(make_participant("Bob"))
    assert await room.start(alice) is False


async def test_concurrent_start_and_leave_are_serialized(registry):
    room, (alice, bob, carol) = await _room_with(registry, "Alice", "Bob", "Carol")

    started, _ = await asyncio.gather(room.start(alice), room.leave(carol))

    # The start was queued first, so Carol was still in the draw.
    assert started is True
    assert len(carol.sink.of_type("match-result")) == 1
    assert carol not in room
    names = {p.sink.of_type("match-result")[0]["payload"] for p in (alice, bob, carol)}
    assert names == {"Alice", "Bob", "Carol"}
