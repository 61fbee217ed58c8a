"""Gift-exchange draw.

This module stays framework-agnostic: it only knows about
:class:`~santa_backend.participant.Participant` handles. The room event
loop calls :func:`perform_draw` while it holds the room's serialization
point, so the participant sequence cannot change underneath it.
"""
from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence, Tuple

from .constants import MIN_PARTICIPANTS
from .participant import Participant, deliver
from .schemas import MatchResult

logger = logging.getLogger(__name__)

Pairing = Tuple[Participant, Participant]


def assign_receivers(
    participants: Iterable[Participant], rng: Optional[random.Random] = None
) -> List[Pairing]:
    """Return ``(giver, receiver)`` pairs forming a single cycle.

    The participants are shuffled (Fisher-Yates, freshly seeded per draw
    unless *rng* is given) and every position gives to the next one,
    wrapping around at the end. With at least two distinct participants
    nobody draws themselves and everybody gives and receives exactly once.
    """
    order = list(participants)
    if len(order) < MIN_PARTICIPANTS:
        raise ValueError(f"a draw needs at least {MIN_PARTICIPANTS} participants, got {len(order)}")
    (rng or random.Random()).shuffle(order)
    return [(giver, order[(i + 1) % len(order)]) for i, giver in enumerate(order)]


async def deliver_matches(pairs: Sequence[Pairing]) -> int:
    """Privately tell each giver their receiver's name; return successful sends."""
    delivered = 0
    for giver, receiver in pairs:
        if await deliver(giver, MatchResult(payload=receiver.name)):
            delivered += 1
    return delivered


async def perform_draw(room_id: str, participants: Iterable[Participant]) -> None:
    pairs = assign_receivers(participants)
    delivered = await deliver_matches(pairs)
    # Only counts are logged; the assignment itself must not be recoverable.
    logger.info("Draw performed in room %s: %d participants, %d results delivered", room_id, len(pairs), delivered)


__all__ = ["Pairing", "assign_receivers", "deliver_matches", "perform_draw"]
