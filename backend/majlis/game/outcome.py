from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import Player, Room


logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    ok: bool
    error: str | None = None
    player: Player | None = None

    def __bool__(self) -> bool:
        return self.ok


def accept(player: Player | None = None) -> Outcome:
    return Outcome(ok=True, player=player)


def reject(room: Room | None, intent: str, reason: str) -> Outcome:
    """A refused intent. Nothing in the room may change on this path."""
    logger.info(
        "[reject] room=%s intent=%s reason=%s status=%s",
        room.id if room else None,
        intent,
        reason,
        room.status if room else None,
    )
    return Outcome(ok=False, error=reason)
