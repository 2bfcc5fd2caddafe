from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Any, Iterable

from questlife.mechanics import new_id
from questlife.models import ActivityLogEntry, EventType, GameEvent, QuestType

logger = logging.getLogger(__name__)


def make_event(
    rng: random.Random,
    event_type: EventType,
    message: str,
    payload: dict[str, Any] | None = None,
    quest_type: QuestType | str | None = None,
) -> GameEvent:
    return GameEvent(
        id=new_id("evt", rng),
        type=event_type,
        message=message,
        payload=payload,
        quest_type=quest_type,
    )


def make_log_entry(rng: random.Random, now: datetime, action: str, details: str) -> ActivityLogEntry:
    return ActivityLogEntry(
        id=new_id("log", rng),
        timestamp=now,
        formatted_date=now.strftime("%Y-%m-%d %H:%M:%S"),
        action=action,
        details=details,
    )


class EventQueue:
    """Notifications waiting for the observer.

    Events stay queued until the observer acknowledges them, so a skipped
    render never loses one.
    """

    def __init__(self) -> None:
        self._events: list[GameEvent] = []

    def extend(self, events: Iterable[GameEvent]) -> None:
        self._events.extend(events)

    def pending(self) -> tuple[GameEvent, ...]:
        return tuple(self._events)

    def acknowledge(self) -> int:
        count = len(self._events)
        self._events = []
        if count:
            logger.debug("Acknowledged %d events", count)
        return count

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(tuple(self._events))
