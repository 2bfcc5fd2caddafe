from __future__ import annotations

import logging
from typing import Iterable

from questlife.models import EventType, GameEvent

logger = logging.getLogger(__name__)

EVENT_TITLES = {
    EventType.LEVEL_UP: "Level Up",
    EventType.QUEST_COMPLETED: "Quest Complete",
    EventType.QUEST_ACCEPTED: "Quest Accepted",
    EventType.QUEST_REROLLED: "Quest Rerolled",
    EventType.SYSTEM_MESSAGE: "QuestLife",
    EventType.ACHIEVEMENT_UNLOCKED: "Achievement",
}

HIGH_PRIORITY = {EventType.LEVEL_UP, EventType.ACHIEVEMENT_UNLOCKED}


class Notifier:
    def send(self, title: str, body: str, priority: str = "normal") -> None:
        raise NotImplementedError

    def publish(self, events: Iterable[GameEvent]) -> int:
        sent = 0
        for event in events:
            priority = "high" if event.type in HIGH_PRIORITY else "normal"
            self.send(EVENT_TITLES.get(event.type, "QuestLife"), event.message, priority=priority)
            sent += 1
        return sent


class NoopNotifier(Notifier):
    def send(self, title: str, body: str, priority: str = "normal") -> None:
        return


class LogNotifier(Notifier):
    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def send(self, title: str, body: str, priority: str = "normal") -> None:
        level = logging.WARNING if priority == "high" else logging.INFO
        self.log.log(level, "%s: %s", title, body)
