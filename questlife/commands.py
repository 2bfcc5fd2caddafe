from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from questlife.errors import InvalidCommandError
from questlife.events import make_event, make_log_entry
from questlife.mechanics import date_key
from questlife.models import EventType, GameEvent, GameState, QuestType


class CommandKind(str, Enum):
    ADD_QUEST = "ADD_QUEST"
    EDIT_QUEST = "EDIT_QUEST"
    DELETE_QUEST = "DELETE_QUEST"
    RESTORE_QUEST = "RESTORE_QUEST"
    PERMANENT_DELETE_QUEST = "PERMANENT_DELETE_QUEST"
    TOGGLE_QUEST = "TOGGLE_QUEST"
    TOGGLE_QUEST_STEP = "TOGGLE_QUEST_STEP"
    UPDATE_QUEST_PROGRESS = "UPDATE_QUEST_PROGRESS"
    UPDATE_FOCUS_TIMER = "UPDATE_FOCUS_TIMER"
    ACCEPT_SIDE_QUEST = "ACCEPT_SIDE_QUEST"
    REROLL_NOTICE_BOARD_SLOT = "REROLL_NOTICE_BOARD_SLOT"
    SAVE_SIDE_QUEST_TEMPLATE = "SAVE_SIDE_QUEST_TEMPLATE"
    DELETE_SIDE_QUEST_TEMPLATE = "DELETE_SIDE_QUEST_TEMPLATE"
    SAVE_EVENT_TEMPLATE = "SAVE_EVENT_TEMPLATE"
    DELETE_EVENT_TEMPLATE = "DELETE_EVENT_TEMPLATE"
    SAVE_FOCUS_TEMPLATE = "SAVE_FOCUS_TEMPLATE"
    DELETE_FOCUS_TEMPLATE = "DELETE_FOCUS_TEMPLATE"
    COMPLETE_ONBOARDING = "COMPLETE_ONBOARDING"
    UPDATE_PROFILE = "UPDATE_PROFILE"
    UPDATE_SETTINGS = "UPDATE_SETTINGS"
    DAILY_RESET = "DAILY_RESET"
    REFRESH_NOTICE_BOARD = "REFRESH_NOTICE_BOARD"
    TEST_ADD_XP = "TEST_ADD_XP"
    TEST_ADD_GOLD = "TEST_ADD_GOLD"
    TEST_ADD_STREAK = "TEST_ADD_STREAK"
    TEST_FAIL_ALL_QUESTS = "TEST_FAIL_ALL_QUESTS"
    FULL_RESET = "FULL_RESET"
    IMPORT_DATA = "IMPORT_DATA"
    INIT_SAVE = "INIT_SAVE"
    ACKNOWLEDGE_EVENTS = "ACKNOWLEDGE_EVENTS"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    payload: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, CommandKind):
            try:
                object.__setattr__(self, "kind", CommandKind(self.kind))
            except ValueError:
                raise InvalidCommandError(f"Unknown command: {self.kind!r}") from None

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict) -> Command:
        if not isinstance(data, dict) or "kind" not in data:
            raise InvalidCommandError(f"Not a command descriptor: {data!r}")
        return cls(data["kind"], data.get("payload"))


@dataclass
class Transition:
    state: GameState
    events: list[GameEvent] = field(default_factory=list)
    rejected: str | None = None

    @property
    def accepted(self) -> bool:
        return self.rejected is None


class CommandRejected(Exception):
    """A business rule refused the command; the draft state is discarded."""


@dataclass
class Turn:
    now: datetime
    rng: random.Random
    events: list[GameEvent] = field(default_factory=list)

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def today_key(self) -> str:
        return date_key(self.now.date())

    def emit(
        self,
        event_type: EventType,
        message: str,
        payload: dict[str, Any] | None = None,
        quest_type: QuestType | str | None = None,
        undo: Command | None = None,
    ) -> GameEvent:
        if undo is not None:
            payload = {**(payload or {}), "undo": undo.to_dict()}
        event = make_event(self.rng, event_type, message, payload, quest_type)
        self.events.append(event)
        return event

    def log(self, state: GameState, action: str, details: str) -> None:
        state.activity_log.append(make_log_entry(self.rng, self.now, action, details))
