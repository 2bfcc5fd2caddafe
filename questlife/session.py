from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Any, Callable

from questlife import content, db, engine, rollover
from questlife.commands import Command, CommandKind, Transition
from questlife.errors import InvalidCommandError
from questlife.events import EventQueue, make_event
from questlife.models import EventType, GameEvent, GameState

logger = logging.getLogger(__name__)


class GameSession:
    """Caller-owned holder for one player's state.

    Applies commands through ``engine.dispatch``, keeps the pending event
    queue, and writes the state through ``saver`` when something changed.
    """

    def __init__(
        self,
        state: GameState | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
        saver: Callable[[GameState], Any] | None = None,
    ) -> None:
        self.clock = clock
        self.rng = rng or random.Random()
        self.saver = saver
        self.events = EventQueue()
        self.dirty = False
        if state is None:
            state = content.new_game(clock(), self.rng)
            welcome = content.narrative_line(
                content.load_content_pack(), "welcome", self.rng, "Welcome, Adventurer."
            )
            self.events.extend([make_event(self.rng, EventType.SYSTEM_MESSAGE, welcome)])
            self.dirty = True
        self.state = state

    @classmethod
    def from_save_slot(cls, **kwargs) -> GameSession:
        db.init_db()
        return cls(db.load_state(), saver=db.save_state, **kwargs)

    def dispatch(self, command: Command | CommandKind | str, payload: Any = None) -> Transition:
        if not isinstance(command, Command):
            command = Command(command, payload)
        if command.kind is CommandKind.ACKNOWLEDGE_EVENTS:
            self.events.acknowledge()
            return Transition(state=self.state)

        transition = engine.dispatch(self.state, command, now=self.clock(), rng=self.rng)
        if transition.accepted:
            self.state = transition.state
            self.events.extend(transition.events)
            self.dirty = True
        return transition

    def check_rollover(self) -> Transition | None:
        if not rollover.is_new_day(self.state, self.clock().date()):
            return None
        return self.dispatch(CommandKind.DAILY_RESET)

    def undo(self, event: GameEvent) -> Transition:
        descriptor = (event.payload or {}).get("undo")
        if descriptor is None:
            raise InvalidCommandError(f"Event {event.id} cannot be undone")
        return self.dispatch(Command.from_dict(descriptor))

    def pending_events(self) -> tuple[GameEvent, ...]:
        return self.events.pending()

    def save(self) -> bool:
        # Several commands in a row produce one write.
        if not self.dirty or self.saver is None:
            return False
        self.saver(self.state)
        self.dirty = False
        return True
