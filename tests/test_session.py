from __future__ import annotations

import random
import unittest
from datetime import datetime, timedelta
from unittest.mock import Mock

from questlife.commands import CommandKind
from questlife.errors import InvalidCommandError
from questlife.models import EventType, GameState, SideQuest
from questlife.session import GameSession

NOW = datetime(2026, 3, 4, 9, 30)


def make_session(state: GameState | None = None, **kwargs) -> GameSession:
    if state is None:
        state = GameState(
            last_rollover_date="2026-03-04",
            quests=[SideQuest(id="sq-1", title="Read 5 pages", xp_reward=10, gold_reward=5, qp_reward=1)],
        )
    kwargs.setdefault("clock", lambda: NOW)
    return GameSession(state, rng=random.Random(3), **kwargs)


class EventQueueTests(unittest.TestCase):
    def test_events_accumulate_until_acknowledged(self) -> None:
        session = make_session()
        session.dispatch(CommandKind.TEST_ADD_GOLD, 10)
        session.dispatch(CommandKind.TEST_ADD_GOLD, 5)
        self.assertEqual(len(session.pending_events()), 2)

        state_before = session.state
        session.dispatch(CommandKind.ACKNOWLEDGE_EVENTS)
        self.assertEqual(session.pending_events(), ())
        self.assertIs(session.state, state_before)

    def test_rejected_command_adds_nothing(self) -> None:
        session = make_session()
        transition = session.dispatch(CommandKind.REROLL_NOTICE_BOARD_SLOT, "missing")

        self.assertFalse(transition.accepted)
        self.assertEqual(session.pending_events(), ())
        self.assertFalse(session.dirty)

    def test_fresh_session_greets_the_player(self) -> None:
        session = GameSession(clock=lambda: NOW, rng=random.Random(1))
        (welcome,) = session.pending_events()
        self.assertEqual(welcome.type, EventType.SYSTEM_MESSAGE)
        self.assertTrue(session.dirty)
        self.assertIsNotNone(session.state.active_grandmaster())


class UndoTests(unittest.TestCase):
    def test_replaying_the_undo_descriptor_reverses_completion(self) -> None:
        session = make_session()
        session.dispatch(CommandKind.TOGGLE_QUEST, "sq-1")
        completed = [e for e in session.pending_events() if e.type == EventType.QUEST_COMPLETED][0]
        self.assertEqual(session.state.stats.gold, 5)

        session.undo(completed)
        self.assertFalse(session.state.quests[0].completed)
        self.assertEqual(session.state.stats.gold, 0)
        self.assertEqual(session.state.stats.current_xp, 0)

    def test_event_without_descriptor(self) -> None:
        session = make_session()
        session.dispatch(CommandKind.TEST_ADD_GOLD, 10)
        with self.assertRaises(InvalidCommandError):
            session.undo(session.pending_events()[0])


class PersistenceCoalescingTests(unittest.TestCase):
    def test_many_commands_one_write(self) -> None:
        saver = Mock()
        session = make_session(saver=saver)
        session.dispatch(CommandKind.TEST_ADD_GOLD, 10)
        session.dispatch(CommandKind.TOGGLE_QUEST, "sq-1")

        self.assertTrue(session.save())
        self.assertFalse(session.save())
        saver.assert_called_once_with(session.state)

    def test_rollover_only_when_the_date_moves(self) -> None:
        clock = Mock(return_value=NOW)
        session = make_session(clock=clock)
        self.assertIsNone(session.check_rollover())

        clock.return_value = NOW + timedelta(days=1)
        transition = session.check_rollover()
        self.assertTrue(transition.accepted)
        self.assertEqual(session.state.last_rollover_date, "2026-03-05")
        self.assertIsNone(session.check_rollover())


if __name__ == "__main__":
    unittest.main()
