from __future__ import annotations

import random
import unittest
from datetime import datetime

from questlife import engine
from questlife.commands import Command, CommandKind
from questlife.errors import InvalidCommandError
from questlife.models import (
    DailyQuest,
    Difficulty,
    EventType,
    FocusQuest,
    GameState,
    GrandmasterQuest,
    QuestType,
    SideQuest,
    SideQuestTemplate,
    Step,
)

NOW = datetime(2026, 3, 4, 9, 30)

STAT_FIELDS = (
    "level",
    "current_xp",
    "gold",
    "quest_points",
    "lifetime_xp",
    "lifetime_gold",
    "total_quests_completed",
    "daily_xp",
    "daily_gold",
    "daily_qp",
    "daily_quests_completed",
)

READ_TEMPLATE = SideQuestTemplate(
    id="sqt-read", template="Read {n} pages", min_quantity=2, max_quantity=10, unit_xp=5, unit_gold=1
)


def fresh_state(*quests, **fields) -> GameState:
    return GameState(last_rollover_date="2026-03-04", quests=list(quests), **fields)


def run(state: GameState, kind: CommandKind, payload=None, *, seed: int = 1):
    return engine.dispatch(state, Command(kind, payload), now=NOW, rng=random.Random(seed))


def side(quest_id: str = "sq-1", xp: int = 10, gold: int = 5, qp: int = 2, risk: bool = False) -> SideQuest:
    return SideQuest(id=quest_id, title="Read 5 pages", xp_reward=xp, gold_reward=gold, qp_reward=qp, is_risk=risk)


def hero(*completed: bool, done: bool = False) -> GrandmasterQuest:
    steps = [Step(id=f"s{i + 1}", title=f"Step {i + 1}", completed=flag) for i, flag in enumerate(completed)]
    return GrandmasterQuest(id="hq-1", title="Master the craft", xp_reward=100, steps=steps, completed=done)


def stat_snapshot(state: GameState) -> dict:
    return {name: getattr(state.stats, name) for name in STAT_FIELDS}


def events_of(transition, event_type: EventType) -> list:
    return [e for e in transition.events if e.type == event_type]


class AddEditQuestTests(unittest.TestCase):
    def test_add_assigns_id_and_creation_time(self) -> None:
        state = fresh_state()
        t = run(state, CommandKind.ADD_QUEST, {"title": "Stretch", "type": "SIDE", "xpReward": 10, "goldReward": 3})

        self.assertTrue(t.accepted)
        self.assertEqual(state.quests, [])
        (quest,) = t.state.quests
        self.assertTrue(quest.id.startswith("sq-"))
        self.assertEqual(quest.created_at, NOW)
        self.assertEqual(quest.xp_reward, 10)
        self.assertFalse(quest.is_risk)
        self.assertEqual(t.state.activity_log[-1].action, "QUEST_CREATED")

    def test_daily_and_hard_quests_always_carry_fail_risk(self) -> None:
        t = run(fresh_state(), CommandKind.ADD_QUEST, {"title": "Meditate", "type": "DAILY"})
        self.assertTrue(t.state.quests[0].is_risk)

        t = run(fresh_state(), CommandKind.ADD_QUEST, {"title": "Run 10k", "type": "SIDE", "difficulty": "HARD"})
        self.assertTrue(t.state.quests[0].is_risk)

    def test_second_active_grandmaster_rejected(self) -> None:
        state = fresh_state(hero(False))
        t = run(state, CommandKind.ADD_QUEST, {"title": "Another epic", "type": "GRANDMASTER"})

        self.assertFalse(t.accepted)
        self.assertIs(t.state, state)
        self.assertEqual(t.events, [])

    def test_finished_grandmaster_payload_blocked_by_active_one(self) -> None:
        state = fresh_state(hero(False))
        t = run(state, CommandKind.ADD_QUEST, {"title": "Already done", "type": "GRANDMASTER", "completed": True})

        self.assertFalse(t.accepted)
        self.assertEqual(len(t.state.quests), 1)

    def test_completed_grandmaster_does_not_block_a_new_one(self) -> None:
        state = fresh_state(hero(True, done=True))
        t = run(state, CommandKind.ADD_QUEST, {"title": "Next epic", "type": "GRANDMASTER"})
        self.assertTrue(t.accepted)
        self.assertEqual(len(t.state.quests), 2)

    def test_malformed_step_order_rejected(self) -> None:
        payload = {
            "title": "Out of order",
            "type": "GRANDMASTER",
            "steps": [{"title": "first", "completed": False}, {"title": "second", "completed": True}],
        }
        t = run(fresh_state(), CommandKind.ADD_QUEST, payload)
        self.assertFalse(t.accepted)

    def test_unknown_quest_type_is_a_fault(self) -> None:
        with self.assertRaises(InvalidCommandError):
            run(fresh_state(), CommandKind.ADD_QUEST, {"title": "???", "type": "RAID"})

    def test_unknown_command_is_a_fault(self) -> None:
        with self.assertRaises(InvalidCommandError):
            Command("SUMMON_DRAGON")

    def test_edit_merges_fields_and_forces_risk(self) -> None:
        state = fresh_state(side())
        t = run(state, CommandKind.EDIT_QUEST, {"id": "sq-1", "difficulty": "HARD"})

        quest = t.state.quests[0]
        self.assertEqual(quest.title, "Read 5 pages")
        self.assertEqual(quest.difficulty, Difficulty.HARD)
        self.assertTrue(quest.is_risk)
        self.assertFalse(state.quests[0].is_risk)

    def test_edit_missing_quest_rejected(self) -> None:
        t = run(fresh_state(), CommandKind.EDIT_QUEST, {"id": "nope", "title": "x"})
        self.assertFalse(t.accepted)


class ToggleQuestTests(unittest.TestCase):
    def test_complete_then_uncomplete_restores_stats(self) -> None:
        state = fresh_state(side())
        state.stats.gold = 3
        before = stat_snapshot(state)

        done = run(state, CommandKind.TOGGLE_QUEST, "sq-1")
        stats = done.state.stats
        self.assertTrue(done.state.quests[0].completed)
        self.assertEqual(stats.current_xp, 10)
        self.assertEqual(stats.gold, 8)
        self.assertEqual(stats.quest_points, 2)
        self.assertEqual(stats.daily_quests_completed, 1)
        self.assertEqual(stats.history["2026-03-04"].xp, 10)

        (completed,) = events_of(done, EventType.QUEST_COMPLETED)
        self.assertEqual(completed.payload["xp"], 10)
        self.assertEqual(completed.payload["gold"], 5)
        self.assertEqual(completed.quest_type, QuestType.SIDE)
        self.assertEqual(completed.payload["undo"], {"kind": "TOGGLE_QUEST", "payload": "sq-1"})

        undone = run(done.state, CommandKind.TOGGLE_QUEST, "sq-1")
        self.assertFalse(undone.state.quests[0].completed)
        self.assertEqual(stat_snapshot(undone.state), before)
        self.assertEqual(undone.state.stats.history["2026-03-04"].xp, 0)

    def test_streak_bonus_is_granted_and_reversed_exactly(self) -> None:
        state = fresh_state(side())
        state.stats.completion_history = {"2026-03-01": True, "2026-03-02": True, "2026-03-03": True}
        state.stats.global_streak = 3

        done = run(state, CommandKind.TOGGLE_QUEST, "sq-1")
        self.assertEqual(done.state.stats.current_xp, 11)
        self.assertEqual(done.state.stats.gold, 5)
        self.assertEqual(done.state.quests[0].granted.xp, 11)

        done.state.stats.global_streak = 0
        undone = run(done.state, CommandKind.TOGGLE_QUEST, "sq-1")
        self.assertEqual(undone.state.stats.current_xp, 0)
        self.assertEqual(undone.state.stats.gold, 0)

    def test_level_up_carries_remainder(self) -> None:
        state = fresh_state(side(xp=10))
        state.stats.current_xp = 124
        state.stats.xp_modifier = 1.25

        t = run(state, CommandKind.TOGGLE_QUEST, "sq-1")
        self.assertEqual(t.state.stats.level, 2)
        self.assertEqual(t.state.stats.current_xp, 9)
        (level_up,) = events_of(t, EventType.LEVEL_UP)
        self.assertEqual(level_up.payload["level"], 2)

    def test_undoing_a_level_up_restores_level_and_titles(self) -> None:
        state = fresh_state(side(xp=10))
        state.stats.current_xp = 124
        state.stats.xp_modifier = 1.25
        before = stat_snapshot(state)

        done = run(state, CommandKind.TOGGLE_QUEST, "sq-1")
        self.assertEqual(done.state.quests[0].granted.levels, 1)
        self.assertEqual(done.state.stats.titles, ["The Awakened"])

        undone = run(done.state, CommandKind.TOGGLE_QUEST, "sq-1")
        self.assertEqual((undone.state.stats.level, undone.state.stats.current_xp), (1, 124))
        self.assertEqual(stat_snapshot(undone.state), before)
        self.assertEqual(undone.state.stats.titles, [])

    def test_tenth_level_unlocks_title(self) -> None:
        state = fresh_state(side(xp=100))
        state.stats.level = 9
        state.stats.xp_modifier = 1.0
        state.stats.titles = ["The Awakened"]

        t = run(state, CommandKind.TOGGLE_QUEST, "sq-1")
        self.assertEqual(t.state.stats.level, 10)
        self.assertIn("Novice Adventurer", t.state.stats.titles)
        self.assertEqual(len(events_of(t, EventType.ACHIEVEMENT_UNLOCKED)), 1)

    def test_all_dailies_mark_the_day(self) -> None:
        state = fresh_state(
            DailyQuest(id="dq-1", title="Water", xp_reward=5, is_risk=True),
            DailyQuest(id="dq-2", title="Walk", xp_reward=5, is_risk=True),
        )
        one = run(state, CommandKind.TOGGLE_QUEST, "dq-1")
        self.assertNotIn("2026-03-04", one.state.stats.completion_history)

        both = run(one.state, CommandKind.TOGGLE_QUEST, "dq-2")
        self.assertTrue(both.state.stats.completion_history["2026-03-04"])
        self.assertEqual(both.state.stats.global_streak, 1)
        self.assertEqual(both.state.quests[1].streak, 1)

        reopened = run(both.state, CommandKind.TOGGLE_QUEST, "dq-1")
        self.assertNotIn("2026-03-04", reopened.state.stats.completion_history)
        self.assertEqual(reopened.state.stats.global_streak, 0)

    def test_focus_completion_adds_focus_minutes(self) -> None:
        state = fresh_state(FocusQuest(id="foc-1", title="Deep Work", xp_reward=50, focus_duration_minutes=25))
        t = run(state, CommandKind.TOGGLE_QUEST, "foc-1")
        self.assertEqual(t.state.stats.focus_score, 25)
        self.assertEqual(t.state.stats.history["2026-03-04"].focus_minutes, 25)

    def test_grandmaster_with_open_steps_cannot_complete(self) -> None:
        state = fresh_state(hero(True, False))
        t = run(state, CommandKind.TOGGLE_QUEST, "hq-1")
        self.assertFalse(t.accepted)
        self.assertFalse(t.state.quests[0].completed)

    def test_grandmaster_completes_once_steps_are_done(self) -> None:
        state = fresh_state(hero(True, True))
        t = run(state, CommandKind.TOGGLE_QUEST, "hq-1")
        self.assertTrue(t.accepted)
        self.assertTrue(t.state.quests[0].completed)
        self.assertEqual(t.state.stats.lifetime_xp, 100)

    def test_reopening_grandmaster_reopens_its_steps(self) -> None:
        state = fresh_state(hero(True, True))
        done = run(state, CommandKind.TOGGLE_QUEST, "hq-1")
        reopened = run(done.state, CommandKind.TOGGLE_QUEST, "hq-1")

        quest = reopened.state.quests[0]
        self.assertFalse(quest.completed)
        self.assertEqual([s.completed for s in quest.steps], [False, False])
        self.assertEqual(quest.progress, 0)
        self.assertEqual(reopened.state.stats.lifetime_xp, 0)


class StepTests(unittest.TestCase):
    def step_flags(self, transition) -> list[bool]:
        return [s.completed for s in transition.state.quests[0].steps]

    def test_steps_complete_in_order(self) -> None:
        state = fresh_state(hero(False, False, False))

        skipped = run(state, CommandKind.TOGGLE_QUEST_STEP, {"questId": "hq-1", "stepId": "s2"})
        self.assertFalse(skipped.accepted)

        first = run(state, CommandKind.TOGGLE_QUEST_STEP, {"questId": "hq-1", "stepId": "s1"})
        self.assertEqual(self.step_flags(first), [True, False, False])
        self.assertEqual(first.state.quests[0].progress, 33)

        second = run(first.state, CommandKind.TOGGLE_QUEST_STEP, {"questId": "hq-1", "stepId": "s2"})
        self.assertEqual(self.step_flags(second), [True, True, False])
        self.assertEqual(second.state.quests[0].progress, 66)

    def test_reopening_a_step_cascades_forward(self) -> None:
        state = fresh_state(hero(True, True, False))
        t = run(state, CommandKind.TOGGLE_QUEST_STEP, {"questId": "hq-1", "stepId": "s1"})
        self.assertEqual(self.step_flags(t), [False, False, False])
        self.assertEqual(t.state.quests[0].progress, 0)

    def test_completed_quest_steps_are_locked(self) -> None:
        state = fresh_state(hero(True, True, done=True))
        t = run(state, CommandKind.TOGGLE_QUEST_STEP, {"questId": "hq-1", "stepId": "s2"})
        self.assertFalse(t.accepted)

    def test_progress_and_focus_timer(self) -> None:
        state = fresh_state(side(), FocusQuest(id="foc-1", title="Deep Work"))

        t = run(state, CommandKind.UPDATE_QUEST_PROGRESS, {"id": "sq-1", "progress": 150})
        self.assertEqual(t.state.quests[0].progress, 100)
        t = run(state, CommandKind.UPDATE_QUEST_PROGRESS, {"id": "sq-1", "progress": -5})
        self.assertEqual(t.state.quests[0].progress, 0)

        t = run(state, CommandKind.UPDATE_FOCUS_TIMER, {"id": "foc-1", "remainingSeconds": 600})
        self.assertEqual(t.state.quests[1].focus_seconds_remaining, 600)
        t = run(state, CommandKind.UPDATE_FOCUS_TIMER, {"id": "sq-1", "remainingSeconds": 600})
        self.assertFalse(t.accepted)


class NoticeBoardTests(unittest.TestCase):
    def board_state(self, *quests, gold: int = 0, offer_risk: bool = False) -> GameState:
        state = fresh_state(
            *quests,
            available_side_quests=[side("sq-offer", risk=offer_risk)],
            side_quest_templates=[READ_TEMPLATE],
        )
        state.stats.gold = gold
        return state

    def test_accept_moves_offer_and_refills_the_slot(self) -> None:
        state = self.board_state()
        t = run(state, CommandKind.ACCEPT_SIDE_QUEST, "sq-offer")

        self.assertTrue(t.accepted)
        self.assertEqual([q.id for q in t.state.quests], ["sq-offer"])
        self.assertEqual(len(t.state.available_side_quests), 1)
        self.assertNotEqual(t.state.available_side_quests[0].id, "sq-offer")
        self.assertEqual(t.state.stats.daily_side_quests_taken, 1)
        self.assertEqual(len(events_of(t, EventType.QUEST_ACCEPTED)), 1)

    def test_active_ceiling_leaves_state_untouched(self) -> None:
        state = self.board_state(*(side(f"sq-{i}") for i in range(engine.MAX_SIDE_QUESTS_ACTIVE)))
        t = run(state, CommandKind.ACCEPT_SIDE_QUEST, "sq-offer")

        self.assertFalse(t.accepted)
        self.assertEqual(len(t.state.quests), engine.MAX_SIDE_QUESTS_ACTIVE)
        self.assertEqual(t.state.available_side_quests[0].id, "sq-offer")
        self.assertEqual(t.state.stats.daily_side_quests_taken, 0)

    def test_daily_accept_ceiling(self) -> None:
        state = self.board_state()
        state.stats.daily_side_quests_taken = engine.MAX_DAILY_SIDE_ACCEPTS
        t = run(state, CommandKind.ACCEPT_SIDE_QUEST, "sq-offer")
        self.assertFalse(t.accepted)
        self.assertEqual(t.state.quests, [])

    def test_focus_ceiling(self) -> None:
        focus = [FocusQuest(id=f"foc-{i}", title="Focus") for i in range(engine.MAX_FOCUS_QUESTS_ACTIVE)]
        state = fresh_state(*focus, available_side_quests=[FocusQuest(id="foc-offer", title="Pomodoro")])
        t = run(state, CommandKind.ACCEPT_SIDE_QUEST, "foc-offer")
        self.assertFalse(t.accepted)

    def test_reroll_without_enough_gold_rejected(self) -> None:
        state = self.board_state(gold=10)
        t = run(state, CommandKind.REROLL_NOTICE_BOARD_SLOT, "sq-offer")
        self.assertFalse(t.accepted)
        self.assertEqual(t.state.stats.gold, 10)

    def test_reroll_replaces_only_the_slot(self) -> None:
        state = self.board_state(gold=20)
        t = run(state, CommandKind.REROLL_NOTICE_BOARD_SLOT, "sq-offer")

        self.assertTrue(t.accepted)
        self.assertEqual(t.state.stats.gold, 5)
        self.assertEqual(t.state.stats.daily_rerolls, 1)
        self.assertEqual(len(t.state.available_side_quests), 1)
        self.assertNotEqual(t.state.available_side_quests[0].id, "sq-offer")
        self.assertEqual(t.state.available_side_quests[0].type, QuestType.SIDE)

    def test_risky_offer_costs_more(self) -> None:
        state = self.board_state(gold=20, offer_risk=True)
        t = run(state, CommandKind.REROLL_NOTICE_BOARD_SLOT, "sq-offer")
        self.assertFalse(t.accepted)

    def test_reroll_allowance(self) -> None:
        state = self.board_state(gold=100)
        state.stats.daily_rerolls = engine.MAX_DAILY_REROLLS
        t = run(state, CommandKind.REROLL_NOTICE_BOARD_SLOT, "sq-offer")
        self.assertFalse(t.accepted)
        self.assertEqual(t.state.stats.gold, 100)


class ArchiveTests(unittest.TestCase):
    def test_delete_then_undo_restores(self) -> None:
        state = fresh_state(side())
        deleted = run(state, CommandKind.DELETE_QUEST, "sq-1")

        self.assertEqual(deleted.state.quests, [])
        self.assertEqual(deleted.state.archived_quests[0].id, "sq-1")
        undo = deleted.events[0].payload["undo"]
        self.assertEqual(undo, {"kind": "RESTORE_QUEST", "payload": "sq-1"})

        restored = engine.dispatch(deleted.state, Command.from_dict(undo), now=NOW, rng=random.Random(2))
        self.assertEqual([q.id for q in restored.state.quests], ["sq-1"])
        self.assertEqual(restored.state.archived_quests, [])

    def test_permanent_delete(self) -> None:
        state = fresh_state(archived_quests=[side()])
        t = run(state, CommandKind.PERMANENT_DELETE_QUEST, "sq-1")
        self.assertEqual(t.state.archived_quests, [])

        again = run(t.state, CommandKind.PERMANENT_DELETE_QUEST, "sq-1")
        self.assertFalse(again.accepted)

    def test_restoring_a_second_grandmaster_rejected(self) -> None:
        other = GrandmasterQuest(id="hq-2", title="Old epic")
        state = fresh_state(hero(False), archived_quests=[other])
        t = run(state, CommandKind.RESTORE_QUEST, "hq-2")
        self.assertFalse(t.accepted)


class TemplateAndProfileTests(unittest.TestCase):
    def test_save_assigns_id_and_delete_requires_existing(self) -> None:
        state = fresh_state()
        saved = run(
            state,
            CommandKind.SAVE_SIDE_QUEST_TEMPLATE,
            {"template": "Stretch {n} minutes", "min": 5, "max": 15, "unitXP": 2, "unitGold": 0.5},
        )
        (tmpl,) = saved.state.side_quest_templates
        self.assertTrue(tmpl.id.startswith("sqt-"))
        self.assertEqual(tmpl.max_quantity, 15)

        edited = run(saved.state, CommandKind.SAVE_SIDE_QUEST_TEMPLATE, {**tmpl.model_dump(), "max_quantity": 20})
        self.assertEqual(len(edited.state.side_quest_templates), 1)
        self.assertEqual(edited.state.side_quest_templates[0].max_quantity, 20)

        deleted = run(edited.state, CommandKind.DELETE_SIDE_QUEST_TEMPLATE, tmpl.id)
        self.assertEqual(deleted.state.side_quest_templates, [])
        self.assertFalse(run(deleted.state, CommandKind.DELETE_SIDE_QUEST_TEMPLATE, tmpl.id).accepted)

    def test_event_and_focus_templates(self) -> None:
        t = run(fresh_state(), CommandKind.SAVE_EVENT_TEMPLATE, {"title": "Weekend Raid", "allowedDays": [0, 6]})
        self.assertEqual(t.state.event_templates[0].allowed_days, [0, 6])
        t = run(t.state, CommandKind.SAVE_FOCUS_TEMPLATE, {"title": "Sprint", "duration": 15})
        self.assertEqual(t.state.focus_templates[0].duration, 15)

    def test_settings_validation(self) -> None:
        t = run(fresh_state(), CommandKind.UPDATE_SETTINGS, {"sideQuestRiskChance": 0.5})
        self.assertEqual(t.state.settings.side_quest_risk_chance, 0.5)
        with self.assertRaises(InvalidCommandError):
            run(fresh_state(), CommandKind.UPDATE_SETTINGS, {"sideQuestRiskChance": 2.0})

    def test_profile_update_keeps_progress(self) -> None:
        state = fresh_state()
        state.stats.gold = 40
        t = run(state, CommandKind.UPDATE_PROFILE, {"name": "Robin", "wakeUpTime": "06:30", "gold": 9999})
        self.assertEqual(t.state.stats.name, "Robin")
        self.assertEqual(t.state.stats.wake_up_time, "06:30")
        self.assertEqual(t.state.stats.gold, 40)

    def test_onboarding(self) -> None:
        t = run(
            fresh_state(side_quest_templates=[READ_TEMPLATE]),
            CommandKind.COMPLETE_ONBOARDING,
            {"name": "Robin", "xpModifier": "HARD", "firstQuest": "Drink water"},
        )
        self.assertTrue(t.state.has_onboarded)
        self.assertEqual(t.state.stats.name, "Robin")
        self.assertEqual(t.state.stats.xp_modifier, 1.5)
        daily = [q for q in t.state.quests if q.type == QuestType.DAILY]
        self.assertEqual(daily[0].title, "Drink water")
        self.assertIsNotNone(t.state.active_grandmaster())


class DebugCommandTests(unittest.TestCase):
    def test_add_gold_and_xp(self) -> None:
        t = run(fresh_state(), CommandKind.TEST_ADD_GOLD, 50)
        self.assertEqual(t.state.stats.gold, 50)
        t = run(t.state, CommandKind.TEST_ADD_XP, {"amount": 150})
        self.assertEqual(t.state.stats.level, 2)
        self.assertEqual(len(events_of(t, EventType.LEVEL_UP)), 1)

    def test_add_streak(self) -> None:
        t = run(fresh_state(), CommandKind.TEST_ADD_STREAK)
        self.assertEqual(t.state.stats.global_streak, 3)
        t = run(t.state, CommandKind.TEST_ADD_STREAK)
        self.assertEqual(t.state.stats.global_streak, 6)

    def test_full_reset(self) -> None:
        state = fresh_state(side())
        state.stats.gold = 500
        t = run(state, CommandKind.FULL_RESET)
        self.assertEqual(t.state.stats.gold, 0)
        self.assertIsNotNone(t.state.active_grandmaster())
        self.assertEqual(t.events[-1].message, "System Reset Complete.")


if __name__ == "__main__":
    unittest.main()
