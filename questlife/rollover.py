"""
Nightly day transition.

Runs in a fixed order: failures, ledger, reset/archive, events, board,
counters, streak, announcement.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from questlife import content, mechanics
from questlife.commands import Turn
from questlife.models import DailyQuest, EventType, GameState, GrandmasterQuest, QuestType

logger = logging.getLogger(__name__)

FAILABLE_TYPES = (QuestType.DAILY, QuestType.SIDE)


def is_new_day(state: GameState, today: date) -> bool:
    return state.last_rollover_date != mechanics.date_key(today)


def risky_failures(state: GameState) -> list:
    return [q for q in state.quests if not q.completed and q.is_risk and q.type in FAILABLE_TYPES]


def _still_open(quest, now: datetime) -> bool:
    if quest.completed:
        return False
    if quest.due_date is None:
        return isinstance(quest, GrandmasterQuest)
    return quest.due_date >= now


def perform_day_transition(state: GameState, turn: Turn) -> int:
    """Roll ``state`` over to ``turn.today`` in place. Returns the failure count."""
    stats = state.stats
    today = turn.today
    yesterday = today - timedelta(days=1)

    failures = risky_failures(state)
    if failures:
        stats.ledger_for(mechanics.date_key(yesterday)).fails = len(failures)

    keep_open = state.settings.keep_open_quests_on_rollover
    survivors = []
    archived = []
    for quest in state.quests:
        if isinstance(quest, DailyQuest):
            quest.completed = False
            quest.due_date = None
            quest.granted = None
            survivors.append(quest)
        elif keep_open and _still_open(quest, turn.now):
            survivors.append(quest)
        else:
            archived.append(quest)
    state.archived_quests = list(reversed(archived)) + state.archived_quests

    survivors.extend(content.generate_event_offers(state.event_templates, turn.now, rng=turn.rng))
    state.quests = survivors

    state.available_side_quests = content.build_notice_board(state, rng=turn.rng, now=turn.now)
    state.side_quests_chosen_count = 0
    state.last_rollover_date = mechanics.date_key(today)

    stats.reset_daily_counters()
    stats.global_streak = mechanics.global_streak(stats.completion_history, today)

    turn.log(state, "DAY_TRANSITION", f"Daily reset performed. {len(failures)} failures recorded.")
    message = content.narrative_line(
        content.load_content_pack(), "new_day", turn.rng, "A new day begins. Dailies reset."
    )
    turn.emit(EventType.SYSTEM_MESSAGE, message, {"date": state.last_rollover_date, "failures": len(failures)})

    logger.info(
        "Day transition to %s: %d failures, %d archived, streak %d",
        state.last_rollover_date,
        len(failures),
        len(archived),
        stats.global_streak,
    )
    return len(failures)
