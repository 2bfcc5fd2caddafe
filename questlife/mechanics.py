from __future__ import annotations

import math
import random
import uuid
from datetime import date, datetime, time, timedelta
from typing import NamedTuple

from questlife.models import Difficulty, Reward

REWARD_MULTIPLIERS = {
    Difficulty.EASY: 0.5,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 2.0,
}

RISK_GOLD_BONUS = 6
VARIANCE_PERCENT = 0.2

STREAK_BONUS_START = 3
STREAK_BASE_BONUS = 0.1
STREAK_BONUS_PER_DAY = 0.1
STREAK_MULTIPLIER_CAP = 1.5

# Level curve steepness chosen at onboarding
XP_MODIFIERS = {
    "EASY": 1.1,
    "NORMAL": 1.25,
    "HARD": 1.5,
    "EXTREME": 2.0,
}

TITLES = [
    "The Awakened",
    "Novice Adventurer",
    "Apprentice of Order",
    "Journeyman of Focus",
    "Warrior of Will",
    "Knight of Routine",
    "Master of Discipline",
    "Grandmaster of Habits",
    "Legend of Productivity",
    "Demigod of Getting Things Done",
    "Ascended Entity",
]


class BaseReward(NamedTuple):
    xp: float
    gold: float
    qp: float


def compute_reward(base: BaseReward, difficulty: Difficulty | None, risk_active: bool) -> Reward:
    multiplier = REWARD_MULTIPLIERS[difficulty or Difficulty.MEDIUM]
    gold = base.gold + (RISK_GOLD_BONUS if risk_active else 0)
    return Reward(
        xp=max(0, math.ceil(base.xp * multiplier)),
        gold=max(0, math.ceil(gold * multiplier)),
        qp=max(0, math.ceil(base.qp * multiplier)),
    )


def apply_variance(value: int, rng: random.Random, percent: float = VARIANCE_PERCENT) -> int:
    spread = value * percent
    low, high = value - spread, value + spread
    return math.floor(rng.random() * (high - low) + low)


def streak_multiplier(streak: int) -> float:
    if streak < STREAK_BONUS_START:
        return 1.0
    bonus = STREAK_BASE_BONUS + max(0, streak - STREAK_BONUS_START) * STREAK_BONUS_PER_DAY
    return min(STREAK_MULTIPLIER_CAP, 1.0 + bonus)


def apply_streak(reward: Reward, multiplier: float) -> Reward:
    return Reward(
        xp=math.floor(reward.xp * multiplier),
        gold=math.floor(reward.gold * multiplier),
        qp=reward.qp,
    )


def global_streak(history: dict[str, bool], today: date) -> int:
    d = today if history.get(date_key(today)) else today - timedelta(days=1)
    streak = 0
    while True:
        if not history.get(date_key(d)):
            return streak
        streak += 1
        d -= timedelta(days=1)


def level_threshold(level: int, modifier: float) -> int:
    return math.floor(100 * math.pow(modifier, level))


def apply_level_ups(level: int, current_xp: int, modifier: float) -> tuple[int, int, list[int]]:
    """Return (level, current_xp, levels reached) after spending XP on every threshold it clears."""
    reached = []
    threshold = level_threshold(level, modifier)
    while threshold > 0 and current_xp >= threshold:
        current_xp -= threshold
        level += 1
        reached.append(level)
        threshold = level_threshold(level, modifier)
    return level, current_xp, reached


def title_for_level(level: int) -> str:
    return TITLES[min(level // 10, len(TITLES) - 1)]


def date_key(d: date) -> str:
    return d.isoformat()


def js_weekday(d: date) -> int:
    # Template weekdays count from Sunday = 0
    return (d.weekday() + 1) % 7


def end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max)


def new_id(prefix: str, rng: random.Random) -> str:
    return f"{prefix}-{uuid.UUID(int=rng.getrandbits(128)).hex[:12]}"
