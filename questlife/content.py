from __future__ import annotations

import json
import logging
import math
import random
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable

from questlife import mechanics
from questlife.events import make_log_entry
from questlife.models import (
    DailyQuest,
    Difficulty,
    EventQuest,
    EventTemplate,
    FocusQuest,
    FocusTemplate,
    GameSettings,
    GameState,
    GrandmasterQuest,
    QuestType,
    SideQuest,
    SideQuestTemplate,
    Step,
    UserStats,
)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent / "content_packs"
DEFAULT_PACK = "default"

NOTICE_BOARD_SIDE_SLOTS = 3
NOTICE_BOARD_FOCUS_SLOTS = 1

SIDE_QUEST_MIN_DAYS = 3
SIDE_QUEST_MAX_DAYS = 7

FOCUS_XP_PER_MINUTE = 2
FOCUS_MINUTES_PER_GOLD = 5
FOCUS_MINUTES_PER_QP = 30


def _load_json(path: Path, fallback):
    if not path.exists():
        return fallback
    return json.loads(path.read_text(encoding="utf-8-sig"))


def load_content_pack(pack_key: str = DEFAULT_PACK) -> dict:
    key = pack_key or DEFAULT_PACK
    pack_file = BASE_DIR / f"{key}.json"
    if not pack_file.exists():
        logger.warning("Content pack %r not found, using %r", key, DEFAULT_PACK)
        pack_file = BASE_DIR / f"{DEFAULT_PACK}.json"
    return _load_json(pack_file, {})


def narrative_line(pack: dict, key: str, rng: random.Random, fallback: str) -> str:
    lines = pack.get("narrative", {}).get(key, [])
    if not lines:
        return fallback
    return rng.choice(lines)


def default_side_quest_templates(pack: dict | None = None) -> list[SideQuestTemplate]:
    pack = load_content_pack() if pack is None else pack
    return [
        SideQuestTemplate.model_validate({**raw, "id": f"sqt-{i}"})
        for i, raw in enumerate(pack.get("side_quest_templates", []))
    ]


def default_event_templates(pack: dict | None = None) -> list[EventTemplate]:
    pack = load_content_pack() if pack is None else pack
    return [
        EventTemplate.model_validate({**raw, "id": f"evt-tmpl-{i}"})
        for i, raw in enumerate(pack.get("event_templates", []))
    ]


def default_focus_templates(pack: dict | None = None) -> list[FocusTemplate]:
    pack = load_content_pack() if pack is None else pack
    return [
        FocusTemplate.model_validate({**raw, "id": f"foc-tmpl-{i}"})
        for i, raw in enumerate(pack.get("focus_templates", []))
    ]


def _difficulty_for(position: float) -> Difficulty:
    if position > 0.7:
        return Difficulty.HARD
    if position > 0.3:
        return Difficulty.MEDIUM
    return Difficulty.EASY


def _side_offer(template: SideQuestTemplate, settings: GameSettings, rng: random.Random, now: datetime) -> SideQuest:
    quantity = rng.randint(template.min_quantity, template.max_quantity)
    span = template.max_quantity - template.min_quantity
    position = (quantity - template.min_quantity) / (span or 1)
    difficulty = _difficulty_for(position)
    is_risk = rng.random() < settings.side_quest_risk_chance or difficulty is Difficulty.HARD

    base = mechanics.BaseReward(
        xp=quantity * template.unit_xp,
        gold=quantity * template.unit_gold,
        qp=(template.base_qp or 1) + math.floor(position * 2),
    )
    reward = mechanics.compute_reward(base, difficulty, is_risk)
    due = now.date() + timedelta(days=rng.randint(SIDE_QUEST_MIN_DAYS, SIDE_QUEST_MAX_DAYS))

    return SideQuest(
        id=mechanics.new_id("sq", rng),
        title=template.template.replace("{n}", str(quantity)),
        xp_reward=max(1, mechanics.apply_variance(reward.xp, rng)),
        gold_reward=max(1, mechanics.apply_variance(reward.gold, rng)),
        qp_reward=max(1, reward.qp),
        created_at=now,
        due_date=mechanics.end_of_day(due),
        difficulty=difficulty,
        is_risk=is_risk,
    )


def generate_side_quest_offers(
    templates: Iterable[SideQuestTemplate],
    settings: GameSettings,
    count: int = NOTICE_BOARD_SIDE_SLOTS,
    *,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[SideQuest]:
    rng = rng or random.Random()
    now = now or datetime.now()
    pool = list(templates)
    if not pool or count <= 0:
        return []
    chosen = rng.sample(pool, min(count, len(pool)))
    return [_side_offer(template, settings, rng, now) for template in chosen]


def generate_event_offers(
    templates: Iterable[EventTemplate],
    today: date | datetime,
    *,
    rng: random.Random | None = None,
) -> list[EventQuest]:
    rng = rng or random.Random()
    now = today if isinstance(today, datetime) else datetime.combine(today, datetime.min.time())
    weekday = mechanics.js_weekday(now.date())
    spawned = []
    for template in templates:
        if weekday not in template.allowed_days:
            continue
        if rng.random() >= template.spawn_chance:
            continue
        spawned.append(
            EventQuest(
                id=mechanics.new_id(f"evt-pool-{template.id}", rng),
                title=template.title,
                description=template.description,
                xp_reward=template.xp_reward,
                gold_reward=template.gold_reward,
                qp_reward=template.qp_reward,
                created_at=now,
                due_date=mechanics.end_of_day(now.date()),
                difficulty=Difficulty.MEDIUM,
                is_risk=False,
            )
        )
    return spawned


def generate_focus_offers(
    templates: Iterable[FocusTemplate],
    count: int = NOTICE_BOARD_FOCUS_SLOTS,
    *,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[FocusQuest]:
    rng = rng or random.Random()
    now = now or datetime.now()
    pool = list(templates)
    if not pool or count <= 0:
        return []
    offers = []
    for template in rng.sample(pool, min(count, len(pool))):
        minutes = template.duration
        offers.append(
            FocusQuest(
                id=mechanics.new_id("foc", rng),
                title=template.title,
                xp_reward=minutes * FOCUS_XP_PER_MINUTE,
                gold_reward=max(1, minutes // FOCUS_MINUTES_PER_GOLD),
                qp_reward=1 + minutes // FOCUS_MINUTES_PER_QP,
                created_at=now,
                due_date=mechanics.end_of_day(now.date()),
                difficulty=Difficulty.MEDIUM,
                focus_duration_minutes=minutes,
                focus_seconds_remaining=minutes * 60,
            )
        )
    return offers


def build_notice_board(state: GameState, *, rng: random.Random, now: datetime) -> list:
    board: list = generate_side_quest_offers(state.side_quest_templates, state.settings, rng=rng, now=now)
    board.extend(generate_focus_offers(state.focus_templates, rng=rng, now=now))
    return board


def replacement_offer(state: GameState, quest_type: QuestType | str, *, rng: random.Random, now: datetime):
    """One fresh offer of the same kind, or None when there is nothing to draw from."""
    if quest_type == QuestType.FOCUS:
        offers = generate_focus_offers(state.focus_templates, 1, rng=rng, now=now)
    else:
        offers = generate_side_quest_offers(state.side_quest_templates, state.settings, 1, rng=rng, now=now)
    return offers[0] if offers else None


def starter_quests(
    now: datetime,
    rng: random.Random,
    first_quest_title: str | None = None,
    pack: dict | None = None,
) -> list:
    pack = load_content_pack() if pack is None else pack
    starter = pack.get("starter", {})
    today = now.date()

    hero_raw = dict(starter.get("grandmaster", {}))
    step_titles = hero_raw.pop("steps", [])
    steps = [
        Step(id=f"s{i + 1}", title=title, due_date=mechanics.end_of_day(today + timedelta(days=i)))
        for i, title in enumerate(step_titles)
    ]
    hero = GrandmasterQuest.model_validate(
        {
            **hero_raw,
            "id": mechanics.new_id("hq-awakening", rng),
            "createdAt": now,
            "dueDate": mechanics.end_of_day(today + timedelta(days=max(len(steps) - 1, 0))),
            "progress": 0,
            "steps": steps,
        }
    )

    daily_raw = dict(starter.get("daily", {"title": "Complete my first daily task"}))
    if first_quest_title:
        daily_raw["title"] = first_quest_title
    daily = DailyQuest.model_validate(
        {**daily_raw, "id": mechanics.new_id("dq", rng), "createdAt": now, "isRisk": True}
    )
    return [hero, daily]


def new_game(now: datetime, rng: random.Random, pack_key: str = DEFAULT_PACK) -> GameState:
    pack = load_content_pack(pack_key)
    state = GameState(
        stats=UserStats(titles=[mechanics.TITLES[0]]),
        settings=GameSettings(),
        quests=starter_quests(now, rng, pack=pack),
        last_rollover_date=mechanics.date_key(now.date()),
        side_quest_templates=default_side_quest_templates(pack),
        event_templates=default_event_templates(pack),
        focus_templates=default_focus_templates(pack),
    )
    state.available_side_quests = build_notice_board(state, rng=rng, now=now)
    state.activity_log.append(make_log_entry(rng, now, "AUTO_INIT", "Hero Adventurer initialized."))
    return state
