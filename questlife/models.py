"""
QuestLife data model.

Everything that lives in a save document is a pydantic model. Field names are
snake_case in Python and camelCase on disk, so documents written by the
browser client load unchanged.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    model_validator,
)
from pydantic.alias_generators import to_camel


def _local_naive(value: datetime) -> datetime:
    # Saves from the browser client carry UTC offsets; the engine works in local wall time.
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


LocalDateTime = Annotated[datetime, AfterValidator(_local_naive)]

ALL_WEEKDAYS = [0, 1, 2, 3, 4, 5, 6]


class QuestType(str, Enum):
    GRANDMASTER = "GRANDMASTER"
    DAILY = "DAILY"
    SIDE = "SIDE"
    EVENT = "EVENT"
    FOCUS = "FOCUS"


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class EventType(str, Enum):
    LEVEL_UP = "LEVEL_UP"
    QUEST_COMPLETED = "QUEST_COMPLETED"
    QUEST_ACCEPTED = "QUEST_ACCEPTED"
    QUEST_REROLLED = "QUEST_REROLLED"
    SYSTEM_MESSAGE = "SYSTEM_MESSAGE"
    ACHIEVEMENT_UNLOCKED = "ACHIEVEMENT_UNLOCKED"


class Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Reward(Document):
    xp: int = 0
    gold: int = 0
    qp: int = 0
    levels: int = 0                      # levels this grant pushed the player through
    titles: list[str] = Field(default_factory=list)


class Step(Document):
    id: str = Field(default_factory=lambda: f"step-{uuid4().hex[:8]}")
    title: str
    due_date: LocalDateTime | None = None
    completed: bool = False


class QuestBase(Document):
    id: str
    title: str
    description: str | None = None
    completed: bool = False
    xp_reward: int = 0
    gold_reward: int = 0
    qp_reward: int = 0
    created_at: LocalDateTime = Field(default_factory=datetime.now)
    due_date: LocalDateTime | None = None
    difficulty: Difficulty | None = None
    is_risk: bool = False                # fail-risk flag
    progress: int | None = None
    granted: Reward | None = None        # what completion actually credited

    @model_validator(mode="before")
    @classmethod
    def _fold_penalty_flag(cls, data: Any) -> Any:
        # Older saves split the fail-risk flag across hasPenalty and isRisk.
        if isinstance(data, dict) and (data.get("hasPenalty") or data.get("has_penalty")):
            data = {k: v for k, v in data.items() if k not in ("is_risk", "has_penalty", "hasPenalty")}
            data["isRisk"] = True
        return data

    @property
    def reward(self) -> Reward:
        return Reward(xp=self.xp_reward, gold=self.gold_reward, qp=self.qp_reward)


class GrandmasterQuest(QuestBase):
    type: Literal["GRANDMASTER"] = "GRANDMASTER"
    steps: list[Step] = Field(default_factory=list)

    def has_open_steps(self) -> bool:
        return any(not step.completed for step in self.steps)

    def step_index(self, step_id: str) -> int:
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                return index
        return -1

    def step_progress(self) -> int:
        if not self.steps:
            return 100 if self.completed else 0
        done = sum(1 for step in self.steps if step.completed)
        return math.floor(done / len(self.steps) * 100)

    def steps_well_ordered(self) -> bool:
        ids = [step.id for step in self.steps]
        if len(set(ids)) != len(ids):
            return False
        seen_open = False
        for step in self.steps:
            if step.completed and seen_open:
                return False
            seen_open = seen_open or not step.completed
        return True


class DailyQuest(QuestBase):
    type: Literal["DAILY"] = "DAILY"
    streak: int = 0


class SideQuest(QuestBase):
    type: Literal["SIDE"] = "SIDE"


class EventQuest(QuestBase):
    type: Literal["EVENT"] = "EVENT"


class FocusQuest(QuestBase):
    type: Literal["FOCUS"] = "FOCUS"
    focus_duration_minutes: int = 25
    focus_seconds_remaining: int | None = None


QUEST_VARIANTS = (GrandmasterQuest, DailyQuest, SideQuest, EventQuest, FocusQuest)

Quest = Annotated[
    Union[GrandmasterQuest, DailyQuest, SideQuest, EventQuest, FocusQuest],
    Field(discriminator="type"),
]

QUEST_ADAPTER: TypeAdapter = TypeAdapter(Quest)


class HistoryRecord(Document):
    xp: int = 0
    gold: int = 0
    qp: int = 0
    completed: int = 0
    fails: int = 0
    focus_minutes: int = 0


class UserStats(Document):
    name: str = "Adventurer"
    level: int = 1
    current_xp: int = Field(0, alias="currentXP")
    gold: int = 0
    quest_points: int = 0
    titles: list[str] = Field(default_factory=list)
    wake_up_time: str = "08:00"
    xp_modifier: float = 1.25
    ideal_days: list[int] = Field(default_factory=lambda: list(ALL_WEEKDAYS))

    lifetime_gold: int = 0
    lifetime_xp: int = Field(0, alias="lifetimeXP")
    total_quests_completed: int = 0
    focus_score: int = 0

    # Reset by the day transition only
    daily_gold: int = 0
    daily_xp: int = Field(0, alias="dailyXP")
    daily_qp: int = Field(0, alias="dailyQP")
    daily_quests_completed: int = 0
    daily_rerolls: int = 0
    daily_side_quests_taken: int = 0

    global_streak: int = 0
    completion_history: dict[str, bool] = Field(default_factory=dict)
    history: dict[str, HistoryRecord] = Field(default_factory=dict)

    def ledger_for(self, day_key: str) -> HistoryRecord:
        row = self.history.get(day_key)
        if row is None:
            row = self.history[day_key] = HistoryRecord()
        return row

    def reset_daily_counters(self) -> None:
        self.daily_gold = 0
        self.daily_xp = 0
        self.daily_qp = 0
        self.daily_quests_completed = 0
        self.daily_rerolls = 0
        self.daily_side_quests_taken = 0


class GameSettings(Document):
    daily_fail_penalty: float = 0.75
    side_quest_risk_chance: float = Field(0.15, ge=0.0, le=1.0)
    keep_open_quests_on_rollover: bool = False


class SideQuestTemplate(Document):
    id: str
    template: str                        # "{n}" is replaced by the rolled quantity
    min_quantity: int = Field(alias="min")
    max_quantity: int = Field(alias="max")
    unit_xp: float = Field(alias="unitXP")
    unit_gold: float = Field(alias="unitGold")
    base_qp: int = Field(1, alias="baseQP")
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_range(self) -> SideQuestTemplate:
        if self.max_quantity < self.min_quantity:
            raise ValueError(f"max ({self.max_quantity}) is below min ({self.min_quantity})")
        return self


class EventTemplate(Document):
    id: str
    title: str
    description: str = ""
    allowed_days: list[int] = Field(default_factory=lambda: list(ALL_WEEKDAYS))   # 0 = Sunday
    spawn_chance: float = Field(0.5, ge=0.0, le=1.0)
    xp_reward: int = 0
    gold_reward: int = 0
    qp_reward: int = 0


class FocusTemplate(Document):
    id: str
    title: str
    duration: int = Field(25, gt=0)      # minutes


class ActivityLogEntry(Document):
    id: str
    timestamp: LocalDateTime
    formatted_date: str = ""
    action: str
    details: str = ""


class GameEvent(Document):
    id: str
    type: EventType
    message: str
    payload: dict[str, Any] | None = None
    quest_type: QuestType | None = None


class GameState(Document):
    has_onboarded: bool = False
    stats: UserStats = Field(default_factory=UserStats)
    settings: GameSettings = Field(default_factory=GameSettings)

    quests: list[Quest] = Field(default_factory=list)
    archived_quests: list[Quest] = Field(default_factory=list)
    available_side_quests: list[Quest] = Field(default_factory=list)
    side_quests_chosen_count: int = 0
    last_rollover_date: str = Field(
        "",
        validation_alias=AliasChoices("lastRolloverDate", "lastSideQuestGenDate", "last_rollover_date"),
        serialization_alias="lastRolloverDate",
    )

    side_quest_templates: list[SideQuestTemplate] = Field(default_factory=list)
    event_templates: list[EventTemplate] = Field(default_factory=list)
    focus_templates: list[FocusTemplate] = Field(default_factory=list)

    activity_log: list[ActivityLogEntry] = Field(default_factory=list)

    def find_quest(self, quest_id: str) -> int:
        return _index_of(self.quests, quest_id)

    def find_archived(self, quest_id: str) -> int:
        return _index_of(self.archived_quests, quest_id)

    def find_offer(self, quest_id: str) -> int:
        return _index_of(self.available_side_quests, quest_id)

    def active_grandmaster(self) -> GrandmasterQuest | None:
        for quest in self.quests:
            if isinstance(quest, GrandmasterQuest) and not quest.completed:
                return quest
        return None

    def count_open(self, quest_type: QuestType) -> int:
        return sum(1 for q in self.quests if q.type == quest_type and not q.completed)


def _index_of(items: list, item_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return -1


def canonical_keys(data: dict, *models: type[BaseModel]) -> dict:
    """Rename camelCase keys in ``data`` to the python field names of ``models``."""
    index: dict[str, str] = {}
    for model in models:
        for name, info in model.model_fields.items():
            index[name] = name
            if info.alias:
                index[info.alias] = name
    return {index.get(key, key): value for key, value in data.items()}
