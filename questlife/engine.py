"""
QuestLife state engine.

``dispatch(state, command)`` is the single entry point. Handlers mutate a deep
copy of the state and return nothing, or return a replacement state. A handler
raises CommandRejected when a game rule refuses the command; the caller then
gets the original state back untouched together with the reason.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from questlife import content, mechanics, rollover, savefile
from questlife.commands import Command, CommandKind, CommandRejected, Transition, Turn
from questlife.errors import InvalidCommandError
from questlife.models import (
    QUEST_ADAPTER,
    QUEST_VARIANTS,
    DailyQuest,
    Difficulty,
    EventTemplate,
    EventType,
    FocusQuest,
    FocusTemplate,
    GameSettings,
    GameState,
    GrandmasterQuest,
    HistoryRecord,
    QuestType,
    Reward,
    SideQuestTemplate,
    UserStats,
    canonical_keys,
)

logger = logging.getLogger(__name__)

MAX_SIDE_QUESTS_ACTIVE = 5
MAX_DAILY_SIDE_ACCEPTS = 2
MAX_DAILY_REROLLS = 2
MAX_FOCUS_QUESTS_ACTIVE = 3

REROLL_COST = 15
RISKY_REROLL_COST = 30

DEBUG_STREAK_DAYS = 3

ID_PREFIXES = {
    QuestType.GRANDMASTER: "hq",
    QuestType.DAILY: "dq",
    QuestType.SIDE: "sq",
    QuestType.EVENT: "eq",
    QuestType.FOCUS: "foc",
}

Handler = Callable[[GameState, Any, Turn], "GameState | None"]


def dispatch(
    state: GameState,
    command: Command,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> Transition:
    if not isinstance(command, Command):
        command = Command(command)
    handler = _HANDLERS.get(command.kind)
    if handler is None:
        raise InvalidCommandError(f"No handler for {command.kind.value}")

    turn = Turn(now=now or datetime.now(), rng=rng or random.Random())
    draft = state.model_copy(deep=True)
    try:
        replaced = handler(draft, command.payload, turn)
    except CommandRejected as exc:
        logger.debug("%s rejected: %s", command.kind.value, exc)
        return Transition(state=state, rejected=str(exc) or command.kind.value)
    except ValidationError as exc:
        raise InvalidCommandError(f"{command.kind.value}: invalid payload: {exc}") from exc

    logger.debug("%s applied, %d events", command.kind.value, len(turn.events))
    return Transition(state=replaced if replaced is not None else draft, events=turn.events)


def _as_dict(payload: Any) -> dict:
    if isinstance(payload, BaseModel):
        return payload.model_dump()
    if isinstance(payload, dict):
        return dict(payload)
    raise InvalidCommandError(f"Expected an object payload, got {type(payload).__name__}")


def _field(payload: Any, *names: str, default: Any = None) -> Any:
    if isinstance(payload, dict):
        for name in names:
            if name in payload:
                return payload[name]
        return default
    return getattr(payload, names[0], default)


def _target_id(payload: Any) -> str:
    if isinstance(payload, str):
        return payload
    quest_id = _field(payload, "id")
    if not isinstance(quest_id, str):
        raise InvalidCommandError(f"Expected a quest id, got {payload!r}")
    return quest_id


def _quest_fields(payload: Any) -> dict:
    return canonical_keys(_as_dict(payload), *QUEST_VARIANTS)


def _enforce_fail_risk(quest) -> None:
    if quest.type == QuestType.DAILY or quest.difficulty == Difficulty.HARD:
        quest.is_risk = True


def _check_grandmaster(state: GameState, quest, ignore_id: str | None = None) -> None:
    if not isinstance(quest, GrandmasterQuest):
        return
    active = state.active_grandmaster()
    if ignore_id is None:
        if active is not None:
            raise CommandRejected("a grandmaster quest is already active")
    elif active is not None and active.id != ignore_id and not quest.completed:
        raise CommandRejected("a grandmaster quest is already active")
    if not quest.steps_well_ordered():
        raise CommandRejected("steps must be completed in order and have unique ids")
    if quest.completed and quest.has_open_steps():
        raise CommandRejected("grandmaster quest has incomplete steps")
    if quest.steps:
        quest.progress = quest.step_progress()


def _quest_at(state: GameState, quest_id: str) -> int:
    index = state.find_quest(quest_id)
    if index < 0:
        raise CommandRejected(f"no active quest {quest_id!r}")
    return index


def _add_quest(state: GameState, payload: Any, turn: Turn) -> None:
    data = _quest_fields(payload)
    data.pop("granted", None)
    quest_type = data.get("type", QuestType.DAILY)
    data["type"] = quest_type.value if isinstance(quest_type, QuestType) else quest_type
    data["id"] = mechanics.new_id(ID_PREFIXES.get(data["type"], "q"), turn.rng)
    data["created_at"] = turn.now
    quest = QUEST_ADAPTER.validate_python(data)

    _enforce_fail_risk(quest)
    _check_grandmaster(state, quest)

    state.quests.append(quest)
    turn.log(state, "QUEST_CREATED", f'Created {quest.type} quest: "{quest.title}"')


def _edit_quest(state: GameState, payload: Any, turn: Turn) -> None:
    data = _quest_fields(payload)
    index = _quest_at(state, _target_id(data))
    current = state.quests[index]

    merged = {**current.model_dump(), **data}
    if isinstance(merged.get("type"), QuestType):
        merged["type"] = merged["type"].value
    quest = QUEST_ADAPTER.validate_python(merged)

    _enforce_fail_risk(quest)
    _check_grandmaster(state, quest, ignore_id=current.id)

    state.quests[index] = quest
    turn.log(state, "QUEST_EDITED", f'Edited quest: "{quest.title}"')


def _delete_quest(state: GameState, payload: Any, turn: Turn) -> None:
    quest_id = _target_id(payload)
    index = _quest_at(state, quest_id)
    quest = state.quests.pop(index)
    state.archived_quests.insert(0, quest)
    turn.log(state, "QUEST_ARCHIVED", f'Moved to trash: "{quest.title}"')
    turn.emit(
        EventType.SYSTEM_MESSAGE,
        "Quest moved to archive.",
        {"id": quest_id},
        quest.type,
        undo=Command(CommandKind.RESTORE_QUEST, quest_id),
    )


def _restore_quest(state: GameState, payload: Any, turn: Turn) -> None:
    quest_id = _target_id(payload)
    index = state.find_archived(quest_id)
    if index < 0:
        raise CommandRejected(f"no archived quest {quest_id!r}")
    quest = state.archived_quests[index]
    if isinstance(quest, GrandmasterQuest) and not quest.completed and state.active_grandmaster():
        raise CommandRejected("a grandmaster quest is already active")
    del state.archived_quests[index]
    state.quests.append(quest)
    turn.log(state, "QUEST_RESTORED", f'Restored from trash: "{quest.title}"')
    turn.emit(EventType.SYSTEM_MESSAGE, "Quest restored.", {"id": quest_id}, quest.type)


def _permanent_delete(state: GameState, payload: Any, turn: Turn) -> None:
    quest_id = _target_id(payload)
    index = state.find_archived(quest_id)
    if index < 0:
        raise CommandRejected(f"no archived quest {quest_id!r}")
    quest = state.archived_quests.pop(index)
    turn.log(state, "QUEST_DELETED_FOREVER", f'Permanently deleted: "{quest.title}"')


def _credit(stats: UserStats, row: HistoryRecord, reward: Reward, focus_minutes: int) -> None:
    stats.current_xp += reward.xp
    stats.gold += reward.gold
    stats.quest_points += reward.qp
    stats.lifetime_xp += reward.xp
    stats.lifetime_gold += reward.gold
    stats.total_quests_completed += 1
    stats.focus_score += focus_minutes

    stats.daily_xp += reward.xp
    stats.daily_gold += reward.gold
    stats.daily_qp += reward.qp
    stats.daily_quests_completed += 1

    row.xp += reward.xp
    row.gold += reward.gold
    row.qp += reward.qp
    row.completed += 1
    row.focus_minutes += focus_minutes


def _debit(stats: UserStats, row: HistoryRecord, reward: Reward, focus_minutes: int) -> None:
    stats.current_xp = max(0, stats.current_xp - reward.xp)
    stats.gold = max(0, stats.gold - reward.gold)
    stats.quest_points = max(0, stats.quest_points - reward.qp)
    stats.lifetime_xp = max(0, stats.lifetime_xp - reward.xp)
    stats.lifetime_gold = max(0, stats.lifetime_gold - reward.gold)
    stats.total_quests_completed = max(0, stats.total_quests_completed - 1)
    stats.focus_score = max(0, stats.focus_score - focus_minutes)

    stats.daily_xp = max(0, stats.daily_xp - reward.xp)
    stats.daily_gold = max(0, stats.daily_gold - reward.gold)
    stats.daily_qp = max(0, stats.daily_qp - reward.qp)
    stats.daily_quests_completed = max(0, stats.daily_quests_completed - 1)

    row.xp = max(0, row.xp - reward.xp)
    row.gold = max(0, row.gold - reward.gold)
    row.qp = max(0, row.qp - reward.qp)
    row.completed = max(0, row.completed - 1)
    row.focus_minutes = max(0, row.focus_minutes - focus_minutes)


def _apply_level_ups(stats: UserStats, turn: Turn) -> tuple[int, list[str]]:
    level, current_xp, reached = mechanics.apply_level_ups(stats.level, stats.current_xp, stats.xp_modifier)
    stats.level = level
    stats.current_xp = current_xp
    unlocked = []
    for new_level in reached:
        turn.emit(EventType.LEVEL_UP, f"Level Up! You are now level {new_level}.", {"level": new_level})
        title = mechanics.title_for_level(new_level)
        if title not in stats.titles:
            stats.titles.append(title)
            turn.emit(EventType.ACHIEVEMENT_UNLOCKED, f"Title unlocked: {title}", {"title": title})
            unlocked.append(title)
    return len(reached), unlocked


def _revert_level_ups(stats: UserStats, granted: Reward) -> None:
    for _ in range(granted.levels):
        if stats.level <= 1:
            break
        stats.level -= 1
        stats.current_xp += mechanics.level_threshold(stats.level, stats.xp_modifier)
    stats.titles = [title for title in stats.titles if title not in granted.titles]


def _refresh_completion(state: GameState, turn: Turn) -> None:
    stats = state.stats
    dailies = [q for q in state.quests if q.type == QuestType.DAILY]
    if dailies and all(q.completed for q in dailies):
        stats.completion_history[turn.today_key] = True
    else:
        stats.completion_history.pop(turn.today_key, None)
    stats.global_streak = mechanics.global_streak(stats.completion_history, turn.today)


def _toggle_quest(state: GameState, payload: Any, turn: Turn) -> None:
    index = _quest_at(state, _target_id(payload))
    quest = state.quests[index]
    if isinstance(quest, GrandmasterQuest) and not quest.completed and quest.has_open_steps():
        raise CommandRejected("grandmaster quest has incomplete steps")

    stats = state.stats
    row = stats.ledger_for(turn.today_key)
    focus_minutes = quest.focus_duration_minutes if isinstance(quest, FocusQuest) else 0

    if not quest.completed:
        multiplier = mechanics.streak_multiplier(stats.global_streak)
        granted = mechanics.apply_streak(quest.reward, multiplier)
        _credit(stats, row, granted, focus_minutes)
        quest.completed = True
        quest.progress = 100
        if isinstance(quest, DailyQuest):
            quest.streak += 1

        levels, titles = _apply_level_ups(stats, turn)
        quest.granted = granted.model_copy(update={"levels": levels, "titles": titles})
        turn.emit(
            EventType.QUEST_COMPLETED,
            f"+{granted.xp} XP  +{granted.gold}g",
            {"id": quest.id, "xp": granted.xp, "gold": granted.gold, "qp": granted.qp},
            quest.type,
            undo=Command(CommandKind.TOGGLE_QUEST, quest.id),
        )
        turn.log(state, "QUEST_COMPLETED", f'Completed quest: "{quest.title}"')
    else:
        # Quests completed before rewards were recorded fall back to today's multiplier.
        granted = quest.granted or mechanics.apply_streak(
            quest.reward, mechanics.streak_multiplier(stats.global_streak)
        )
        _revert_level_ups(stats, granted)
        _debit(stats, row, granted, focus_minutes)
        quest.completed = False
        quest.granted = None
        quest.progress = 0
        if isinstance(quest, GrandmasterQuest):
            for step in quest.steps:
                step.completed = False
        if isinstance(quest, DailyQuest):
            quest.streak = max(0, quest.streak - 1)
        turn.log(state, "QUEST_UNCOMPLETED", f'Unchecked quest: "{quest.title}"')

    _refresh_completion(state, turn)


def _toggle_step(state: GameState, payload: Any, turn: Turn) -> None:
    quest_id = _field(payload, "quest_id", "questId")
    step_id = _field(payload, "step_id", "stepId")
    quest = state.quests[_quest_at(state, quest_id)]
    if not isinstance(quest, GrandmasterQuest):
        raise CommandRejected(f"quest {quest_id!r} has no steps")
    index = quest.step_index(step_id)
    if index < 0:
        raise CommandRejected(f"no step {step_id!r}")

    step = quest.steps[index]
    completing = not step.completed
    if quest.completed and not completing:
        raise CommandRejected("quest is already complete")
    if completing and index > 0 and not quest.steps[index - 1].completed:
        raise CommandRejected("previous step is incomplete")

    step.completed = completing
    if not completing:
        for later in quest.steps[index + 1:]:
            later.completed = False
    quest.progress = quest.step_progress()

    if completing:
        turn.emit(EventType.SYSTEM_MESSAGE, f"Step Complete: {step.title}", {"id": quest.id, "step": step.id})
    turn.log(state, "STEP_TOGGLED", f'{"Completed" if completing else "Reopened"} step "{step.title}"')


def _update_progress(state: GameState, payload: Any, turn: Turn) -> None:
    quest = state.quests[_quest_at(state, _target_id(payload))]
    progress = _field(payload, "progress")
    if not isinstance(progress, (int, float)):
        raise InvalidCommandError(f"progress must be a number, got {progress!r}")
    quest.progress = max(0, min(100, int(progress)))


def _update_focus_timer(state: GameState, payload: Any, turn: Turn) -> None:
    quest = state.quests[_quest_at(state, _target_id(payload))]
    if not isinstance(quest, FocusQuest):
        raise CommandRejected(f"quest {quest.id!r} is not a focus session")
    remaining = _field(payload, "remaining_seconds", "remainingSeconds")
    if not isinstance(remaining, (int, float)):
        raise InvalidCommandError(f"remaining_seconds must be a number, got {remaining!r}")
    quest.focus_seconds_remaining = max(0, int(remaining))


def _accept_offer(state: GameState, payload: Any, turn: Turn) -> None:
    offer_id = _target_id(payload)
    index = state.find_offer(offer_id)
    if index < 0:
        raise CommandRejected(f"no offer {offer_id!r} on the board")
    offer = state.available_side_quests[index]

    if offer.type == QuestType.SIDE:
        if state.count_open(QuestType.SIDE) >= MAX_SIDE_QUESTS_ACTIVE:
            raise CommandRejected("too many active side quests")
        if state.stats.daily_side_quests_taken >= MAX_DAILY_SIDE_ACCEPTS:
            raise CommandRejected("daily side quest limit reached")
    elif offer.type == QuestType.FOCUS:
        if state.count_open(QuestType.FOCUS) >= MAX_FOCUS_QUESTS_ACTIVE:
            raise CommandRejected("too many active focus sessions")

    del state.available_side_quests[index]
    state.quests.append(offer)
    replacement = content.replacement_offer(state, offer.type, rng=turn.rng, now=turn.now)
    if replacement is not None:
        state.available_side_quests.append(replacement)

    if offer.type == QuestType.SIDE:
        state.stats.daily_side_quests_taken += 1
    state.side_quests_chosen_count += 1

    turn.log(state, "QUEST_ACCEPTED", f'Accepted {offer.type}: "{offer.title}"')
    turn.emit(EventType.QUEST_ACCEPTED, f"Accepted: {offer.title}", {"id": offer.id}, offer.type)


def reroll_cost(offer) -> int:
    return RISKY_REROLL_COST if offer.is_risk else REROLL_COST


def _reroll_offer(state: GameState, payload: Any, turn: Turn) -> None:
    stats = state.stats
    if stats.daily_rerolls >= MAX_DAILY_REROLLS:
        raise CommandRejected("no rerolls left today")
    offer_id = _target_id(payload)
    index = state.find_offer(offer_id)
    if index < 0:
        raise CommandRejected(f"no offer {offer_id!r} on the board")
    offer = state.available_side_quests[index]
    cost = reroll_cost(offer)
    if stats.gold < cost:
        raise CommandRejected(f"reroll costs {cost}g, have {stats.gold}g")
    replacement = content.replacement_offer(state, offer.type, rng=turn.rng, now=turn.now)
    if replacement is None:
        raise CommandRejected("no templates to reroll from")

    state.available_side_quests[index] = replacement
    stats.gold -= cost
    stats.daily_rerolls += 1

    turn.log(state, "REROLL_NOTICE_BOARD", f'Rerolled quest "{offer.title}" for {cost}g')
    turn.emit(EventType.QUEST_REROLLED, "Quest rerolled.", {"id": replacement.id, "cost": cost}, replacement.type)


def _refresh_board(state: GameState, payload: Any, turn: Turn) -> None:
    state.available_side_quests = content.build_notice_board(state, rng=turn.rng, now=turn.now)
    state.side_quests_chosen_count = 0
    turn.log(state, "DEBUG_REFRESH_BOARD", "Debug: Notice board refreshed.")
    turn.emit(EventType.SYSTEM_MESSAGE, "Board refreshed.")


def _template_handlers(attr: str, model: type[BaseModel], prefix: str, label: str) -> tuple[Handler, Handler]:
    def save(state: GameState, payload: Any, turn: Turn) -> None:
        data = canonical_keys(_as_dict(payload), model)
        if not data.get("id"):
            data["id"] = mechanics.new_id(prefix, turn.rng)
        template = model.model_validate(data)
        templates = getattr(state, attr)
        for index, existing in enumerate(templates):
            if existing.id == template.id:
                templates[index] = template
                break
        else:
            templates.append(template)
        turn.log(state, "TEMPLATE_SAVED", f"Saved {label.lower()} {template.id}")
        turn.emit(EventType.SYSTEM_MESSAGE, f"{label} saved.", {"id": template.id})

    def delete(state: GameState, payload: Any, turn: Turn) -> None:
        template_id = _target_id(payload)
        templates = getattr(state, attr)
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            raise CommandRejected(f"no template {template_id!r}")
        setattr(state, attr, remaining)
        turn.log(state, "TEMPLATE_DELETED", f"Deleted {label.lower()} {template_id}")
        turn.emit(EventType.SYSTEM_MESSAGE, f"{label} deleted.", {"id": template_id})

    return save, delete


_save_side_template, _delete_side_template = _template_handlers(
    "side_quest_templates", SideQuestTemplate, "sqt", "Template"
)
_save_event_template, _delete_event_template = _template_handlers(
    "event_templates", EventTemplate, "evt-tmpl", "Event"
)
_save_focus_template, _delete_focus_template = _template_handlers(
    "focus_templates", FocusTemplate, "foc-tmpl", "Focus template"
)


def _complete_onboarding(state: GameState, payload: Any, turn: Turn) -> None:
    data = canonical_keys(_as_dict(payload), UserStats)
    name = (data.get("name") or "").strip() or state.stats.name
    modifier = data.get("xp_modifier", state.stats.xp_modifier)
    if isinstance(modifier, str):
        if modifier.upper() not in mechanics.XP_MODIFIERS:
            raise InvalidCommandError(f"Unknown difficulty curve {modifier!r}")
        modifier = mechanics.XP_MODIFIERS[modifier.upper()]

    state.has_onboarded = True
    state.stats.name = name
    state.stats.wake_up_time = data.get("wake_up_time") or state.stats.wake_up_time
    state.stats.xp_modifier = float(modifier)
    state.quests = content.starter_quests(turn.now, turn.rng, _field(payload, "first_quest", "firstQuest"))
    state.available_side_quests = content.build_notice_board(state, rng=turn.rng, now=turn.now)
    state.last_rollover_date = turn.today_key

    turn.log(state, "ONBOARDING_COMPLETE", f"Hero {name} awakened.")
    turn.emit(EventType.SYSTEM_MESSAGE, f"Welcome, {name}. Your journey begins.")


def _update_profile(state: GameState, payload: Any, turn: Turn) -> None:
    data = canonical_keys(_as_dict(payload), UserStats)
    changes = {key: data[key] for key in ("name", "wake_up_time", "ideal_days") if key in data}
    state.stats = UserStats.model_validate({**state.stats.model_dump(), **changes})
    turn.log(state, "PROFILE_UPDATE", "Updated profile settings.")
    turn.emit(EventType.SYSTEM_MESSAGE, "Profile updated.")


def _update_settings(state: GameState, payload: Any, turn: Turn) -> None:
    data = canonical_keys(_as_dict(payload), GameSettings)
    state.settings = GameSettings.model_validate({**state.settings.model_dump(), **data})
    turn.log(state, "SETTINGS_UPDATE", "Game modifiers updated.")


def _daily_reset(state: GameState, payload: Any, turn: Turn) -> None:
    if not rollover.is_new_day(state, turn.today):
        raise CommandRejected(f"already rolled over on {turn.today_key}")
    rollover.perform_day_transition(state, turn)


def _fail_all(state: GameState, payload: Any, turn: Turn) -> None:
    rollover.perform_day_transition(state, turn)
    state.stats.completion_history = {}
    state.stats.global_streak = 0
    turn.emit(EventType.SYSTEM_MESSAGE, "Forced Fail triggered.")


def _amount(payload: Any) -> int:
    amount = _field(payload, "amount", default=payload) if isinstance(payload, dict) else payload
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidCommandError(f"Expected an integer amount, got {payload!r}")
    return amount


def _add_xp(state: GameState, payload: Any, turn: Turn) -> None:
    amount = _amount(payload)
    state.stats.current_xp = max(0, state.stats.current_xp + amount)
    state.stats.lifetime_xp = max(0, state.stats.lifetime_xp + amount)
    turn.log(state, "DEBUG_ADD_XP", f"Debug: added {amount} XP.")
    turn.emit(EventType.SYSTEM_MESSAGE, f"Added {amount} XP")
    _apply_level_ups(state.stats, turn)


def _add_gold(state: GameState, payload: Any, turn: Turn) -> None:
    amount = _amount(payload)
    state.stats.gold = max(0, state.stats.gold + amount)
    state.stats.lifetime_gold = max(0, state.stats.lifetime_gold + amount)
    turn.log(state, "DEBUG_ADD_GOLD", f"Debug: added {amount} gold.")
    turn.emit(EventType.SYSTEM_MESSAGE, f"Added {amount} Gold")


def _add_streak(state: GameState, payload: Any, turn: Turn) -> None:
    history = state.stats.completion_history
    day = turn.today if history.get(turn.today_key) else turn.today - timedelta(days=1)
    while history.get(mechanics.date_key(day)):
        day -= timedelta(days=1)
    for _ in range(DEBUG_STREAK_DAYS):
        history[mechanics.date_key(day)] = True
        day -= timedelta(days=1)
    state.stats.global_streak = mechanics.global_streak(history, turn.today)
    turn.log(state, "DEBUG_ADD_STREAK", f"Debug: streak set to {state.stats.global_streak}.")
    turn.emit(EventType.SYSTEM_MESSAGE, "Streak boosted.")


def _full_reset(state: GameState, payload: Any, turn: Turn) -> GameState:
    fresh = content.new_game(turn.now, turn.rng)
    turn.emit(EventType.SYSTEM_MESSAGE, "System Reset Complete.")
    return fresh


def _import_data(state: GameState, payload: Any, turn: Turn) -> GameState:
    imported = savefile.load_document(payload, now=turn.now, rng=turn.rng)
    turn.log(imported, "DATA_IMPORTED", f"Imported {len(imported.quests)} quests.")
    turn.emit(EventType.SYSTEM_MESSAGE, "Save data imported.")
    return imported


def _init_save(state: GameState, payload: Any, turn: Turn) -> GameState:
    return savefile.load_document(payload, now=turn.now, rng=turn.rng)


def _acknowledge(state: GameState, payload: Any, turn: Turn) -> None:
    # The queue lives with the session; nothing in the document changes.
    return None


_HANDLERS: dict[CommandKind, Handler] = {
    CommandKind.ADD_QUEST: _add_quest,
    CommandKind.EDIT_QUEST: _edit_quest,
    CommandKind.DELETE_QUEST: _delete_quest,
    CommandKind.RESTORE_QUEST: _restore_quest,
    CommandKind.PERMANENT_DELETE_QUEST: _permanent_delete,
    CommandKind.TOGGLE_QUEST: _toggle_quest,
    CommandKind.TOGGLE_QUEST_STEP: _toggle_step,
    CommandKind.UPDATE_QUEST_PROGRESS: _update_progress,
    CommandKind.UPDATE_FOCUS_TIMER: _update_focus_timer,
    CommandKind.ACCEPT_SIDE_QUEST: _accept_offer,
    CommandKind.REROLL_NOTICE_BOARD_SLOT: _reroll_offer,
    CommandKind.SAVE_SIDE_QUEST_TEMPLATE: _save_side_template,
    CommandKind.DELETE_SIDE_QUEST_TEMPLATE: _delete_side_template,
    CommandKind.SAVE_EVENT_TEMPLATE: _save_event_template,
    CommandKind.DELETE_EVENT_TEMPLATE: _delete_event_template,
    CommandKind.SAVE_FOCUS_TEMPLATE: _save_focus_template,
    CommandKind.DELETE_FOCUS_TEMPLATE: _delete_focus_template,
    CommandKind.COMPLETE_ONBOARDING: _complete_onboarding,
    CommandKind.UPDATE_PROFILE: _update_profile,
    CommandKind.UPDATE_SETTINGS: _update_settings,
    CommandKind.DAILY_RESET: _daily_reset,
    CommandKind.REFRESH_NOTICE_BOARD: _refresh_board,
    CommandKind.TEST_ADD_XP: _add_xp,
    CommandKind.TEST_ADD_GOLD: _add_gold,
    CommandKind.TEST_ADD_STREAK: _add_streak,
    CommandKind.TEST_FAIL_ALL_QUESTS: _fail_all,
    CommandKind.FULL_RESET: _full_reset,
    CommandKind.IMPORT_DATA: _import_data,
    CommandKind.INIT_SAVE: _init_save,
    CommandKind.ACKNOWLEDGE_EVENTS: _acknowledge,
}
