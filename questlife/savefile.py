from __future__ import annotations

import json
import logging
import random
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ValidationError

from questlife.content import new_game
from questlife.errors import ImportDataError
from questlife.models import GameSettings, GameState, UserStats

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ("stats", "quests")
MERGED_SECTIONS = {"stats": UserStats, "settings": GameSettings}


def _on_disk_keys(data: dict, model: type[BaseModel]) -> dict:
    # Python field names and legacy keys map onto the camelCase key the default document uses.
    index: dict[str, str] = {}
    for name, info in model.model_fields.items():
        key = info.serialization_alias or info.alias or name
        index[name] = key
        if isinstance(info.validation_alias, AliasChoices):
            for choice in info.validation_alias.choices:
                if isinstance(choice, str):
                    index[choice] = key
    return {index.get(key, key): value for key, value in data.items()}


def dump_document(state: GameState) -> dict:
    return state.model_dump(mode="json", by_alias=True)


def dumps(state: GameState, indent: int | None = None) -> str:
    return json.dumps(dump_document(state), indent=indent, ensure_ascii=False)


def loads(raw: str | bytes, *, now: datetime | None = None, rng: random.Random | None = None) -> GameState:
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ImportDataError(f"Save document is not valid JSON: {exc}") from exc
    return load_document(payload, now=now, rng=rng)


def load_document(payload: Any, *, now: datetime | None = None, rng: random.Random | None = None) -> GameState:
    """Build a GameState from a stored or imported document.

    Missing or legacy fields are filled from a fresh default game, section by
    section. A payload that is not an object, or lacks a required section,
    raises ImportDataError.
    """
    if isinstance(payload, (str, bytes)):
        return loads(payload, now=now, rng=rng)
    if isinstance(payload, GameState):
        return payload.model_copy(deep=True)
    if not isinstance(payload, dict):
        raise ImportDataError(f"Save document must be an object, got {type(payload).__name__}")

    missing = [name for name in REQUIRED_SECTIONS if name not in payload]
    if missing:
        raise ImportDataError(f"Save document is missing required sections: {', '.join(missing)}")

    defaults = dump_document(new_game(now or datetime.now(), rng or random.Random()))
    payload = _on_disk_keys(payload, GameState)
    merged = {**defaults, **payload}
    for section, model in MERGED_SECTIONS.items():
        given = payload.get(section)
        if given is not None and not isinstance(given, dict):
            raise ImportDataError(f"Section {section!r} must be an object")
        merged[section] = {**defaults[section], **_on_disk_keys(given or {}, model)}
    for section in ("quests", "archivedQuests", "activityLog"):
        if merged.get(section) is None:
            merged[section] = []
    for section in ("sideQuestTemplates", "eventTemplates", "focusTemplates", "availableSideQuests"):
        if merged.get(section) is None:
            merged[section] = defaults[section]

    try:
        state = GameState.model_validate(merged)
    except ValidationError as exc:
        raise ImportDataError(f"Save document failed validation: {exc}") from exc
    logger.debug("Loaded save document with %d quests", len(state.quests))
    return state
