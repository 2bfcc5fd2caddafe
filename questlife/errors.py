from __future__ import annotations


class QuestLifeError(Exception):
    pass


class ImportDataError(QuestLifeError, ValueError):
    """A save document could not be parsed or is missing required sections."""


class InvalidCommandError(QuestLifeError, ValueError):
    """An unknown command kind, or a payload that does not validate."""


class SaveSlotError(QuestLifeError, RuntimeError):
    pass
