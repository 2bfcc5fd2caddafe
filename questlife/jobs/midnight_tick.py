from __future__ import annotations

import logging
import os
from datetime import datetime

from questlife.notifier import LogNotifier, NoopNotifier
from questlife.session import GameSession

logger = logging.getLogger(__name__)


def _build_notifier():
    if os.environ.get("QUESTLIFE_QUIET"):
        return NoopNotifier()
    return LogNotifier()


def run_midnight_tick(now: datetime | None = None) -> dict:
    kwargs = {"clock": (lambda: now)} if now is not None else {}
    session = GameSession.from_save_slot(**kwargs)
    transition = session.check_rollover()
    session.save()

    today = session.state.last_rollover_date
    if transition is None:
        return {"today": today, "rolled_over": False, "failures": 0, "events": []}
    failures = next(
        (e.payload.get("failures", 0) for e in transition.events if e.payload and "failures" in e.payload),
        0,
    )
    return {"today": today, "rolled_over": transition.accepted, "failures": failures, "events": transition.events}


def send_midnight(result: dict) -> int:
    if not result["rolled_over"]:
        return 0
    return _build_notifier().publish(result["events"])


def main() -> None:
    result = run_midnight_tick()
    sent = send_midnight(result)
    logger.info("Midnight tick for %s: rolled over=%s, %d notices", result["today"], result["rolled_over"], sent)


if __name__ == "__main__":
    main()
