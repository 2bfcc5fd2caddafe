from __future__ import annotations

from datetime import datetime

from questlife.jobs.midnight_tick import run_midnight_tick, send_midnight


def get_schedule_context(now: datetime | None = None) -> dict:
    now = now or datetime.now()
    return {
        "local_date": now.date().isoformat(),
        "local_hour": now.hour,
        "local_minute": now.minute,
    }


def main() -> None:
    ctx = get_schedule_context()
    hour = ctx["local_hour"]
    minute = ctx["local_minute"]

    # Run this command every 5-10 minutes via cron/systemd timer.
    if hour == 0 and minute < 15:
        send_midnight(run_midnight_tick())


if __name__ == "__main__":
    main()
