#!/usr/bin/env python3
"""
QuestLife - save slot launcher

What it does:
- status  shows the hero, active quests and the notice board
- tick    runs the day transition if the date changed since the last one
- export  writes the save slot to a JSON file
- import  loads a JSON save (browser exports included) into the slot
- reset   replaces the slot with a fresh game

Usage:
  python run.py status
  python run.py tick
  python run.py export backup.json
  python run.py import backup.json
  python run.py --db other.sqlite3 reset
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path

from questlife import db
from questlife.commands import CommandKind
from questlife.errors import QuestLifeError
from questlife.jobs.midnight_tick import run_midnight_tick, send_midnight
from questlife.mechanics import level_threshold
from questlife.session import GameSession


def print_status(session: GameSession) -> None:
    state = session.state
    stats = state.stats
    print(f"{stats.name} - level {stats.level} ({stats.current_xp}/{level_threshold(stats.level, stats.xp_modifier)} XP)")
    print(f"Gold {stats.gold}  QP {stats.quest_points}  Streak {stats.global_streak}  Last rollover {state.last_rollover_date}")
    print("\nActive quests:")
    for quest in state.quests:
        mark = "x" if quest.completed else " "
        risk = " !" if quest.is_risk else ""
        print(f"  [{mark}] {quest.type:<11} {quest.title}{risk}")
    print("\nNotice board:")
    for offer in state.available_side_quests:
        print(f"  {offer.id}  {offer.title}  (+{offer.xp_reward} XP, +{offer.gold_reward}g)")


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="QuestLife",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """
            Local launcher for the QuestLife save slot.
            """
        ).strip(),
    )
    parser.add_argument("--db", type=Path, help="Save slot path (default: $QUESTLIFE_DB or data.sqlite3)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Show the current hero and quests")
    sub.add_parser("tick", help="Run the day transition if due")
    export = sub.add_parser("export", help="Write the save slot to a JSON file")
    export.add_argument("path", type=Path)
    load = sub.add_parser("import", help="Load a JSON save into the slot")
    load.add_argument("path", type=Path)
    sub.add_parser("reset", help="Start over with a fresh game")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.db:
        db.DB_PATH = args.db

    if args.command == "tick":
        result = run_midnight_tick()
        send_midnight(result)
        print(f"Rolled over to {result['today']}" if result["rolled_over"] else "Already up to date.")
        return 0

    if args.command == "export":
        print(f"Exported to {db.export_save_data(args.path)}")
        return 0

    session = GameSession.from_save_slot()
    if args.command == "import":
        session.dispatch(CommandKind.IMPORT_DATA, args.path.read_text(encoding="utf-8-sig"))
    elif args.command == "reset":
        session.dispatch(CommandKind.FULL_RESET)
    session.save()

    for event in session.pending_events():
        print(f"* {event.message}")
    session.dispatch(CommandKind.ACKNOWLEDGE_EVENTS)
    print_status(session)
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except QuestLifeError as e:
        print(f"\nERROR: {e}")
        sys.exit(1)
