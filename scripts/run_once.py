from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from morning_secretary.app.run import run_once
from morning_secretary.config.paths import LOGS_DIR
from morning_secretary.errors import AuthFailureError


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Fetch unread mail and today's events, then send the morning briefing."
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Print the briefing instead of sending it.",
    )
    parser.add_argument(
        "--no-store",
        dest="store_report",
        action="store_false",
        help="Do not record the summary in the report history.",
    )
    parser.add_argument(
        "--verbose",
        dest="verbose",
        action="store_true",
        help="Print progress and debug logging.",
    )
    args = parser.parse_args()

    # Scheduled runs have no terminal, so the log file is the record of what happened.
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(LOGS_DIR / "morning-secretary.log", encoding="utf-8"),
        ],
    )

    print("[run] Morning briefing starting...")
    try:
        summary = run_once(
            dry_run=args.dry_run,
            store_report=args.store_report,
            verbose=args.verbose,
        )
    except AuthFailureError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2

    print(
        f"[done] messages {summary['messages_shown']}/{summary['messages_total']}, "
        f"events {summary['events_shown']}/{summary['events_total']}, "
        f"delivered={summary['delivered']}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
