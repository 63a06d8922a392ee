#!/usr/bin/env python3
"""Run burst notifications for a study locally.

Usage:
    python scripts/run_notifications.py --study example-study
    python scripts/run_notifications.py --study example-study --date 2026-10-19
    python scripts/run_notifications.py --study example-study --user USER_ID

Without --user, processes every account in the study.
Exits 0 on success, 1 on failure.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from burst_notifier.clients.participant_api import ParticipantApiClient
from burst_notifier.db.session import SessionLocal
from burst_notifier.services.notification_history import NotificationHistoryStore
from burst_notifier.services.notification_worker import NotificationWorker
from burst_notifier.services.study_run import run_notifications_for_study


def main() -> int:
    parser = argparse.ArgumentParser(description="Send burst reminders for one study and date.")
    parser.add_argument("--study", required=True, help="Study ID")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=date.today(),
        help="Processing date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument("--user", help="Process a single user instead of the whole study")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    db = SessionLocal()
    client = ParticipantApiClient()
    try:
        worker = NotificationWorker(client, NotificationHistoryStore(db))
        if args.user:
            result = worker.process_account_for_date(args.study, args.date, args.user)
            notification_type = result.notification_type.value if result.notification_type else "-"
            print(
                f"status={result.status} "
                f"reason={result.reason_code} "
                f"type={notification_type}"
            )
            return 0

        summary = run_notifications_for_study(worker, args.study, args.date)
        print(
            f"status={summary['status']} "
            f"accounts_processed={summary['accounts_processed']} "
            f"notifications_sent={summary['notifications_sent']} "
            f"accounts_failed={summary['accounts_failed']}"
        )
        return 0 if summary["status"] == "completed" else 1
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        client.close()
        db.close()


if __name__ == "__main__":
    sys.exit(main())
