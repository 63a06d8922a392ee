#!/usr/bin/env python3
"""Store a study's notification config from studies/<study_id>.yaml.

Usage:
    python scripts/seed_study_config.py example-study

Validates the YAML and upserts it into notification_configs.
Exits 0 on success, 1 on failure.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from burst_notifier.db.session import SessionLocal
from burst_notifier.services.notification_history import NotificationHistoryStore
from burst_notifier.studies.loader import load_study_config_document


def main() -> int:
    if len(sys.argv) != 2:
        print("Usage: python scripts/seed_study_config.py STUDY_ID", file=sys.stderr)
        return 1
    study_id = sys.argv[1]

    db = SessionLocal()
    try:
        document = load_study_config_document(study_id)
        config = NotificationHistoryStore(db).put_notification_config_for_study(study_id, document)
        print(
            f"study_id={config.study_id} "
            f"burst_duration_days={config.burst_duration_days} "
            f"burst_start_events={len(config.burst_start_event_ids)}"
        )
        return 0
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
