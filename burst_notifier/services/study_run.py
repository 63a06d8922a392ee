"""Process every account in a study for one date.

Accounts are independent units of work: a failure on one account is logged
and counted, and the run moves on. A missing or invalid study config aborts
the run before any account is touched.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Any

from burst_notifier.services.notification_worker import NotificationWorker

logger = logging.getLogger(__name__)


def run_notifications_for_study(
    worker: NotificationWorker,
    study_id: str,
    today: date,
) -> dict[str, Any]:
    """Run the notification decision for every account in the study.

    Returns:
        Summary dict: status, study_id, as_of, accounts_processed,
        notifications_sent, accounts_failed, failures_by_kind.

    Raises:
        ConfigurationError: The study has no usable notification config.
        TransientIOError: Listing accounts failed.
    """
    config = worker.history_store.get_notification_config_for_study(study_id)
    logger.info("Notification run starting", extra={"study_id": study_id, "date": today.isoformat()})

    processed = 0
    sent = 0
    failures: Counter[str] = Counter()
    for summary in worker.participant_api.get_all_account_summaries(study_id):
        user_id = summary.get("id")
        if not user_id:
            continue
        processed += 1
        try:
            result = worker.process_account_for_date(study_id, today, user_id, config=config)
        except Exception as exc:
            failures[type(exc).__name__] += 1
            logger.exception(
                "Notification processing failed for account",
                extra={"study_id": study_id, "user_id": user_id},
            )
            continue
        if result.status == "sent":
            sent += 1

    failed = sum(failures.values())
    logger.info(
        "Notification run finished: processed=%s sent=%s failed=%s",
        processed,
        sent,
        failed,
        extra={"study_id": study_id},
    )
    return {
        "status": "completed" if failed == 0 else "completed_with_errors",
        "study_id": study_id,
        "as_of": today,
        "accounts_processed": processed,
        "notifications_sent": sent,
        "accounts_failed": failed,
        "failures_by_kind": dict(failures),
    }
