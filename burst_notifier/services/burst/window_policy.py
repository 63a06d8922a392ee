"""Window policy — missed-day rules inside an active burst window.

Evaluated in strict order; the first rule that fires decides:
1. Blackout margins at the start and end of the window → nothing.
2. Completion shortcut: enough tasks done this burst → nothing.
3. Today's task done → nothing.
4. Consecutive missed days >= threshold → EARLY or LATE (wins over 5).
5. Total missed days >= threshold → CUMULATIVE.
6. Otherwise nothing.

Days with no task record are neither completed nor missed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from burst_notifier.services.burst.burst_types import (
    BurstWindow,
    DailyTask,
    NotificationCandidate,
    NotificationType,
    ParticipantSnapshot,
    StudyConfig,
)

logger = logging.getLogger(__name__)


@dataclass
class MissedDayCounts:
    """Completion stats for [window.start, today]."""

    completed: int
    consecutive_missed: int
    total_missed: int
    did_today: bool


def count_missed_days(
    tasks: Iterable[DailyTask],
    window: BurstWindow,
    today: date,
) -> MissedDayCounts:
    """Count completed, consecutive-missed and total-missed days in [window.start, today]."""
    by_date = {
        task.scheduled_date: task.completed
        for task in tasks
        if window.start <= task.scheduled_date <= today
    }
    completed = sum(1 for done in by_date.values() if done)
    total_missed = sum(1 for done in by_date.values() if not done)

    consecutive = 0
    day = today
    while day >= window.start and by_date.get(day) is False:
        consecutive += 1
        day -= timedelta(days=1)

    return MissedDayCounts(
        completed=completed,
        consecutive_missed=consecutive,
        total_missed=total_missed,
        did_today=by_date.get(today) is True,
    )


@dataclass
class WindowPolicyResult:
    """Result of window policy evaluation."""

    candidate: NotificationCandidate | None
    reason_code: str


def evaluate_window_policy(
    window: BurstWindow,
    tasks: Iterable[DailyTask],
    today: date,
    config: StudyConfig,
    participant: ParticipantSnapshot,
) -> WindowPolicyResult:
    """Apply blackout, completion and missed-day rules for today within window."""
    offset = window.offset_of(today)
    duration = config.burst_duration_days

    if offset < config.blackout_days_from_start or offset >= duration - config.blackout_days_from_end:
        return WindowPolicyResult(candidate=None, reason_code="blackout")

    counts = count_missed_days(tasks, window, today)
    logger.debug(
        "Burst day %s: completed=%s consecutive_missed=%s total_missed=%s",
        offset,
        counts.completed,
        counts.consecutive_missed,
        counts.total_missed,
        extra={"user_id": participant.user_id, "study_id": config.study_id},
    )

    if counts.completed >= config.activities_to_complete_burst:
        return WindowPolicyResult(candidate=None, reason_code="burst_complete")

    if counts.did_today:
        return WindowPolicyResult(candidate=None, reason_code="did_today")

    cycle_start = participant.start_of_day(window.start)
    cycle_end = participant.start_of_day(window.end)

    if counts.consecutive_missed >= config.consecutive_missed_days_to_notify:
        notification_type = (
            NotificationType.EARLY
            if offset < config.early_late_cutoff_days
            else NotificationType.LATE
        )
        return WindowPolicyResult(
            candidate=NotificationCandidate(
                notification_type=notification_type,
                message_pool=config.messages_for(notification_type),
                reason_code="consecutive_missed",
                cycle_start=cycle_start,
                cycle_end=cycle_end,
            ),
            reason_code="consecutive_missed",
        )

    if counts.total_missed >= config.total_missed_days_to_notify:
        return WindowPolicyResult(
            candidate=NotificationCandidate(
                notification_type=NotificationType.CUMULATIVE,
                message_pool=config.cumulative_messages,
                reason_code="cumulative_missed",
                cycle_start=cycle_start,
                cycle_end=cycle_end,
            ),
            reason_code="cumulative_missed",
        )

    return WindowPolicyResult(candidate=None, reason_code="below_threshold")
