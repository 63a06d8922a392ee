"""Burst notification decision — pure function over one account's snapshot.

(config, participant, events, tasks, last notification, today) → Decision.
No I/O; callers fetch inputs and act on the decision.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date

from burst_notifier.exceptions import ConfigurationError
from burst_notifier.services.burst.burst_schedule import (
    find_active_window,
    resolve_burst_windows,
)
from burst_notifier.services.burst.burst_types import (
    BurstEvent,
    DailyTask,
    Decision,
    LastNotification,
    NotificationCandidate,
    ParticipantSnapshot,
    StudyConfig,
)
from burst_notifier.services.burst.eligibility_gate import check_eligibility
from burst_notifier.services.burst.pre_burst import resolve_pre_burst
from burst_notifier.services.burst.rate_limiter import is_rate_limited
from burst_notifier.services.burst.window_policy import evaluate_window_policy

logger = logging.getLogger(__name__)


def decide_notification(
    config: StudyConfig,
    participant: ParticipantSnapshot,
    events: Sequence[BurstEvent],
    tasks: Iterable[DailyTask],
    last_notification: LastNotification | None,
    today: date,
) -> Decision:
    """Decide whether to remind a participant today, and with which pool.

    Order: eligibility gate → pre-burst → active window policy → rate limit.

    Raises:
        ConfigurationError: Overlapping burst windows, or the decided pool is empty.
    """
    eligibility = check_eligibility(participant, config)
    if not eligibility.eligible:
        return Decision.no_action(eligibility.reason_code or "ineligible")

    windows = resolve_burst_windows(events, config, participant)

    pre_burst = resolve_pre_burst(today, windows, config, participant)
    candidate: NotificationCandidate | None = pre_burst.candidate
    if candidate is None:
        window = find_active_window(windows, today)
        if window is None:
            return Decision.no_action(
                "pre_burst_no_group" if pre_burst.is_pre_burst_day else "outside_burst"
            )
        policy = evaluate_window_policy(window, tasks, today, config, participant)
        if policy.candidate is None:
            return Decision.no_action(policy.reason_code)
        candidate = policy.candidate

    if is_rate_limited(candidate, last_notification):
        logger.info(
            "Suppressing %s notification: already notified this cycle",
            candidate.notification_type.value,
            extra={
                "user_id": participant.user_id,
                "study_id": config.study_id,
                "notification_type": candidate.notification_type.value,
            },
        )
        return Decision.no_action("rate_limited", candidate.notification_type)

    if not candidate.message_pool:
        raise ConfigurationError(
            config.study_id,
            f"no messages configured for {candidate.notification_type.value} notifications",
        )

    return Decision.send(candidate)
