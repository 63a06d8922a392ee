"""Rate limiter — at most one notification per participant per burst cycle."""

from __future__ import annotations

from burst_notifier.services.burst.burst_types import (
    LastNotification,
    NotificationCandidate,
)


def is_rate_limited(
    candidate: NotificationCandidate,
    last_notification: LastNotification | None,
) -> bool:
    """Return True when the last notification falls inside the candidate's cycle.

    The cycle is [cycle_start, cycle_end): the burst window for within-window
    candidates, [pre-burst day, window end) for pre-burst candidates.
    """
    if last_notification is None:
        return False
    return candidate.cycle_start <= last_notification.timestamp < candidate.cycle_end
