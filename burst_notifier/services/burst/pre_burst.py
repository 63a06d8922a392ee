"""Pre-burst resolver — reminder on the day before a burst starts."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from burst_notifier.services.burst.burst_types import (
    BurstWindow,
    NotificationCandidate,
    NotificationType,
    ParticipantSnapshot,
    StudyConfig,
)


@dataclass
class PreBurstResult:
    """Result of pre-burst check.

    is_pre_burst_day is True when today is the day before some burst; candidate
    is None when the participant is in no configured pre-burst data group.
    """

    is_pre_burst_day: bool
    candidate: NotificationCandidate | None


def resolve_pre_burst(
    today: date,
    windows: Sequence[BurstWindow],
    config: StudyConfig,
    participant: ParticipantSnapshot,
) -> PreBurstResult:
    """Return a PRE_BURST candidate if today is the day before a burst starts."""
    upcoming = next(
        (w for w in windows if w.start - timedelta(days=1) == today),
        None,
    )
    if upcoming is None:
        return PreBurstResult(is_pre_burst_day=False, candidate=None)

    for data_group, messages in config.pre_burst_messages:
        if data_group in participant.data_groups:
            return PreBurstResult(
                is_pre_burst_day=True,
                candidate=NotificationCandidate(
                    notification_type=NotificationType.PRE_BURST,
                    message_pool=messages,
                    reason_code="pre_burst",
                    cycle_start=participant.start_of_day(today),
                    cycle_end=participant.start_of_day(upcoming.end),
                ),
            )
    return PreBurstResult(is_pre_burst_day=True, candidate=None)
