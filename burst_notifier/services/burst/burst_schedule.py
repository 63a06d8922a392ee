"""Burst schedule resolution — activity events to concrete burst windows."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from burst_notifier.exceptions import ConfigurationError
from burst_notifier.services.burst.burst_types import (
    BurstEvent,
    BurstWindow,
    ParticipantSnapshot,
    StudyConfig,
)


def resolve_burst_windows(
    events: Iterable[BurstEvent],
    config: StudyConfig,
    participant: ParticipantSnapshot,
) -> list[BurstWindow]:
    """Return the participant's burst windows, sorted by start date.

    Only events whose id is a configured burst-start event anchor a window.

    Raises:
        ConfigurationError: Two windows overlap.
    """
    duration = timedelta(days=config.burst_duration_days)
    starts = sorted({
        participant.local_date(event.timestamp)
        for event in events
        if event.event_id in config.burst_start_event_ids
    })
    windows = [BurstWindow(start=start, end=start + duration) for start in starts]
    for previous, current in zip(windows, windows[1:]):
        if current.start < previous.end:
            raise ConfigurationError(
                config.study_id,
                f"burst windows overlap for user {participant.user_id}: "
                f"[{previous.start}, {previous.end}) and [{current.start}, {current.end})",
            )
    return windows


def find_active_window(windows: Iterable[BurstWindow], today: date) -> BurstWindow | None:
    """Return the window containing today, or None when outside every burst."""
    for window in windows:
        if window.contains(today):
            return window
    return None
