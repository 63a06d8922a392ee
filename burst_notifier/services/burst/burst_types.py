"""Value types for the burst notification engine.

All types are immutable snapshots rebuilt on every invocation. Dates are the
participant's local calendar dates; timestamps are timezone-aware datetimes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Any, Literal

from burst_notifier.services.burst.burst_constants import TASK_STATUS_FINISHED

_OFFSET_PATTERN = re.compile(r"^([+-])(\d{2}):(\d{2})$")


class NotificationType(str, Enum):
    """Reminder category. Values are what gets persisted."""

    PRE_BURST = "PRE_BURST"
    EARLY = "EARLY"
    LATE = "LATE"
    CUMULATIVE = "CUMULATIVE"


@dataclass(frozen=True)
class StudyConfig:
    """Per-study notification settings. Built once per invocation, never mutated.

    pre_burst_messages is ordered: the first data group the participant
    belongs to wins.
    """

    study_id: str
    burst_duration_days: int
    burst_start_event_ids: frozenset[str]
    burst_task_id: str
    early_late_cutoff_days: int
    excluded_data_groups: frozenset[str]
    early_messages: tuple[str, ...]
    late_messages: tuple[str, ...]
    cumulative_messages: tuple[str, ...]
    pre_burst_messages: tuple[tuple[str, tuple[str, ...]], ...]
    blackout_days_from_start: int
    blackout_days_from_end: int
    activities_to_complete_burst: int
    consecutive_missed_days_to_notify: int
    total_missed_days_to_notify: int
    app_url: str | None = None

    def messages_for(self, notification_type: NotificationType) -> tuple[str, ...]:
        """Return the within-window message pool for a notification type."""
        if notification_type == NotificationType.EARLY:
            return self.early_messages
        if notification_type == NotificationType.LATE:
            return self.late_messages
        if notification_type == NotificationType.CUMULATIVE:
            return self.cumulative_messages
        raise ValueError(f"No single pool for {notification_type.value}; use pre_burst_messages")


@dataclass(frozen=True)
class BurstEvent:
    """Activity event (enrollment, custom burst start, ...)."""

    event_id: str
    timestamp: datetime


@dataclass(frozen=True)
class DailyTask:
    """One day of the burst task."""

    scheduled_date: date
    completed: bool


@dataclass(frozen=True)
class BurstWindow:
    """Half-open local date interval [start, end) during which a burst is active."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def offset_of(self, day: date) -> int:
        return (day - self.start).days

    @property
    def duration_days(self) -> int:
        return (self.end - self.start).days


@dataclass(frozen=True)
class ParticipantSnapshot:
    """Participant attributes that drive eligibility and message targeting."""

    user_id: str
    phone_verified: bool
    utc_offset: timedelta | None
    data_groups: frozenset[str]
    has_active_consent: bool

    @property
    def tzinfo(self) -> timezone:
        """Participant's fixed-offset zone. UTC when no offset is known."""
        return timezone(self.utc_offset) if self.utc_offset is not None else timezone.utc

    def local_date(self, timestamp: datetime) -> date:
        """Calendar date of a timestamp in the participant's zone."""
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp.astimezone(self.tzinfo).date()

    def start_of_day(self, day: date) -> datetime:
        """Local midnight of a date, as an aware datetime."""
        return datetime.combine(day, time.min, tzinfo=self.tzinfo)

    @classmethod
    def from_profile(cls, study_id: str, profile: Mapping[str, Any]) -> ParticipantSnapshot:
        """Build a snapshot from a raw participant profile.

        Consent is active when the study's consent history holds at least one
        record without ``withdrewOn``.
        """
        histories = profile.get("consentHistories")
        records = histories.get(study_id) if isinstance(histories, Mapping) else None
        if not isinstance(records, list):
            records = []
        has_active_consent = any(
            isinstance(record, Mapping) and not record.get("withdrewOn")
            for record in records
        )
        data_groups = profile.get("dataGroups")
        if not isinstance(data_groups, (list, tuple, set, frozenset)):
            data_groups = ()
        return cls(
            user_id=str(profile.get("id") or ""),
            phone_verified=profile.get("phoneVerified") is True,
            utc_offset=parse_utc_offset(profile.get("timeZone")),
            data_groups=frozenset(str(g) for g in data_groups),
            has_active_consent=has_active_consent,
        )


@dataclass(frozen=True)
class LastNotification:
    """Most recent notification sent to a user."""

    user_id: str
    timestamp: datetime
    notification_type: NotificationType
    message: str


@dataclass(frozen=True)
class NotificationCandidate:
    """A reminder that is due, before rate limiting.

    cycle_start/cycle_end bound the burst cycle the candidate belongs to; a
    prior notification inside [cycle_start, cycle_end) suppresses it.
    """

    notification_type: NotificationType
    message_pool: tuple[str, ...]
    reason_code: str
    cycle_start: datetime
    cycle_end: datetime


@dataclass(frozen=True)
class Decision:
    """Outcome of the per-account decision."""

    action: Literal["no_action", "send"]
    reason_code: str
    notification_type: NotificationType | None = None
    message_pool: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def no_action(
        cls, reason_code: str, notification_type: NotificationType | None = None
    ) -> Decision:
        return cls(action="no_action", reason_code=reason_code, notification_type=notification_type)

    @classmethod
    def send(cls, candidate: NotificationCandidate) -> Decision:
        return cls(
            action="send",
            reason_code=candidate.reason_code,
            notification_type=candidate.notification_type,
            message_pool=candidate.message_pool,
        )


def parse_utc_offset(raw: Any) -> timedelta | None:
    """Parse "+HH:MM" / "-HH:MM" into a timedelta. None when missing or malformed."""
    if not raw or not isinstance(raw, str):
        return None
    match = _OFFSET_PATTERN.match(raw.strip())
    if match is None:
        return None
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    return -delta if sign == "-" else delta


def build_daily_tasks(
    records: Iterable[Mapping[str, Any]],
    participant: ParticipantSnapshot,
) -> list[DailyTask]:
    """Collapse task-history records into one DailyTask per local date.

    A date counts as completed if any record scheduled on it is finished.
    Records without a parseable scheduledOn are skipped.
    """
    completed_by_date: dict[date, bool] = {}
    for record in records:
        scheduled_on = _parse_timestamp(record.get("scheduledOn"))
        if scheduled_on is None:
            continue
        day = participant.local_date(scheduled_on)
        finished = str(record.get("status") or "").lower() == TASK_STATUS_FINISHED
        completed_by_date[day] = completed_by_date.get(day, False) or finished
    return [
        DailyTask(scheduled_date=day, completed=done)
        for day, done in sorted(completed_by_date.items())
    ]


def build_burst_events(raw_events: Iterable[Mapping[str, Any]]) -> list[BurstEvent]:
    """Convert raw activity events, skipping any without id or timestamp."""
    events: list[BurstEvent] = []
    for raw in raw_events:
        event_id = raw.get("eventId")
        timestamp = _parse_timestamp(raw.get("timestamp"))
        if not event_id or timestamp is None:
            continue
        events.append(BurstEvent(event_id=str(event_id), timestamp=timestamp))
    return events


def _parse_timestamp(raw: Any) -> datetime | None:
    if isinstance(raw, datetime):
        return raw if raw.tzinfo is not None else raw.replace(tzinfo=timezone.utc)
    if not raw or not isinstance(raw, str):
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)
