"""Pure decision engine for burst reminders."""

from burst_notifier.services.burst.burst_schedule import (
    find_active_window,
    resolve_burst_windows,
)
from burst_notifier.services.burst.burst_types import (
    BurstEvent,
    BurstWindow,
    DailyTask,
    Decision,
    LastNotification,
    NotificationCandidate,
    NotificationType,
    ParticipantSnapshot,
    StudyConfig,
    build_burst_events,
    build_daily_tasks,
    parse_utc_offset,
)
from burst_notifier.services.burst.decision_engine import decide_notification
from burst_notifier.services.burst.eligibility_gate import check_eligibility
from burst_notifier.services.burst.message_selector import (
    RandomSource,
    default_random_source,
    select_message,
)
from burst_notifier.services.burst.pre_burst import resolve_pre_burst
from burst_notifier.services.burst.rate_limiter import is_rate_limited
from burst_notifier.services.burst.window_policy import (
    count_missed_days,
    evaluate_window_policy,
)

__all__ = [
    "BurstEvent",
    "BurstWindow",
    "DailyTask",
    "Decision",
    "LastNotification",
    "NotificationCandidate",
    "NotificationType",
    "ParticipantSnapshot",
    "RandomSource",
    "StudyConfig",
    "build_burst_events",
    "build_daily_tasks",
    "check_eligibility",
    "count_missed_days",
    "decide_notification",
    "default_random_source",
    "evaluate_window_policy",
    "find_active_window",
    "is_rate_limited",
    "parse_utc_offset",
    "resolve_burst_windows",
    "resolve_pre_burst",
    "select_message",
]
