"""Unit tests for the pure burst notification decision."""

from __future__ import annotations

from datetime import timedelta

import pytest

from burst_notifier.exceptions import ConfigurationError
from burst_notifier.services.burst import (
    BurstEvent,
    DailyTask,
    LastNotification,
    NotificationType,
    decide_notification,
)
from tests.factories import day, make_config, make_events, make_participant, make_tasks
from tests.test_constants import (
    ENROLLMENT_TIME,
    EVENT_ID_ENROLLMENT,
    MESSAGE_CUMULATIVE,
    MESSAGE_EARLY,
    MESSAGE_LATE,
    MESSAGE_PRE_BURST_1,
    PREBURST_GROUP_1,
    TEST_DATE,
    USER_ID,
)


def _decide(
    today=TEST_DATE,
    *,
    config=None,
    participant=None,
    events=None,
    tasks=None,
    last_notification=None,
):
    return decide_notification(
        config or make_config(),
        participant or make_participant(),
        make_events() if events is None else events,
        make_tasks() if tasks is None else tasks,
        last_notification,
        today,
    )


def _last(timestamp, notification_type=NotificationType.EARLY) -> LastNotification:
    return LastNotification(
        user_id=USER_ID,
        timestamp=timestamp,
        notification_type=notification_type,
        message="previous",
    )


class TestScenarios:
    """Reference scenarios: 9-day burst, cutoff 5, consecutive 2, total 3."""

    def test_scenario_a_no_activities_early(self) -> None:
        """Nothing done in the first 4 days, evaluated on day 3 → EARLY."""
        decision = _decide(day(3))
        assert decision.action == "send"
        assert decision.notification_type == NotificationType.EARLY
        assert decision.message_pool == (MESSAGE_EARLY,)
        assert decision.reason_code == "consecutive_missed"

    def test_scenario_b_cumulative(self) -> None:
        """Days 1 and 3 done, 0/2/4 missed, day 4 → CUMULATIVE."""
        decision = _decide(day(4), tasks=make_tasks({1, 3}))
        assert decision.action == "send"
        assert decision.notification_type == NotificationType.CUMULATIVE
        assert decision.message_pool == (MESSAGE_CUMULATIVE,)

    def test_scenario_c_late(self) -> None:
        """Days 0-3 done, 4-5 missed, day 5 (cutoff 5) → LATE."""
        decision = _decide(day(5), tasks=make_tasks({0, 1, 2, 3}))
        assert decision.action == "send"
        assert decision.notification_type == NotificationType.LATE
        assert decision.message_pool == (MESSAGE_LATE,)

    def test_scenario_d_burst_complete(self) -> None:
        """6 of first 8 days done, days 6-7 missed, day 7 → nothing."""
        decision = _decide(day(7), tasks=make_tasks({0, 1, 2, 3, 4, 5}))
        assert decision.action == "no_action"
        assert decision.reason_code == "burst_complete"

    def test_scenario_e_notified_this_burst_suppressed(self) -> None:
        decision = _decide(day(3), last_notification=_last(ENROLLMENT_TIME))
        assert decision.action == "no_action"
        assert decision.reason_code == "rate_limited"
        assert decision.notification_type == NotificationType.EARLY

    def test_scenario_e_notified_before_burst_sends(self) -> None:
        decision = _decide(
            day(3), last_notification=_last(ENROLLMENT_TIME - timedelta(days=10))
        )
        assert decision.action == "send"
        assert decision.notification_type == NotificationType.EARLY

    def test_scenario_f_pre_burst_group(self) -> None:
        participant = make_participant(data_groups=frozenset({"other", PREBURST_GROUP_1}))
        decision = _decide(day(-1), participant=participant)
        assert decision.action == "send"
        assert decision.notification_type == NotificationType.PRE_BURST
        assert decision.message_pool == (MESSAGE_PRE_BURST_1,)

    def test_scenario_f_pre_burst_no_group(self) -> None:
        decision = _decide(day(-1))
        assert decision.action == "no_action"
        assert decision.reason_code == "pre_burst_no_group"


class TestPrecedence:
    def test_consecutive_beats_cumulative(self) -> None:
        """Both thresholds met → EARLY, never CUMULATIVE."""
        decision = _decide(day(4), tasks=make_tasks({1}))
        assert decision.notification_type == NotificationType.EARLY

    def test_completion_beats_missed_thresholds(self) -> None:
        config = make_config(activities_to_complete_burst=2, blackout_days_from_start=0)
        decision = _decide(day(5), config=config, tasks=make_tasks({0, 1}))
        assert decision.action == "no_action"
        assert decision.reason_code == "burst_complete"

    def test_pre_burst_notice_does_not_block_window_notification(self) -> None:
        last = _last(ENROLLMENT_TIME - timedelta(days=1), NotificationType.PRE_BURST)
        decision = _decide(day(3), last_notification=last)
        assert decision.action == "send"
        assert decision.notification_type == NotificationType.EARLY

    def test_next_burst_not_suppressed_by_previous_burst(self) -> None:
        """A notification during burst 1 does not block burst 2 (starts on day 14)."""
        last = _last(ENROLLMENT_TIME + timedelta(days=4))
        tasks = [DailyTask(scheduled_date=day(14 + i), completed=False) for i in range(4)]
        decision = _decide(day(17), tasks=tasks, last_notification=last)
        assert decision.action == "send"
        assert decision.notification_type == NotificationType.EARLY


class TestOutsideBurst:
    @pytest.mark.parametrize("offset", [-2, 12, 23])
    def test_outside_windows(self, offset: int) -> None:
        decision = _decide(day(offset))
        assert decision.action == "no_action"
        assert decision.reason_code == "outside_burst"

    @pytest.mark.parametrize("offset", [0, 1, 2, 8])
    def test_blackout_days(self, offset: int) -> None:
        decision = _decide(day(offset))
        assert decision.action == "no_action"
        assert decision.reason_code == "blackout"

    def test_no_events(self) -> None:
        decision = _decide(events=[])
        assert decision.reason_code == "outside_burst"

    def test_unrelated_events_ignored(self) -> None:
        events = [BurstEvent(event_id="unrelated-event", timestamp=ENROLLMENT_TIME)]
        decision = _decide(events=events)
        assert decision.reason_code == "outside_burst"


class TestBelowThreshold:
    def test_no_activities_recorded(self) -> None:
        decision = _decide(tasks=[])
        assert decision.action == "no_action"
        assert decision.reason_code == "below_threshold"

    def test_did_todays_activity(self) -> None:
        decision = _decide(tasks=make_tasks({3}))
        assert decision.reason_code == "did_today"

    def test_did_previous_days(self) -> None:
        decision = _decide(tasks=make_tasks({0, 1, 2}))
        assert decision.action == "no_action"
        assert decision.reason_code == "below_threshold"


class TestEligibilityAndConfig:
    def test_ineligible_participant_never_notified(self) -> None:
        decision = _decide(participant=make_participant(phone_verified=False))
        assert decision.action == "no_action"
        assert decision.reason_code == "ineligible_phone"

    def test_empty_pool_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            _decide(config=make_config(early_messages=()))

    def test_empty_pool_is_not_checked_when_rate_limited(self) -> None:
        decision = _decide(
            day(3),
            config=make_config(early_messages=()),
            last_notification=_last(ENROLLMENT_TIME),
        )
        assert decision.action == "no_action"
        assert decision.reason_code == "rate_limited"

    def test_overlapping_windows_is_configuration_error(self) -> None:
        events = [
            BurstEvent(event_id=EVENT_ID_ENROLLMENT, timestamp=ENROLLMENT_TIME),
            BurstEvent(
                event_id="custom:activityBurst2Start",
                timestamp=ENROLLMENT_TIME + timedelta(days=5),
            ),
        ]
        with pytest.raises(ConfigurationError, match="overlap"):
            _decide(events=events)
