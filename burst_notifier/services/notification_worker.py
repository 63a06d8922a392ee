"""Notification worker — decide and send one participant's burst reminder for a date.

Fetches inputs from the participant API and the notification history store,
runs the pure decision engine, and on a send decision picks a message,
resolves its template variables, records it and sends the SMS.

Re-invocation for the same (study, date, user) is safe: the record written
before sending makes the rate limiter suppress the repeat. Record write and
SMS send are not transactional.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Literal

from burst_notifier.services.burst import (
    DailyTask,
    LastNotification,
    NotificationType,
    ParticipantSnapshot,
    RandomSource,
    StudyConfig,
    build_burst_events,
    build_daily_tasks,
    check_eligibility,
    decide_notification,
    default_random_source,
    find_active_window,
    resolve_burst_windows,
    select_message,
)
from burst_notifier.services.template_variables import TemplateVariableResolver

if TYPE_CHECKING:
    from burst_notifier.clients.participant_api import ParticipantApiClient
    from burst_notifier.services.notification_history import NotificationHistoryStore

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Outcome of processing one account for one date."""

    status: Literal["no_action", "sent"]
    reason_code: str
    notification_type: NotificationType | None = None
    raw_message: str | None = None
    message: str | None = None


def _utc_now() -> datetime:
    return datetime.now(UTC)


class NotificationWorker:
    """Per-account notification processing.

    Holds only collaborators; no per-account state is kept between calls, so
    one worker may serve independent accounts.
    """

    def __init__(
        self,
        participant_api: ParticipantApiClient,
        history_store: NotificationHistoryStore,
        template_resolver: TemplateVariableResolver | None = None,
        *,
        rng: RandomSource | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.participant_api = participant_api
        self.history_store = history_store
        self.template_resolver = template_resolver or TemplateVariableResolver(participant_api)
        self.rng = rng or default_random_source()
        self.clock = clock

    def process_account_for_date(
        self,
        study_id: str,
        today: date,
        user_id: str,
        *,
        config: StudyConfig | None = None,
    ) -> ProcessResult:
        """Decide and, if due, send today's reminder for one participant.

        Args:
            study_id: Study the participant is enrolled in.
            today: Processing date, in the participant's local calendar.
            user_id: Participant to process.
            config: Preloaded study config (batch runs load it once).

        Raises:
            ConfigurationError: Missing/invalid config or empty message pool.
            TransientIOError: A collaborator call failed.
        """
        log_extra = {"study_id": study_id, "user_id": user_id, "date": today.isoformat()}
        if config is None:
            config = self.history_store.get_notification_config_for_study(study_id)

        profile = self.participant_api.get_participant(study_id, user_id)
        participant = ParticipantSnapshot.from_profile(study_id, profile)
        if participant.user_id != user_id:
            participant = ParticipantSnapshot(
                user_id=user_id,
                phone_verified=participant.phone_verified,
                utc_offset=participant.utc_offset,
                data_groups=participant.data_groups,
                has_active_consent=participant.has_active_consent,
            )

        eligibility = check_eligibility(participant, config)
        if not eligibility.eligible:
            logger.info(
                "Participant not eligible for notifications: %s",
                eligibility.reason_code,
                extra={**log_extra, "reason_code": eligibility.reason_code},
            )
            return ProcessResult(
                status="no_action",
                reason_code=eligibility.reason_code or "ineligible",
            )

        events = build_burst_events(self.participant_api.get_activity_events(study_id, user_id))
        windows = resolve_burst_windows(events, config, participant)
        window = find_active_window(windows, today)
        tasks: list[DailyTask] = []
        if window is not None:
            records = self.participant_api.get_task_history(
                study_id,
                user_id,
                config.burst_task_id,
                participant.start_of_day(window.start),
                participant.start_of_day(today + timedelta(days=1)),
            )
            tasks = build_daily_tasks(records, participant)

        last_notification = self.history_store.get_last_notification_time_for_user(user_id)

        decision = decide_notification(
            config, participant, events, tasks, last_notification, today
        )
        if decision.action == "no_action":
            decision_extra = {**log_extra, "reason_code": decision.reason_code}
            if decision.notification_type is not None:
                decision_extra["notification_type"] = decision.notification_type.value
            logger.info("No notification: %s", decision.reason_code, extra=decision_extra)
            return ProcessResult(
                status="no_action",
                reason_code=decision.reason_code,
                notification_type=decision.notification_type,
            )

        return self._dispatch(
            config,
            participant,
            decision.notification_type,
            decision.message_pool,
            decision.reason_code,
            log_extra,
        )

    def _dispatch(
        self,
        config: StudyConfig,
        participant: ParticipantSnapshot,
        notification_type: NotificationType,
        message_pool: tuple[str, ...],
        reason_code: str,
        log_extra: dict,
    ) -> ProcessResult:
        raw_message = select_message(
            message_pool,
            self.rng,
            study_id=config.study_id,
            notification_type=notification_type,
        )
        resolution = self.template_resolver.resolve_template_variables(
            config, participant, raw_message
        )
        if not resolution.resolved:
            logger.warning(
                "User not configured for %s notification: missing ${%s}",
                notification_type.value,
                resolution.missing_variable,
                extra={
                    **log_extra,
                    "notification_type": notification_type.value,
                    "reason_code": "user_not_configured",
                },
            )
            return ProcessResult(
                status="no_action",
                reason_code="user_not_configured",
                notification_type=notification_type,
                raw_message=raw_message,
            )

        message = resolution.text or ""
        self.history_store.set_last_notification_time_for_user(
            LastNotification(
                user_id=participant.user_id,
                timestamp=self.clock(),
                notification_type=notification_type,
                message=message,
            )
        )
        self.participant_api.send_sms_to_user(config.study_id, participant.user_id, message)
        logger.info(
            "Sent %s notification",
            notification_type.value,
            extra={
                **log_extra,
                "notification_type": notification_type.value,
                "reason_code": reason_code,
            },
        )
        return ProcessResult(
            status="sent",
            reason_code=reason_code,
            notification_type=notification_type,
            raw_message=raw_message,
            message=message,
        )
