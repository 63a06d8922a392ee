"""Notification history store — study configs and last notification per user."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from burst_notifier.exceptions import ConfigurationError, TransientIOError
from burst_notifier.models.notification_config import NotificationConfig
from burst_notifier.models.user_notification import UserNotification
from burst_notifier.schemas.notification_config import StudyConfigDocument
from burst_notifier.services.burst.burst_types import (
    LastNotification,
    NotificationType,
    StudyConfig,
)

logger = logging.getLogger(__name__)


class NotificationHistoryStore:
    """Key-value access to notification configs and user notification records."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_notification_config_for_study(self, study_id: str) -> StudyConfig:
        """Load and validate the study's notification config.

        Raises:
            ConfigurationError: No config stored for the study, or it fails validation.
            TransientIOError: Storage failure.
        """
        try:
            row = self.db.get(NotificationConfig, study_id)
        except SQLAlchemyError as exc:
            raise TransientIOError(f"Failed to load notification config for {study_id}") from exc
        if row is None:
            raise ConfigurationError(study_id, "no notification config")
        try:
            document = StudyConfigDocument.model_validate(row.config)
        except ValidationError as exc:
            raise ConfigurationError(study_id, f"invalid notification config: {exc}") from exc
        return document.to_study_config(study_id)

    def put_notification_config_for_study(
        self, study_id: str, document: StudyConfigDocument | dict[str, Any]
    ) -> StudyConfig:
        """Validate and store (insert or replace) a study's notification config."""
        if not isinstance(document, StudyConfigDocument):
            try:
                document = StudyConfigDocument.model_validate(document)
            except ValidationError as exc:
                raise ConfigurationError(study_id, f"invalid notification config: {exc}") from exc
        try:
            self.db.merge(
                NotificationConfig(
                    study_id=study_id,
                    config=document.model_dump(mode="json"),
                    updated_at=datetime.now(UTC),
                )
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise TransientIOError(f"Failed to store notification config for {study_id}") from exc
        logger.info("Stored notification config", extra={"study_id": study_id})
        return document.to_study_config(study_id)

    def get_last_notification_time_for_user(self, user_id: str) -> LastNotification | None:
        """Return the user's last notification, or None if never notified."""
        try:
            row = self.db.get(UserNotification, user_id)
        except SQLAlchemyError as exc:
            raise TransientIOError(f"Failed to load last notification for {user_id}") from exc
        if row is None:
            return None
        notified_at = row.notified_at
        if notified_at.tzinfo is None:
            notified_at = notified_at.replace(tzinfo=UTC)
        return LastNotification(
            user_id=row.user_id,
            timestamp=notified_at,
            notification_type=NotificationType(row.notification_type),
            message=row.message,
        )

    def set_last_notification_time_for_user(self, record: LastNotification) -> None:
        """Overwrite the user's last notification record."""
        try:
            self.db.merge(
                UserNotification(
                    user_id=record.user_id,
                    notified_at=record.timestamp.astimezone(UTC),
                    notification_type=record.notification_type.value,
                    message=record.message,
                )
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise TransientIOError(
                f"Failed to store last notification for {record.user_id}"
            ) from exc
