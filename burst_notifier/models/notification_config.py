"""Per-study notification settings, stored as a JSON document."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from burst_notifier.db.session import Base


class NotificationConfig(Base):
    """Notification config for one study, stored as a validated JSON document."""

    __tablename__ = "notification_configs"

    study_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    config: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )
