"""Last notification sent to each participant."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from burst_notifier.db.session import Base


class UserNotification(Base):
    """Most recent notification for a user. One row per user, overwritten on send."""

    __tablename__ = "user_notifications"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    notified_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notification_type: Mapped[str] = mapped_column(String(32), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
