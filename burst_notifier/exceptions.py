"""Error taxonomy for the notification worker."""

from __future__ import annotations


class NotificationWorkerError(Exception):
    """Base class for errors that abort processing of one account."""


class ConfigurationError(NotificationWorkerError):
    """Study notification config is missing or unusable.

    Raised for a missing config row, an invalid config document, an empty
    message pool for a decided notification type, or overlapping burst windows.
    Needs operator attention; never swallowed by the engine.
    """

    def __init__(self, study_id: str | None, reason: str) -> None:
        self.study_id = study_id
        self.reason = reason
        prefix = f"study {study_id}: " if study_id else ""
        super().__init__(f"{prefix}{reason}")


class TransientIOError(NotificationWorkerError):
    """A collaborator call (participant API or storage) failed.

    Not retried here; redelivery and backoff belong to the caller.
    """
