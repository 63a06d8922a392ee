"""Pydantic schemas."""

from burst_notifier.schemas.internal import (
    ProcessAccountRequest,
    ProcessAccountResponse,
    StudyRunResponse,
)
from burst_notifier.schemas.notification_config import PreBurstMessages, StudyConfigDocument

__all__ = [
    "PreBurstMessages",
    "ProcessAccountRequest",
    "ProcessAccountResponse",
    "StudyConfigDocument",
    "StudyRunResponse",
]
