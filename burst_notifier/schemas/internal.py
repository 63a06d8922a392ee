"""Internal job API schemas."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class ProcessAccountRequest(BaseModel):
    """Body for POST /internal/process_account."""

    study_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    as_of: date


class ProcessAccountResponse(BaseModel):
    """Outcome of one account's notification decision."""

    status: str  # no_action | sent
    reason_code: str
    notification_type: str | None = None
    message: str | None = None


class StudyRunResponse(BaseModel):
    """Summary of a study-wide notification run."""

    status: str  # completed | completed_with_errors | failed
    study_id: str
    as_of: date
    accounts_processed: int = 0
    notifications_sent: int = 0
    accounts_failed: int = 0
    failures_by_kind: dict[str, int] = Field(default_factory=dict)
    error: str | None = None
