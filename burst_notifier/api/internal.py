"""Internal job endpoints for cron/scripts.

These endpoints are secured with a static token (X-Internal-Token header).
They are meant for automated triggers (queue consumers, cron) only.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Generator
from datetime import date

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from burst_notifier.clients.participant_api import ParticipantApiClient
from burst_notifier.config import get_settings
from burst_notifier.db.session import get_db
from burst_notifier.exceptions import ConfigurationError, TransientIOError
from burst_notifier.schemas.internal import (
    ProcessAccountRequest,
    ProcessAccountResponse,
    StudyRunResponse,
)
from burst_notifier.services.notification_history import NotificationHistoryStore
from burst_notifier.services.notification_worker import NotificationWorker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal", include_in_schema=False)


# ── Dependencies ────────────────────────────────────────────────────


def _require_internal_token(x_internal_token: str = Header(...)) -> None:
    """Validate the internal job token from the request header.

    Uses constant-time comparison to prevent timing attacks.
    Raises 403 if the token is empty or does not match the configured value.
    """
    expected = get_settings().internal_job_token
    if not expected or not secrets.compare_digest(x_internal_token, expected):
        logger.warning("Internal endpoint auth failed: invalid or missing token")
        raise HTTPException(status_code=403, detail="Invalid internal token")


def get_notification_worker(
    db: Session = Depends(get_db),
) -> Generator[NotificationWorker, None, None]:
    """Build a worker bound to this request's DB session."""
    client = ParticipantApiClient()
    try:
        yield NotificationWorker(client, NotificationHistoryStore(db))
    finally:
        client.close()


# ── Endpoints ───────────────────────────────────────────────────────


@router.post("/process_account", response_model=ProcessAccountResponse)
def process_account(
    body: ProcessAccountRequest,
    _token: None = Depends(_require_internal_token),
    worker: NotificationWorker = Depends(get_notification_worker),
):
    """Decide and send one participant's reminder for a date.

    Configuration errors return 422 and collaborator failures 503 so the
    caller's queue redelivers the message.
    """
    try:
        result = worker.process_account_for_date(body.study_id, body.as_of, body.user_id)
    except ConfigurationError as exc:
        logger.error("Notification config error: %s", exc, extra={"study_id": body.study_id})
        raise HTTPException(status_code=422, detail=str(exc)) from None
    except TransientIOError as exc:
        logger.warning("Transient failure processing account: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from None
    return ProcessAccountResponse(
        status=result.status,
        reason_code=result.reason_code,
        notification_type=result.notification_type.value if result.notification_type else None,
        message=result.message,
    )


@router.post("/run_notifications", response_model=StudyRunResponse)
def run_notifications(
    study_id: str = Query(..., min_length=1),
    as_of: date = Query(..., description="Processing date (participants' local calendar)"),
    _token: None = Depends(_require_internal_token),
    worker: NotificationWorker = Depends(get_notification_worker),
):
    """Process every account in a study for one date."""
    from burst_notifier.services.study_run import run_notifications_for_study

    try:
        summary = run_notifications_for_study(worker, study_id, as_of)
        return StudyRunResponse(**summary)
    except Exception as exc:
        logger.exception("Internal notification run failed")
        return StudyRunResponse(status="failed", study_id=study_id, as_of=as_of, error=str(exc))
