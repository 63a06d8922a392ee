"""Participant API client — participants, activity events, task history, reports, SMS.

Synchronous httpx client. Paginated endpoints are exposed as generators that
fetch pages lazily; each call re-queries from the first page.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date, datetime
from typing import Any

import httpx

from burst_notifier.config import get_settings
from burst_notifier.exceptions import TransientIOError

logger = logging.getLogger(__name__)

USER_AGENT = "BurstNotifier/0.1 (notification-worker)"


class ParticipantApiClient:
    """Thin wrapper over the participant REST API.

    Every httpx error is re-raised as TransientIOError; no retries here.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: float | None = None,
        page_size: int | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        settings = get_settings()
        self.page_size = page_size or settings.participant_api_page_size
        if http_client is None:
            headers = {"User-Agent": USER_AGENT}
            api_token = token if token is not None else settings.participant_api_token
            if api_token:
                headers["Authorization"] = f"Bearer {api_token}"
            http_client = httpx.Client(
                base_url=base_url or settings.participant_api_url,
                timeout=timeout or settings.participant_api_timeout,
                headers=headers,
            )
        self._http = http_client

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ParticipantApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Requests ─────────────────────────────────────────────────────────

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            response = self._http.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("HTTP %s for %s %s", exc.response.status_code, method, path)
            raise TransientIOError(
                f"{method} {path} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("HTTP error calling %s %s: %s", method, path, exc)
            raise TransientIOError(f"{method} {path} failed: {exc}") from exc
        return response

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._request("GET", path, params=params)
        try:
            body = response.json()
        except ValueError as exc:
            logger.error("Non-JSON response for GET %s", path)
            raise TransientIOError(f"GET {path} returned a non-JSON body") from exc
        if not isinstance(body, dict):
            raise TransientIOError(f"GET {path} returned {type(body).__name__}, expected an object")
        return body

    # ── Participants ─────────────────────────────────────────────────────

    def get_participant(self, study_id: str, user_id: str) -> dict[str, Any]:
        """Raw participant profile, including consent histories."""
        return self._get_json(
            f"/v3/studies/{study_id}/participants/{user_id}",
            params={"consents": "true"},
        )

    def get_all_account_summaries(self, study_id: str) -> Iterator[dict[str, Any]]:
        """Yield every account summary in the study, one page at a time."""
        offset = 0
        while True:
            body = self._get_json(
                f"/v3/studies/{study_id}/participants",
                params={"offsetBy": offset, "pageSize": self.page_size},
            )
            items = body.get("items") or []
            yield from items
            offset += len(items)
            total = body.get("total")
            if not items or (total is not None and offset >= int(total)):
                return

    # ── Activity events and task history ─────────────────────────────────

    def get_activity_events(self, study_id: str, user_id: str) -> list[dict[str, Any]]:
        """All activity events (enrollment, custom burst starts, ...) for the user."""
        body = self._get_json(f"/v3/studies/{study_id}/participants/{user_id}/activityEvents")
        return list(body.get("items") or [])

    def get_task_history(
        self,
        study_id: str,
        user_id: str,
        task_id: str,
        scheduled_on_start: datetime,
        scheduled_on_end: datetime,
    ) -> Iterator[dict[str, Any]]:
        """Yield task-history records scheduled in [start, end), following offset keys."""
        offset_key: str | None = None
        while True:
            params: dict[str, Any] = {
                "scheduledOnStart": scheduled_on_start.isoformat(),
                "scheduledOnEnd": scheduled_on_end.isoformat(),
                "pageSize": self.page_size,
            }
            if offset_key:
                params["offsetKey"] = offset_key
            body = self._get_json(
                f"/v3/studies/{study_id}/participants/{user_id}/activities/tasks/{task_id}",
                params=params,
            )
            yield from body.get("items") or []
            offset_key = body.get("nextPageOffsetKey")
            if not offset_key:
                return

    # ── Reports ──────────────────────────────────────────────────────────

    def get_participant_reports(
        self,
        study_id: str,
        user_id: str,
        report_id: str,
        start_date: date,
        end_date: date,
    ) -> list[dict[str, Any]]:
        """Participant report rows for [start_date, end_date] (inclusive)."""
        body = self._get_json(
            f"/v3/studies/{study_id}/participants/{user_id}/reports/{report_id}",
            params={"startDate": start_date.isoformat(), "endDate": end_date.isoformat()},
        )
        return list(body.get("items") or [])

    # ── SMS ──────────────────────────────────────────────────────────────

    def send_sms_to_user(self, study_id: str, user_id: str, message: str) -> None:
        """Send message to the participant's verified phone."""
        self._request(
            "POST",
            f"/v3/studies/{study_id}/participants/{user_id}/sms",
            json={"message": message},
        )
