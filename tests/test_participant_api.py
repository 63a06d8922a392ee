"""ParticipantApiClient tests using httpx.MockTransport."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone

import httpx
import pytest

from burst_notifier.clients.participant_api import ParticipantApiClient
from burst_notifier.exceptions import TransientIOError
from tests.test_constants import STUDY_ID, TASK_ID, USER_ID

BASE_URL = "https://participants.test"


def _client(handler, page_size: int = 2) -> ParticipantApiClient:
    http_client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return ParticipantApiClient(http_client=http_client, page_size=page_size)


def test_get_participant_requests_consents() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": USER_ID, "phoneVerified": True})

    profile = _client(handler).get_participant(STUDY_ID, USER_ID)
    assert profile["id"] == USER_ID
    assert seen[0].url.path == f"/v3/studies/{STUDY_ID}/participants/{USER_ID}"
    assert seen[0].url.params["consents"] == "true"


def test_get_activity_events_returns_items() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": [{"eventId": "enrollment", "timestamp": "x"}]})

    events = _client(handler).get_activity_events(STUDY_ID, USER_ID)
    assert events == [{"eventId": "enrollment", "timestamp": "x"}]


def test_task_history_follows_offset_keys_lazily() -> None:
    pages = {
        None: {"items": [{"status": "finished"}, {"status": "available"}], "nextPageOffsetKey": "k2"},
        "k2": {"items": [{"status": "expired"}], "nextPageOffsetKey": None},
    }
    calls: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        key = request.url.params.get("offsetKey")
        calls.append(key)
        assert request.url.path.endswith(f"/activities/tasks/{TASK_ID}")
        assert request.url.params["pageSize"] == "2"
        return httpx.Response(200, json=pages[key])

    start = datetime(2018, 4, 27, tzinfo=timezone.utc)
    end = datetime(2018, 5, 1, tzinfo=timezone.utc)
    records = _client(handler).get_task_history(STUDY_ID, USER_ID, TASK_ID, start, end)
    assert calls == []  # nothing fetched until iterated

    statuses = [r["status"] for r in records]
    assert statuses == ["finished", "available", "expired"]
    assert calls == [None, "k2"]


def test_task_history_requery_on_each_call() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"items": [{"status": "finished"}]})

    client = _client(handler)
    start = datetime(2018, 4, 27, tzinfo=timezone.utc)
    end = datetime(2018, 5, 1, tzinfo=timezone.utc)
    assert len(list(client.get_task_history(STUDY_ID, USER_ID, TASK_ID, start, end))) == 1
    assert len(list(client.get_task_history(STUDY_ID, USER_ID, TASK_ID, start, end))) == 1
    assert len(calls) == 2


def test_account_summaries_page_by_offset() -> None:
    accounts = [{"id": f"user-{i}"} for i in range(5)]

    def handler(request: httpx.Request) -> httpx.Response:
        offset = int(request.url.params["offsetBy"])
        size = int(request.url.params["pageSize"])
        return httpx.Response(
            200, json={"items": accounts[offset : offset + size], "total": len(accounts)}
        )

    ids = [a["id"] for a in _client(handler).get_all_account_summaries(STUDY_ID)]
    assert ids == [f"user-{i}" for i in range(5)]


def test_get_participant_reports_date_range() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"items": [{"data": {"benefits": "x"}}]})

    reports = _client(handler).get_participant_reports(
        STUDY_ID, USER_ID, "Engagement", date(1970, 1, 1), date(1970, 1, 1)
    )
    assert reports == [{"data": {"benefits": "x"}}]
    assert seen[0].url.params["startDate"] == "1970-01-01"
    assert seen[0].url.params["endDate"] == "1970-01-01"


def test_send_sms_posts_message() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202, json={})

    _client(handler).send_sms_to_user(STUDY_ID, USER_ID, "hello")
    assert seen[0].method == "POST"
    assert seen[0].url.path == f"/v3/studies/{STUDY_ID}/participants/{USER_ID}/sms"
    assert json.loads(seen[0].content) == {"message": "hello"}


def test_http_error_status_is_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"message": "unavailable"})

    with pytest.raises(TransientIOError, match="503"):
        _client(handler).get_participant(STUDY_ID, USER_ID)


def test_connection_error_is_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransientIOError) as exc_info:
        _client(handler).send_sms_to_user(STUDY_ID, USER_ID, "hello")
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_non_json_body_is_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(TransientIOError, match="non-JSON") as exc_info:
        _client(handler).get_participant(STUDY_ID, USER_ID)
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_non_object_body_is_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["not", "an", "object"])

    with pytest.raises(TransientIOError, match="expected an object"):
        _client(handler).get_activity_events(STUDY_ID, USER_ID)
