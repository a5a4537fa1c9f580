import json

import httpx
import pytest

from app.client.review_client import ClinicalReviewClient, ReviewNetworkError, ReviewServerError
from app.models.symptom_review_status import ReviewState
from app.services.symptom_visibility_service import VisibilityAction


def _client(handler):
    return ClinicalReviewClient("http://review.test", "user-1", transport=httpx.MockTransport(handler))


def test_requests_carry_actor_header_and_camel_case_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["header"] = request.headers.get("X-User-Id")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": "r1",
                "surgeryId": "s1",
                "symptomId": "sym",
                "ageGroup": None,
                "status": "CHANGES_REQUIRED",
                "reviewNote": "Fix wording",
            },
        )

    with _client(handler) as client:
        row = client.update_review_status("s1", "sym", "", ReviewState.CHANGES_REQUIRED, review_note="Fix wording")

    assert seen["header"] == "user-1"
    assert seen["body"] == {
        "surgeryId": "s1",
        "symptomId": "sym",
        "ageGroup": None,
        "newStatus": "CHANGES_REQUIRED",
        "reviewNote": "Fix wording",
    }
    assert row.status is ReviewState.CHANGES_REQUIRED
    assert row.review_note == "Fix wording"


def test_server_error_message_is_surfaced():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": "Superuser or Practice Admin required"})

    with _client(handler) as client, pytest.raises(ReviewServerError) as excinfo:
        client.reset_all("s1")

    assert excinfo.value.status_code == 403
    assert excinfo.value.message == "Superuser or Practice Admin required"


def test_server_error_without_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad gateway")

    with _client(handler) as client, pytest.raises(ReviewServerError) as excinfo:
        client.bulk_approve("s1")

    assert excinfo.value.message == "Request failed (502)"


def test_transport_failure_becomes_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client, pytest.raises(ReviewNetworkError):
        client.clinical_review_data("s1")


def test_bulk_approve_sends_search_only_when_given():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"ok": True, "approvedCount": 3})

    with _client(handler) as client:
        assert client.bulk_approve("s1") == 3
        assert client.bulk_approve("s1", search="  ") == 3
        assert client.bulk_approve("s1", search="chest") == 3

    assert bodies == [{"surgeryId": "s1"}, {"surgeryId": "s1"}, {"surgeryId": "s1", "search": "chest"}]


def test_set_visibility_targets_one_symptom_table():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"ok": True})

    with _client(handler) as client:
        client.set_visibility(VisibilityAction.DISABLE, "s1", custom_symptom_id="c1")

    assert requests == [("PATCH", "/api/surgerySymptoms", {"action": "DISABLE", "surgeryId": "s1", "customSymptomId": "c1"})]
