"""Tests for the requests-based transport and its error mapping."""

from __future__ import annotations

import json

import pytest

requests = pytest.importorskip("requests")

from cover_client.api import transport as transport_module
from cover_client.api.transport import Transport, convert_error
from cover_client.core.options import BindingsOptions
from cover_client.exceptions import ApiError, ApiErrorCode

URL = "https://cover.example.com/api/version"


def _response(status_code, body=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    response.url = URL
    response.reason = "Reason"
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = (text or "").encode("utf-8")
    return response


@pytest.fixture
def calls(monkeypatch):
    recorded = []
    replies = []

    def fake_request(method, url, **kwargs):
        recorded.append({"method": method, "url": url, **kwargs})
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(transport_module.requests, "request", fake_request)
    return recorded, replies


def test_get_returns_decoded_json(calls):
    recorded, replies = calls
    replies.append(_response(200, {"version": "1.2.3"}))

    body = Transport(timeout=5).get(URL, params={"cursor": 3})

    assert body == {"version": "1.2.3"}
    assert recorded[0]["method"] == "GET"
    assert recorded[0]["params"] == {"cursor": 3}
    assert recorded[0]["timeout"] == 5
    assert recorded[0]["verify"] is True


def test_post_sends_files_and_can_skip_tls_verification(calls):
    recorded, replies = calls
    replies.append(_response(200, {"id": "abc"}))
    parts = {"build": ("build", b"jar", "application/java-archive")}

    Transport().post(URL, files=parts, options=BindingsOptions(allow_unauthorized_https=True))

    assert recorded[0]["method"] == "POST"
    assert recorded[0]["files"] == parts
    assert recorded[0]["verify"] is False


def test_connection_failure_is_network_error(calls):
    _, replies = calls
    replies.append(requests.ConnectionError("refused"))

    with pytest.raises(ApiError) as exc:
        Transport().get(URL)

    assert exc.value.code == ApiErrorCode.NETWORK_ERROR
    assert exc.value.status is None
    assert isinstance(exc.value.__cause__, requests.ConnectionError)


def test_service_error_body_keeps_its_code(calls):
    _, replies = calls
    replies.append(_response(404, {"detail": {"code": "analysis-not-found", "message": "No such analysis"}}))

    with pytest.raises(ApiError) as exc:
        Transport().get(URL)

    assert exc.value.code == "analysis-not-found"
    assert exc.value.message == "No such analysis"
    assert exc.value.status == 404
    assert exc.value.to_dict() == {"code": "analysis-not-found", "message": "No such analysis", "status": 404}


def test_other_http_errors_are_http_error(calls):
    _, replies = calls
    replies.append(_response(502, text="<html>bad gateway</html>"))

    with pytest.raises(ApiError) as exc:
        Transport().get(URL)

    assert exc.value.code == ApiErrorCode.HTTP_ERROR
    assert exc.value.status == 502


def test_non_json_success_is_response_invalid(calls):
    _, replies = calls
    replies.append(_response(200, text="not json"))

    with pytest.raises(ApiError) as exc:
        Transport().get(URL)
    assert exc.value.code == ApiErrorCode.RESPONSE_INVALID


def test_convert_error_reads_top_level_error_body():
    error = requests.HTTPError(response=_response(400, {"code": "invalid-settings", "message": "Bad settings"}))
    converted = convert_error(error)
    assert converted.code == "invalid-settings"
    assert converted.status == 400
