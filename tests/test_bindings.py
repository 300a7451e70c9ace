"""Tests for the async service bindings."""

from __future__ import annotations

import asyncio
import io
import json

import pytest

from cover_client.api.bindings import Bindings, build_start_files
from cover_client.core.options import AnalysisFiles, BindingsOptions
from cover_client.core.status import AnalysisStatus
from cover_client.exceptions import ApiError, ApiErrorCode, BindingsError, BindingsErrorCode

API = "https://cover.example.com/api"

RESULT_WIRE = {
    "testId": "t1",
    "testName": "playTest",
    "testedFunction": "java::com.example.Game.play",
    "sourceFilePath": "com/example/Game.java",
    "testBody": "assertTrue(true);",
    "tags": ["success"],
    "futureField": 7,
}


class FakeTransport:
    def __init__(self, *bodies):
        self.bodies = list(bodies)
        self.calls = []

    def get(self, url, params=None, options=None):
        self.calls.append(("GET", url, params, options))
        return self.bodies.pop(0)

    def post(self, url, data=None, files=None, options=None):
        self.calls.append(("POST", url, files, options))
        return self.bodies.pop(0)


# ---------------------------------------------------------------------------
# Start request parts
# ---------------------------------------------------------------------------

def test_start_files_include_optional_builds():
    build, base, deps = io.BytesIO(b"b"), io.BytesIO(b"base"), io.BytesIO(b"deps")
    parts = build_start_files({"a": 1}, AnalysisFiles(build=build, base_build=base, dependencies_build=deps))

    assert sorted(parts) == ["baseBuild", "build", "dependenciesBuild", "settings"]
    assert parts["build"] == ("build.jar", build, "application/java-archive")
    assert parts["baseBuild"] == ("baseBuild.jar", base, "application/java-archive")
    assert parts["dependenciesBuild"] == ("dependenciesBuild.jar", deps, "application/java-archive")
    assert parts["settings"][0] == "settings.json"
    assert parts["settings"][2] == "application/json"
    assert json.loads(parts["settings"][1]) == {"a": 1}


def test_start_files_skip_missing_optional_builds():
    parts = build_start_files({}, AnalysisFiles(build=b""))
    assert sorted(parts) == ["build", "settings"]


@pytest.mark.parametrize(
    "settings,files,code",
    [
        ({}, AnalysisFiles(build=None), BindingsErrorCode.BUILD_MISSING),
        ({}, None, BindingsErrorCode.BUILD_MISSING),
        (None, AnalysisFiles(build=b"jar"), BindingsErrorCode.SETTINGS_MISSING),
        ({"bad": object()}, AnalysisFiles(build=b"jar"), BindingsErrorCode.SETTINGS_INVALID),
    ],
)
def test_start_files_validation(settings, files, code):
    with pytest.raises(BindingsError) as exc:
        build_start_files(settings, files)
    assert exc.value.code == code


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------

def test_start_analysis_posts_multipart_and_parses_response():
    transport = FakeTransport({"id": "abc", "phases": {"p": {}}, "settings": {"x": 1}})
    options = BindingsOptions(allow_unauthorized_https=True)

    response = asyncio.run(Bindings(transport).start_analysis(API, {"x": 1}, AnalysisFiles(build=b"jar"), options))

    assert response.id == "abc"
    assert response.settings == {"x": 1}
    method, url, files, sent_options = transport.calls[0]
    assert (method, url) == ("POST", f"{API}/analysis")
    assert "build" in files and "settings" in files
    assert sent_options is options


def test_start_analysis_validates_before_any_request():
    transport = FakeTransport()
    with pytest.raises(BindingsError):
        asyncio.run(Bindings(transport).start_analysis(API, None, AnalysisFiles(build=b"jar")))
    assert transport.calls == []


def test_results_send_cursor_only_when_set():
    page = {"cursor": 1, "status": {"status": "RUNNING", "progress": {"total": 2, "completed": 1}}, "results": [RESULT_WIRE]}
    transport = FakeTransport(page, dict(page))
    bindings = Bindings(transport)

    response = asyncio.run(bindings.get_analysis_results(API, "abc"))
    asyncio.run(bindings.get_analysis_results(API, "abc", cursor=1))

    assert transport.calls[0][1:3] == (f"{API}/analysis/abc", None)
    assert transport.calls[1][2] == {"cursor": 1}
    assert response.cursor == 1
    assert response.status.status is AnalysisStatus.RUNNING
    result = response.results[0]
    assert result.tested_function == "java::com.example.Game.play"
    assert result.to_wire()["futureField"] == 7


def test_status_and_cancel_routes():
    transport = FakeTransport(
        {"status": "ERRORED", "message": {"code": "failed", "message": "boom"}},
        {"message": "canceled", "status": {"status": "CANCELED"}},
    )
    bindings = Bindings(transport)

    status = asyncio.run(bindings.get_analysis_status(API, "abc"))
    cancel = asyncio.run(bindings.cancel_analysis(API, "abc"))

    assert status.status is AnalysisStatus.ERRORED
    assert status.message.code == "failed"
    assert cancel.status.status is AnalysisStatus.CANCELED
    assert [call[:2] for call in transport.calls] == [
        ("GET", f"{API}/analysis/abc/status"),
        ("POST", f"{API}/analysis/abc/cancel"),
    ]


def test_version_and_default_settings():
    transport = FakeTransport({"version": "1.2.3"}, {"phases": {}})
    bindings = Bindings(transport)

    assert asyncio.run(bindings.get_api_version(API)).version == "1.2.3"
    assert asyncio.run(bindings.get_default_settings(API)) == {"phases": {}}
    assert [call[1] for call in transport.calls] == [f"{API}/version", f"{API}/default-settings"]


@pytest.mark.parametrize(
    "call,body",
    [
        (lambda b: b.get_analysis_status(API, "abc"), {"status": "STOPPING"}),
        (lambda b: b.get_analysis_results(API, "abc"), {"results": []}),
        (lambda b: b.get_default_settings(API), ["not", "an", "object"]),
        (lambda b: b.get_api_version(API), {}),
    ],
)
def test_unexpected_bodies_are_response_invalid(call, body):
    with pytest.raises(ApiError) as exc:
        asyncio.run(call(Bindings(FakeTransport(body))))
    assert exc.value.code == ApiErrorCode.RESPONSE_INVALID


def test_empty_analysis_id_is_rejected_before_request():
    transport = FakeTransport()
    with pytest.raises(BindingsError) as exc:
        asyncio.run(Bindings(transport).get_analysis_status(API, ""))
    assert exc.value.code == BindingsErrorCode.ROUTE_INVALID
    assert transport.calls == []
