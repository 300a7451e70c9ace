"""Tests for service route building."""

from __future__ import annotations

import pytest

from cover_client.api import routes
from cover_client.exceptions import BindingsError, BindingsErrorCode

API = "https://cover.example.com/api"


def test_routes_for_every_operation():
    assert routes.version(API) == f"{API}/version"
    assert routes.default_settings(API) == f"{API}/default-settings"
    assert routes.start(API) == f"{API}/analysis"
    assert routes.results(API, "abc") == f"{API}/analysis/abc"
    assert routes.status(API, "abc") == f"{API}/analysis/abc/status"
    assert routes.cancel(API, "abc") == f"{API}/analysis/abc/cancel"


def test_slashes_between_parts_are_collapsed():
    assert routes.generate_api_url([f"{API}/", "/analysis/", "abc"]) == f"{API}/analysis/abc"
    assert routes.url_join(["http://host", "a/"]) == "http://host/a/"


def test_route_needs_two_parts():
    with pytest.raises(BindingsError) as exc:
        routes.generate_api_url([API])
    assert exc.value.code == BindingsErrorCode.ROUTE_INVALID


@pytest.mark.parametrize("analysis_id", ["", None])
def test_route_rejects_empty_parts(analysis_id):
    with pytest.raises(BindingsError) as exc:
        routes.results(API, analysis_id)
    assert exc.value.code == BindingsErrorCode.ROUTE_INVALID
