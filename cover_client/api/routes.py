"""URL builders for the analysis service routes."""

from __future__ import annotations

from typing import List

from cover_client.exceptions import BindingsError, BindingsErrorCode


def url_join(parts: List[str]) -> str:
    """Join URL parts with single slashes, keeping the last part verbatim."""
    last = len(parts) - 1
    cleaned = []
    for index, part in enumerate(parts):
        part = str(part)
        if index > 0:
            part = part.lstrip("/")
        if index < last:
            part = part.rstrip("/")
        cleaned.append(part)
    return "/".join(cleaned)


def generate_api_url(parts: List[str]) -> str:
    if len(parts) < 2:
        raise BindingsError(
            "At least 2 parameters are required to generate a valid API URL",
            BindingsErrorCode.ROUTE_INVALID,
        )
    if any(part is None or str(part) == "" for part in parts):
        raise BindingsError("Route parameter cannot be an empty string", BindingsErrorCode.ROUTE_INVALID)
    return url_join(parts)


def version(api: str) -> str:
    return generate_api_url([api, "version"])


def default_settings(api: str) -> str:
    return generate_api_url([api, "default-settings"])


def start(api: str) -> str:
    return generate_api_url([api, "analysis"])


def results(api: str, analysis_id: str) -> str:
    return generate_api_url([api, "analysis", analysis_id])


def status(api: str, analysis_id: str) -> str:
    return generate_api_url([api, "analysis", analysis_id, "status"])


def cancel(api: str, analysis_id: str) -> str:
    return generate_api_url([api, "analysis", analysis_id, "cancel"])
