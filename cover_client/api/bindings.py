"""Async bindings for the analysis service routes.

Each binding builds its request, runs the blocking transport in a worker
thread and validates the decoded body against the wire schemas. Bindings
hold no per-analysis state.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from cover_client.api import routes
from cover_client.api.schemas import (
    AnalysisCancelResponse,
    AnalysisResultsResponse,
    AnalysisStartResponse,
    AnalysisStatusResponse,
    ApiVersionResponse,
    Cursor,
)
from cover_client.api.transport import Transport
from cover_client.core.options import AnalysisFiles, BindingsOptions
from cover_client.exceptions import ApiError, ApiErrorCode, BindingsError, BindingsErrorCode

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

JAVA_ARCHIVE = "application/java-archive"
JSON = "application/json"


def _parse(model: Type[M], body: Any, url: str) -> M:
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise ApiError(
            f"Unexpected response from {url}: {exc.error_count()} validation error(s)",
            ApiErrorCode.RESPONSE_INVALID,
        ) from exc


def build_start_files(settings: Optional[Dict[str, Any]], files: AnalysisFiles) -> Dict[str, Any]:
    """Build the multipart parts for a start request."""
    if files is None or files.build is None:
        raise BindingsError("The required `build` JAR file was not supplied", BindingsErrorCode.BUILD_MISSING)
    if settings is None:
        raise BindingsError("The required `settings` were not supplied", BindingsErrorCode.SETTINGS_MISSING)
    try:
        settings_json = json.dumps(settings)
    except (TypeError, ValueError) as exc:
        raise BindingsError(f"The settings JSON was not valid:\n{exc}", BindingsErrorCode.SETTINGS_INVALID) from exc

    parts: Dict[str, Any] = {
        "build": ("build.jar", files.build, JAVA_ARCHIVE),
        "settings": ("settings.json", settings_json, JSON),
    }
    if files.base_build is not None:
        parts["baseBuild"] = ("baseBuild.jar", files.base_build, JAVA_ARCHIVE)
    if files.dependencies_build is not None:
        parts["dependenciesBuild"] = ("dependenciesBuild.jar", files.dependencies_build, JAVA_ARCHIVE)
    return parts


class Bindings:
    """Stateless async functions over the service routes."""

    def __init__(self, transport: Optional[Transport] = None):
        self.transport = transport or Transport()

    async def get_api_version(
        self, api_url: str, options: Optional[BindingsOptions] = None
    ) -> ApiVersionResponse:
        url = routes.version(api_url)
        body = await asyncio.to_thread(self.transport.get, url, None, options)
        return _parse(ApiVersionResponse, body, url)

    async def get_default_settings(
        self, api_url: str, options: Optional[BindingsOptions] = None
    ) -> Dict[str, Any]:
        url = routes.default_settings(api_url)
        body = await asyncio.to_thread(self.transport.get, url, None, options)
        if not isinstance(body, dict):
            raise ApiError(f"Unexpected response from {url}: expected an object", ApiErrorCode.RESPONSE_INVALID)
        return body

    async def start_analysis(
        self,
        api_url: str,
        settings: Optional[Dict[str, Any]],
        files: AnalysisFiles,
        options: Optional[BindingsOptions] = None,
    ) -> AnalysisStartResponse:
        parts = build_start_files(settings, files)
        url = routes.start(api_url)
        logger.debug(f"Starting analysis at {url} with parts {sorted(parts)}")
        body = await asyncio.to_thread(self.transport.post, url, None, parts, options)
        return _parse(AnalysisStartResponse, body, url)

    async def get_analysis_results(
        self,
        api_url: str,
        analysis_id: str,
        cursor: Optional[Cursor] = None,
        options: Optional[BindingsOptions] = None,
    ) -> AnalysisResultsResponse:
        url = routes.results(api_url, analysis_id)
        params = {"cursor": cursor} if cursor is not None else None
        body = await asyncio.to_thread(self.transport.get, url, params, options)
        return _parse(AnalysisResultsResponse, body, url)

    async def get_analysis_status(
        self, api_url: str, analysis_id: str, options: Optional[BindingsOptions] = None
    ) -> AnalysisStatusResponse:
        url = routes.status(api_url, analysis_id)
        body = await asyncio.to_thread(self.transport.get, url, None, options)
        return _parse(AnalysisStatusResponse, body, url)

    async def cancel_analysis(
        self, api_url: str, analysis_id: str, options: Optional[BindingsOptions] = None
    ) -> AnalysisCancelResponse:
        url = routes.cancel(api_url, analysis_id)
        body = await asyncio.to_thread(self.transport.post, url, None, None, options)
        return _parse(AnalysisCancelResponse, body, url)
