"""Blocking HTTP transport for the analysis service."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from cover_client.core.options import BindingsOptions
from cover_client.exceptions import ApiError, ApiErrorCode

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


def _service_error(body: Any) -> Optional[Dict[str, str]]:
    """Extract ``{code, message}`` from a service error body, if it has one."""
    if isinstance(body, dict) and isinstance(body.get("detail"), dict):
        body = body["detail"]
    if isinstance(body, dict) and body.get("code") and body.get("message"):
        return {"code": str(body["code"]), "message": str(body["message"])}
    return None


def convert_error(exc: requests.RequestException) -> ApiError:
    """Map a ``requests`` failure onto an :class:`ApiError`."""
    response = getattr(exc, "response", None)
    if response is None:
        return ApiError(f"Request failed: {exc}", ApiErrorCode.NETWORK_ERROR)
    try:
        body = response.json()
    except ValueError:
        body = None
    service_error = _service_error(body)
    if service_error:
        return ApiError(service_error["message"], service_error["code"], response.status_code)
    reason = response.reason or "error"
    return ApiError(
        f"Request to {response.url} failed with status {response.status_code} ({reason})",
        ApiErrorCode.HTTP_ERROR,
        response.status_code,
    )


class Transport:
    """Thin ``requests`` wrapper returning decoded JSON bodies."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, headers: Optional[Dict[str, str]] = None):
        self.timeout = timeout
        self.headers = dict(headers or {})

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        options: Optional[BindingsOptions] = None,
    ) -> Any:
        options = options or BindingsOptions()
        logger.debug(f"{method} {url}")
        try:
            response = requests.request(
                method,
                url,
                headers=self.headers or None,
                params=params,
                data=data,
                files=files,
                timeout=self.timeout,
                verify=not options.allow_unauthorized_https,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            error = convert_error(exc)
            logger.warning(f"{method} {url} failed: [{error.code}] {error.message}")
            raise error from exc
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                f"Response from {url} is not valid JSON",
                ApiErrorCode.RESPONSE_INVALID,
                response.status_code,
            ) from exc

    def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        options: Optional[BindingsOptions] = None,
    ) -> Any:
        return self._request("GET", url, params=params, options=options)

    def post(
        self,
        url: str,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        options: Optional[BindingsOptions] = None,
    ) -> Any:
        return self._request("POST", url, data=data, files=files, options=options)
