"""Error types raised by the cover client.

Every error carries a stable ``code`` so callers can branch on the kind of
failure without parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Union


class CoverClientError(RuntimeError):
    """Common parent of all client errors. Not raised directly."""

    def __init__(self, message: str, code: Optional[Union[str, Enum]] = None):
        self.message = str(message)
        self.code = _code_value(code)
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


def _code_value(code: Optional[Union[str, Enum]]) -> Optional[str]:
    if code is None:
        return None
    if isinstance(code, Enum):
        return str(code.value)
    return str(code)


class ApiErrorCode(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    RESPONSE_INVALID = "RESPONSE_INVALID"


class ApiError(CoverClientError):
    """Failure reported by the service or by the transport.

    ``code`` is the code from the service error body when one was returned,
    otherwise one of :class:`ApiErrorCode`. ``status`` is the HTTP status of
    the response, if there was one.
    """

    def __init__(self, message: str, code: Union[str, Enum], status: Optional[int] = None):
        super().__init__(message, code)
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["status"] = self.status
        return payload


class BindingsErrorCode(str, Enum):
    BUILD_MISSING = "BUILD_MISSING"
    SETTINGS_MISSING = "SETTINGS_MISSING"
    SETTINGS_INVALID = "SETTINGS_INVALID"
    ROUTE_INVALID = "ROUTE_INVALID"


class BindingsError(CoverClientError):
    """Request rejected locally before it reached the service."""

    def __init__(self, message: str, code: BindingsErrorCode):
        super().__init__(message, code)


class AnalysisErrorCode(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    ALREADY_STARTED = "ALREADY_STARTED"
    NO_ID = "NO_ID"
    RUN_ERRORED = "RUN_ERRORED"
    START_DEFAULTS_FAILED = "START_DEFAULTS_FAILED"
    STREAM_MUST_PAGINATE = "STREAM_MUST_PAGINATE"
    STREAM_NOT_WRITABLE = "STREAM_NOT_WRITABLE"
    SINK_INVALID = "SINK_INVALID"
    WRITER_MISSING = "WRITER_MISSING"
    INVALID_TRANSITION = "INVALID_TRANSITION"


class AnalysisError(CoverClientError):
    """Misuse of an :class:`~cover_client.core.analysis.Analysis` object."""

    def __init__(self, message: str, code: AnalysisErrorCode):
        super().__init__(message, code)


class CombinerErrorCode(str, Enum):
    RESULTS_MISSING = "RESULTS_MISSING"
    RESULTS_EMPTY = "RESULTS_EMPTY"
    RESULTS_TYPE = "RESULTS_TYPE"
    EXISTING_CLASS_MISSING = "EXISTING_CLASS_MISSING"
    EXISTING_CLASS_TYPE = "EXISTING_CLASS_TYPE"
    SOURCE_FILE_PATH_DIFFERS = "SOURCE_FILE_PATH_DIFFERS"
    PACKAGE_NAME_DIFFERS = "PACKAGE_NAME_DIFFERS"
    NO_CLASS_NAME = "NO_CLASS_NAME"
    MERGE_ERROR = "MERGE_ERROR"
    GENERATE_ERROR = "GENERATE_ERROR"


class CombinerError(CoverClientError):
    def __init__(self, message: str, code: CombinerErrorCode):
        super().__init__(message, code)


class WriterErrorCode(str, Enum):
    DIR_FAILED = "DIR_FAILED"
    WRITE_FAILED = "WRITE_FAILED"


class WriterError(CoverClientError):
    def __init__(self, message: str, code: WriterErrorCode):
        super().__init__(message, code)


class FilterResultsErrorCode(str, Enum):
    FILTER_INVALID = "FILTER_INVALID"
    FILTER_FAILED = "FILTER_FAILED"


class FilterResultsError(CoverClientError):
    def __init__(self, message: str, code: FilterResultsErrorCode):
        super().__init__(message, code)
