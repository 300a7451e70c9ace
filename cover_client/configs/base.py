import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from cover_client.core.options import (
    DEFAULT_POLLING_INTERVAL,
    DEFAULT_WRITING_CONCURRENCY,
    BindingsOptions,
    RunAnalysisOptions,
)

DEFAULT_API_URL = "http://127.0.0.1:8000"
DEFAULT_REQUEST_TIMEOUT = 60.0

_ENV_FIELDS = {
    "api_url": "COVER_API_URL",
    "polling_interval": "COVER_POLLING_INTERVAL",
    "writing_concurrency": "COVER_WRITING_CONCURRENCY",
    "request_timeout": "COVER_REQUEST_TIMEOUT",
    "allow_unauthorized_https": "COVER_ALLOW_UNAUTHORIZED_HTTPS",
    "log_level": "COVER_LOG_LEVEL",
    "log_json": "COVER_LOG_JSON",
}
_BOOL_FIELDS = {"allow_unauthorized_https", "log_json"}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env_flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


class ClientConfig(BaseModel):
    """Settings shared by the command line and library callers."""
    api_url: str = Field(default=DEFAULT_API_URL)
    polling_interval: float = DEFAULT_POLLING_INTERVAL  # seconds between polls
    writing_concurrency: int = DEFAULT_WRITING_CONCURRENCY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    allow_unauthorized_https: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("api_url")
    @classmethod
    def _strip_api_url(cls, v: str) -> str:
        v = str(v).strip().rstrip("/")
        if not v:
            raise ValueError("api_url must not be empty")
        return v

    @field_validator("polling_interval", "request_timeout")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"must be greater than 0, got {v}")
        return v

    @field_validator("writing_concurrency")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"writing_concurrency must be at least 1, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def _valid_log_level(cls, v: str) -> str:
        v = str(v).strip().upper()
        if v not in _VALID_LOG_LEVELS:
            raise ValueError(f"Unknown log level '{v}'. Valid: {sorted(_VALID_LOG_LEVELS)}")
        return v

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from ``COVER_*`` environment variables.

        Overrides that are not ``None`` take precedence over the environment.
        """
        values: Dict[str, Any] = {}
        for name, env_var in _ENV_FIELDS.items():
            raw = os.environ.get(env_var)
            if raw is None or raw.strip() == "":
                continue
            values[name] = _env_flag(raw) if name in _BOOL_FIELDS else raw.strip()
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    def bindings_options(self) -> BindingsOptions:
        return BindingsOptions(allow_unauthorized_https=self.allow_unauthorized_https)

    def run_options(self, output_tests: Optional[str] = None, **kwargs: Any) -> RunAnalysisOptions:
        return RunAnalysisOptions(
            output_tests=output_tests,
            writing_concurrency=self.writing_concurrency,
            polling_interval=self.polling_interval,
            **kwargs,
        )
