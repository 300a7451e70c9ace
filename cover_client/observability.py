"""cover_client logging setup.

The library only creates module loggers; applications decide where records
go. ``configure_logging`` is what the command line uses.

Usage:
    from cover_client.observability import configure_logging

    configure_logging("DEBUG", json_format=True)
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Union

ROOT_LOGGER = "cover_client"

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
        }

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(level: Union[int, str] = logging.INFO, json_format: bool = False) -> logging.Logger:
    """Attach a single stream handler to the ``cover_client`` logger.

    Calling it again replaces the handler instead of adding another one.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_cover_client_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._cover_client_handler = True
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
