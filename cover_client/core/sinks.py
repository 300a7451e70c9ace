"""Destinations for streamed analysis results."""

from __future__ import annotations

import json
from typing import Any, Protocol, TextIO, runtime_checkable

from cover_client.api.schemas import AnalysisResult


@runtime_checkable
class ResultSink(Protocol):
    """Anything with a ``write(result)`` method. ``close()`` is optional."""

    def write(self, result: AnalysisResult) -> Any: ...


def is_result_sink(value: Any) -> bool:
    return callable(getattr(value, "write", None))


def close_sink(sink: Any) -> None:
    close = getattr(sink, "close", None)
    if callable(close):
        close()


class JsonLinesSink:
    """Write each result to a text stream as one JSON line.

    The stream is flushed, not closed, on :meth:`close`; the caller owns it.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.count = 0
        self.closed = False

    def write(self, result: AnalysisResult) -> None:
        if self.closed:
            raise ValueError("write to closed JsonLinesSink")
        self.stream.write(json.dumps(result.to_wire(), sort_keys=True) + "\n")
        self.count += 1

    def close(self) -> None:
        if not self.closed:
            self.stream.flush()
            self.closed = True
