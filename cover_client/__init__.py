"""cover_client package exports.

cover_client: client for a remote unit-test generation service
- Analysis: start an analysis, poll it to completion, cancel or stop it
- Bindings: one async call per service route
- TestWriter: write the generated tests into a source tree

Quick Start:
    import asyncio
    from cover_client import Analysis, AnalysisFiles, RunAnalysisOptions

    analysis = Analysis("https://cover.example.com/api")
    with open("build.jar", "rb") as build:
        results = asyncio.run(analysis.run(AnalysisFiles(build=build)))
"""

from cover_client.api.bindings import Bindings
from cover_client.api.schemas import (
    AnalysisProgress,
    AnalysisResult,
    AnalysisResultsResponse,
    AnalysisStartResponse,
    AnalysisStatusResponse,
    ApiErrorResponse,
)
from cover_client.api.transport import Transport
from cover_client.configs.base import ClientConfig
from cover_client.core.analysis import Analysis, ResultsMode
from cover_client.core.combiner import Combiner, get_file_name_for_result, group_results
from cover_client.core.delay import CancellableDelay
from cover_client.core.filters import filter_results
from cover_client.core.options import (
    AnalysisFiles,
    BindingsOptions,
    RunAnalysisOptions,
    TagFilter,
    WriteTestsOptions,
)
from cover_client.core.sinks import JsonLinesSink, ResultSink
from cover_client.core.status import AnalysisStatus
from cover_client.core.writer import TestWriter
from cover_client.exceptions import (
    AnalysisError,
    ApiError,
    BindingsError,
    CombinerError,
    CoverClientError,
    FilterResultsError,
    WriterError,
)

__version__ = "0.1.0"
__all__ = [
    # Lifecycle
    "Analysis",
    "AnalysisStatus",
    "ResultsMode",
    "CancellableDelay",
    # Service access
    "Bindings",
    "Transport",
    # Options and config
    "AnalysisFiles",
    "BindingsOptions",
    "RunAnalysisOptions",
    "WriteTestsOptions",
    "TagFilter",
    "ClientConfig",
    # Results
    "AnalysisResult",
    "AnalysisProgress",
    "AnalysisResultsResponse",
    "AnalysisStartResponse",
    "AnalysisStatusResponse",
    "ApiErrorResponse",
    "filter_results",
    "group_results",
    "get_file_name_for_result",
    "Combiner",
    "TestWriter",
    "ResultSink",
    "JsonLinesSink",
    # Errors
    "CoverClientError",
    "ApiError",
    "BindingsError",
    "AnalysisError",
    "CombinerError",
    "WriterError",
    "FilterResultsError",
]
