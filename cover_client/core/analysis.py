"""Client-side lifecycle of one remote analysis.

Usage:
    from cover_client import Analysis, AnalysisFiles, RunAnalysisOptions

    analysis = Analysis("https://cover.example.com/api")
    with open("build.jar", "rb") as build:
        results = asyncio.run(
            analysis.run(AnalysisFiles(build=build), options=RunAnalysisOptions(polling_interval=5))
        )

Results are either kept in memory (``analysis.results`` is a list) or, when
a sink is passed to the constructor, written to the sink as they arrive.
The mode is fixed for the lifetime of the object.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from cover_client.api.bindings import Bindings
from cover_client.api.schemas import (
    AnalysisCancelResponse,
    AnalysisProgress,
    AnalysisResult,
    AnalysisResultsResponse,
    AnalysisStartResponse,
    AnalysisStatusResponse,
    ApiErrorResponse,
    ApiVersionResponse,
    Cursor,
)
from cover_client.core.combiner import get_file_name_for_result, group_results
from cover_client.core.delay import CancellableDelay
from cover_client.core.options import (
    AnalysisFiles,
    BindingsOptions,
    RunAnalysisOptions,
    WriteTestsOptions,
)
from cover_client.core.sinks import ResultSink, close_sink, is_result_sink
from cover_client.core.status import (
    ENDED_STATUSES,
    IN_PROGRESS_STATUSES,
    AnalysisStatus,
    check_transition,
)
from cover_client.core.writer import TestWriter
from cover_client.exceptions import AnalysisError, AnalysisErrorCode

logger = logging.getLogger(__name__)


class ResultsMode(str, Enum):
    BUFFERED = "buffered"
    STREAMING = "streaming"


class Analysis:
    """One analysis job on the service at ``api_url``.

    Status only moves forward: ``NOT_STARTED -> QUEUED -> RUNNING`` and then
    one of ``COMPLETED``, ``ERRORED`` or ``CANCELED``. A failed binding call
    leaves every attribute as it was.

    Callers must not run overlapping mutating calls on the same instance.
    """

    def __init__(
        self,
        api_url: str,
        bindings_options: Optional[BindingsOptions] = None,
        *,
        sink: Optional[ResultSink] = None,
        bindings: Optional[Bindings] = None,
        writer: Optional[TestWriter] = None,
    ):
        if sink is not None and not is_result_sink(sink):
            raise AnalysisError(
                f"Results sink must provide a callable write() method, got {type(sink).__name__}",
                AnalysisErrorCode.SINK_INVALID,
            )
        self.api_url = api_url
        self.bindings_options = bindings_options or BindingsOptions()
        self.bindings = bindings or Bindings()
        self.writer = writer

        self.analysis_id = ""
        self.status = AnalysisStatus.NOT_STARTED
        self.settings: Optional[Dict[str, Any]] = None
        self.computed_settings: Optional[Dict[str, Any]] = None
        self.default_settings: Optional[Dict[str, Any]] = None
        self.phases: Optional[Dict[str, Any]] = None
        self.progress: Optional[AnalysisProgress] = None
        self.error: Optional[ApiErrorResponse] = None
        self.cursor: Optional[Cursor] = None
        self.api_version: Optional[str] = None

        if sink is not None:
            self.results_mode = ResultsMode.STREAMING
            self.results: Union[List[AnalysisResult], ResultSink] = sink
        else:
            self.results_mode = ResultsMode.BUFFERED
            self.results = []
        self.sink_closed = False

        self.poll_delay: Optional[CancellableDelay] = None
        self.polling_stopped = False

    def __repr__(self) -> str:
        return (
            f"Analysis(api_url={self.api_url!r}, analysis_id={self.analysis_id!r}, "
            f"status={self.status.value}, results_mode={self.results_mode.value})"
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_started(self) -> None:
        if self.is_not_started():
            raise AnalysisError(
                f"Analysis has not been started (status: {self.status.value}).",
                AnalysisErrorCode.NOT_STARTED,
            )
        if not self.analysis_id:
            raise AnalysisError("Analysis has no id.", AnalysisErrorCode.NO_ID)

    def _update_status(self, response: AnalysisStatusResponse) -> None:
        check_transition(self.status, response.status)
        previous = self.status
        self.status = response.status
        self.progress = response.progress
        self.error = response.message
        if previous != self.status:
            logger.info(f"Analysis {self.analysis_id} status {previous.value} -> {self.status.value}")
        if self.error is not None:
            logger.warning(f"Analysis {self.analysis_id} reported error [{self.error.code}] {self.error.message}")
        if self.results_mode is ResultsMode.STREAMING and self.is_ended() and not self.sink_closed:
            close_sink(self.results)
            self.sink_closed = True

    def _report_results(self, results: List[AnalysisResult], options: RunAnalysisOptions) -> None:
        if options.on_results is None or not results:
            return
        for group in group_results(results).values():
            options.on_results(group, get_file_name_for_result(group[0]))

    # ------------------------------------------------------------------
    # Service calls
    # ------------------------------------------------------------------

    async def get_api_version(self) -> ApiVersionResponse:
        response = await self.bindings.get_api_version(self.api_url, self.bindings_options)
        self.api_version = response.version
        return response

    async def get_default_settings(self) -> Dict[str, Any]:
        response = await self.bindings.get_default_settings(self.api_url, self.bindings_options)
        self.default_settings = response
        return response

    async def start(
        self,
        files: AnalysisFiles,
        settings: Optional[Dict[str, Any]] = None,
    ) -> AnalysisStartResponse:
        """Submit the build artifacts and move to ``QUEUED``.

        Without ``settings`` the service defaults are used, fetched once and
        cached on ``default_settings``.
        """
        if not self.is_not_started():
            raise AnalysisError(
                f"Analysis has already started (status: {self.status.value}).",
                AnalysisErrorCode.ALREADY_STARTED,
            )

        default_settings = self.default_settings
        start_settings = settings
        if start_settings is None:
            if default_settings is None:
                try:
                    default_settings = await self.bindings.get_default_settings(
                        self.api_url, self.bindings_options
                    )
                except Exception as exc:
                    raise AnalysisError(
                        f"Could not get default settings to start the analysis: {exc}",
                        AnalysisErrorCode.START_DEFAULTS_FAILED,
                    ) from exc
            start_settings = default_settings

        response = await self.bindings.start_analysis(
            self.api_url, start_settings, files, self.bindings_options
        )
        if not self.is_not_started():
            raise AnalysisError(
                f"Analysis was started by another call while submitting (status: {self.status.value}).",
                AnalysisErrorCode.ALREADY_STARTED,
            )
        self.default_settings = default_settings
        self.analysis_id = response.id
        self.settings = settings
        self.computed_settings = response.settings
        self.phases = response.phases
        self.status = AnalysisStatus.QUEUED
        logger.info(f"Started analysis {self.analysis_id} on {self.api_url}")
        return response

    async def cancel(self) -> AnalysisCancelResponse:
        self._check_started()
        response = await self.bindings.cancel_analysis(self.api_url, self.analysis_id, self.bindings_options)
        self._update_status(response.status)
        return response

    async def get_status(self) -> AnalysisStatusResponse:
        self._check_started()
        response = await self.bindings.get_analysis_status(self.api_url, self.analysis_id, self.bindings_options)
        self._update_status(response)
        return response

    async def get_results(self, paginate: bool = True) -> AnalysisResultsResponse:
        """Fetch a page of results.

        With ``paginate`` the page starts at ``cursor`` and is appended to
        (or streamed after) what was already fetched. Without it, results
        are fetched from the start and replace the buffered list; streaming
        analyses must paginate.
        """
        if not paginate and self.results_mode is ResultsMode.STREAMING:
            raise AnalysisError(
                "Results must be paginated when streaming to a sink.",
                AnalysisErrorCode.STREAM_MUST_PAGINATE,
            )
        self._check_started()

        cursor = self.cursor if paginate else None
        response = await self.bindings.get_analysis_results(
            self.api_url, self.analysis_id, cursor, self.bindings_options
        )
        check_transition(self.status, response.status.status)

        if self.results_mode is ResultsMode.STREAMING:
            if self.sink_closed and response.results:
                logger.warning(
                    f"Dropping {len(response.results)} result(s) for analysis {self.analysis_id}: sink already closed"
                )
            elif not self.sink_closed:
                for result in response.results:
                    self.results.write(result)
        elif paginate:
            self.results = [*self.results, *response.results]
        else:
            self.results = list(response.results)
        if response.cursor is not None:
            self.cursor = response.cursor

        self._update_status(response.status)
        return response

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def run(
        self,
        files: AnalysisFiles,
        settings: Optional[Dict[str, Any]] = None,
        options: Optional[RunAnalysisOptions] = None,
    ) -> Union[List[AnalysisResult], ResultSink]:
        """Start the analysis and poll for results until it ends.

        Raises ``AnalysisError(RUN_ERRORED)`` if the analysis errors. Tests
        are written to ``options.output_tests`` only once the analysis has
        ended without error.
        """
        options = options or RunAnalysisOptions()
        await self.start(files, settings)
        self.polling_stopped = False

        while not self.is_ended() and not self.polling_stopped:
            delay: CancellableDelay = CancellableDelay(options.polling_interval)
            self.poll_delay = delay
            try:
                await delay
            finally:
                delay.cancel()
                self.poll_delay = None
            if self.polling_stopped:
                break
            response = await self.get_results()
            logger.debug(
                f"Analysis {self.analysis_id} poll: {len(response.results)} new result(s), "
                f"status {self.status.value}"
            )
            self._report_results(response.results, options)

        if self.is_errored():
            detail = f": [{self.error.code}] {self.error.message}" if self.error else ""
            raise AnalysisError(f"Analysis {self.analysis_id} errored{detail}", AnalysisErrorCode.RUN_ERRORED)

        if options.output_tests and self.is_ended():
            write_options = None
            if options.writing_concurrency:
                write_options = WriteTestsOptions(concurrency=options.writing_concurrency)
            try:
                await self.write_tests(options.output_tests, write_options)
            except Exception as exc:
                if options.on_error is None:
                    raise
                logger.warning(f"Writing tests for analysis {self.analysis_id} failed: {exc}")
                options.on_error(exc)

        return self.results

    def force_stop(self) -> None:
        """Stop ``run`` from polling again. An in-flight fetch still completes."""
        self.polling_stopped = True
        if self.poll_delay is not None:
            logger.info(f"Stopping polling for analysis {self.analysis_id}")
            self.poll_delay.cancel()

    async def write_tests(
        self,
        directory_path: str,
        options: Optional[WriteTestsOptions] = None,
    ) -> List[str]:
        if self.results_mode is ResultsMode.STREAMING:
            raise AnalysisError(
                "Tests cannot be written from an analysis streaming its results.",
                AnalysisErrorCode.STREAM_NOT_WRITABLE,
            )
        if self.writer is None:
            raise AnalysisError("No test writer was configured for this analysis.", AnalysisErrorCode.WRITER_MISSING)
        return await asyncio.to_thread(self.writer.write_tests, directory_path, list(self.results), options)

    # ------------------------------------------------------------------
    # Status predicates
    # ------------------------------------------------------------------

    def is_not_started(self) -> bool:
        return self.status is AnalysisStatus.NOT_STARTED

    def is_queued(self) -> bool:
        return self.status is AnalysisStatus.QUEUED

    def is_running(self) -> bool:
        return self.status is AnalysisStatus.RUNNING

    def is_in_progress(self) -> bool:
        return self.status in IN_PROGRESS_STATUSES

    def is_canceled(self) -> bool:
        return self.status is AnalysisStatus.CANCELED

    def is_errored(self) -> bool:
        return self.status is AnalysisStatus.ERRORED

    def is_completed(self) -> bool:
        return self.status is AnalysisStatus.COMPLETED

    def is_started(self) -> bool:
        return not self.is_not_started()

    def is_ended(self) -> bool:
        return self.status in ENDED_STATUSES
