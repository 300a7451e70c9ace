"""Option objects accepted by the bindings, the analysis runner and the test writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO, Callable, List, Optional, Union

from pydantic import BaseModel

from cover_client.api.schemas import AnalysisResult

BuildArtifact = Union[bytes, IO[bytes]]

DEFAULT_POLLING_INTERVAL = 60.0
DEFAULT_WRITING_CONCURRENCY = 20


@dataclass
class AnalysisFiles:
    """Build artifacts uploaded when starting an analysis."""
    build: Optional[BuildArtifact]
    dependencies_build: Optional[BuildArtifact] = None
    base_build: Optional[BuildArtifact] = None


class BindingsOptions(BaseModel):
    """Transport options forwarded with every binding call."""
    allow_unauthorized_https: bool = False


@dataclass
class TagFilter:
    """Keep results matching any ``include`` tag and none of the ``exclude`` tags."""
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)


ResultsFilter = Union[List[str], TagFilter, dict, Callable[[AnalysisResult], bool]]


@dataclass
class WriteTestsOptions:
    concurrency: Optional[int] = None
    filter: Optional[ResultsFilter] = None


@dataclass
class RunAnalysisOptions:
    """Options for :meth:`Analysis.run`.

    ``polling_interval`` is in seconds. ``on_results`` is called once per
    group of new results with the group and its test file name.
    ``on_error`` receives errors raised while writing ``output_tests``.
    """
    output_tests: Optional[str] = None
    writing_concurrency: Optional[int] = None
    polling_interval: float = DEFAULT_POLLING_INTERVAL
    on_results: Optional[Callable[[List[AnalysisResult], str], None]] = None
    on_error: Optional[Callable[[BaseException], None]] = None
