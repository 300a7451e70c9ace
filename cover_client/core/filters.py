"""Filtering of analysis results by tag or predicate."""

from __future__ import annotations

from typing import List, Optional, Sequence

from cover_client.api.schemas import AnalysisResult
from cover_client.core.options import ResultsFilter, TagFilter
from cover_client.exceptions import FilterResultsError, FilterResultsErrorCode


def _filter_by_tag(results: Sequence[AnalysisResult], tag_filter: TagFilter) -> List[AnalysisResult]:
    include = list(tag_filter.include or [])
    exclude = list(tag_filter.exclude or [])
    kept = []
    for result in results:
        if include and not any(tag in result.tags for tag in include):
            continue
        if exclude and any(tag in result.tags for tag in exclude):
            continue
        kept.append(result)
    return kept


def _tag_filter_from_dict(value: dict) -> TagFilter:
    unknown = set(value) - {"include", "exclude"}
    if unknown:
        raise FilterResultsError(
            f"Unknown results filter keys: {sorted(unknown)}",
            FilterResultsErrorCode.FILTER_INVALID,
        )
    return TagFilter(include=list(value.get("include") or []), exclude=list(value.get("exclude") or []))


def filter_results(
    results: Sequence[AnalysisResult],
    results_filter: Optional[ResultsFilter] = None,
) -> List[AnalysisResult]:
    """Filter results with a tag list, a tag filter object or a predicate.

    - a list (or tuple) of tags keeps results with at least one of the tags;
    - a :class:`TagFilter` or ``{"include": [...], "exclude": [...]}`` keeps
      results matching any include tag (when given) and no exclude tag;
    - a callable is used as the predicate directly.

    With no filter the results are returned unchanged.
    """
    if results_filter is None:
        return list(results)
    try:
        if isinstance(results_filter, (list, tuple)):
            return _filter_by_tag(results, TagFilter(include=list(results_filter)))
        if isinstance(results_filter, TagFilter):
            return _filter_by_tag(results, results_filter)
        if isinstance(results_filter, dict):
            return _filter_by_tag(results, _tag_filter_from_dict(results_filter))
        if callable(results_filter):
            return [result for result in results if results_filter(result)]
        raise FilterResultsError(
            "Results filter must be a list, a tag filter or a function",
            FilterResultsErrorCode.FILTER_INVALID,
        )
    except FilterResultsError:
        raise
    except Exception as exc:
        raise FilterResultsError(
            f"Filtering results failed: {exc}",
            FilterResultsErrorCode.FILTER_FAILED,
        ) from exc
