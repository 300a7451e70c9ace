"""Tests for result filtering."""

from __future__ import annotations

import pytest

from cover_client.api.schemas import AnalysisResult
from cover_client.core.filters import filter_results
from cover_client.core.options import TagFilter
from cover_client.exceptions import FilterResultsError, FilterResultsErrorCode


def _result(test_id, tags):
    return AnalysisResult(
        test_id=test_id,
        test_name=f"test{test_id}",
        tested_function="java::com.example.Game.play",
        source_file_path="com/example/Game.java",
        tags=tags,
    )


RESULTS = [
    _result("1", ["x"]),
    _result("2", ["y"]),
    _result("3", ["x", "y"]),
    _result("4", []),
]


def _ids(results):
    return [result.test_id for result in results]


def test_no_filter_returns_copy():
    kept = filter_results(RESULTS)
    assert kept == RESULTS
    assert kept is not RESULTS


def test_tag_list_matches_any_tag():
    assert _ids(filter_results(RESULTS, ["x"])) == ["1", "3"]
    assert _ids(filter_results(RESULTS, ("x", "y"))) == ["1", "2", "3"]


def test_exclude_wins_over_include():
    assert _ids(filter_results(RESULTS, {"include": ["x"], "exclude": ["y"]})) == ["1"]
    assert _ids(filter_results(RESULTS, TagFilter(include=["x"], exclude=["y"]))) == ["1"]


def test_exclude_only_keeps_everything_else():
    assert _ids(filter_results(RESULTS, {"exclude": ["y"]})) == ["1", "4"]


def test_predicate_filter():
    assert _ids(filter_results(RESULTS, lambda result: not result.tags)) == ["4"]


@pytest.mark.parametrize("bad_filter", [42, "x", {"include": ["x"], "only": ["y"]}])
def test_invalid_filter_shapes(bad_filter):
    with pytest.raises(FilterResultsError) as exc:
        filter_results(RESULTS, bad_filter)
    assert exc.value.code == FilterResultsErrorCode.FILTER_INVALID


def test_predicate_errors_are_wrapped():
    def explode(result):
        raise KeyError("tags")

    with pytest.raises(FilterResultsError) as exc:
        filter_results(RESULTS, explode)
    assert exc.value.code == FilterResultsErrorCode.FILTER_FAILED
    assert isinstance(exc.value.__cause__, KeyError)
