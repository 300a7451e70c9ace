"""Tests for analysis status transitions."""

from __future__ import annotations

import pytest

from cover_client.core.status import (
    ENDED_STATUSES,
    IN_PROGRESS_STATUSES,
    AnalysisStatus,
    can_transition,
    check_transition,
)
from cover_client.exceptions import AnalysisError, AnalysisErrorCode


def test_status_values_match_wire_names():
    assert AnalysisStatus("RUNNING") is AnalysisStatus.RUNNING
    assert AnalysisStatus.COMPLETED == "COMPLETED"
    assert IN_PROGRESS_STATUSES == {AnalysisStatus.QUEUED, AnalysisStatus.RUNNING}
    assert ENDED_STATUSES == {AnalysisStatus.CANCELED, AnalysisStatus.ERRORED, AnalysisStatus.COMPLETED}


@pytest.mark.parametrize(
    "current,new",
    [
        (AnalysisStatus.NOT_STARTED, AnalysisStatus.QUEUED),
        (AnalysisStatus.QUEUED, AnalysisStatus.QUEUED),
        (AnalysisStatus.QUEUED, AnalysisStatus.RUNNING),
        (AnalysisStatus.QUEUED, AnalysisStatus.CANCELED),
        (AnalysisStatus.RUNNING, AnalysisStatus.RUNNING),
        (AnalysisStatus.RUNNING, AnalysisStatus.COMPLETED),
        (AnalysisStatus.COMPLETED, AnalysisStatus.CANCELED),
        (AnalysisStatus.ERRORED, AnalysisStatus.ERRORED),
    ],
)
def test_forward_transitions_are_allowed(current, new):
    assert can_transition(current, new)
    check_transition(current, new)


@pytest.mark.parametrize(
    "current,new",
    [
        (AnalysisStatus.NOT_STARTED, AnalysisStatus.RUNNING),
        (AnalysisStatus.QUEUED, AnalysisStatus.NOT_STARTED),
        (AnalysisStatus.RUNNING, AnalysisStatus.QUEUED),
        (AnalysisStatus.COMPLETED, AnalysisStatus.RUNNING),
        (AnalysisStatus.CANCELED, AnalysisStatus.NOT_STARTED),
    ],
)
def test_backward_transitions_are_rejected(current, new):
    assert not can_transition(current, new)
    with pytest.raises(AnalysisError) as exc:
        check_transition(current, new)
    assert exc.value.code == AnalysisErrorCode.INVALID_TRANSITION


def test_transition_accepts_plain_strings():
    assert can_transition("QUEUED", "RUNNING")
    assert not can_transition("COMPLETED", "QUEUED")
