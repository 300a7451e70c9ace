"""Analysis lifecycle statuses and the legal moves between them."""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet

from cover_client.exceptions import AnalysisError, AnalysisErrorCode


class AnalysisStatus(str, Enum):
    """Lifecycle status of an analysis.

    ``NOT_STARTED`` only exists client-side; every other value is also a
    wire status reported by the service.
    """
    NOT_STARTED = "NOT_STARTED"
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    CANCELED = "CANCELED"
    ERRORED = "ERRORED"
    COMPLETED = "COMPLETED"


IN_PROGRESS_STATUSES: FrozenSet[AnalysisStatus] = frozenset(
    {AnalysisStatus.QUEUED, AnalysisStatus.RUNNING}
)
ENDED_STATUSES: FrozenSet[AnalysisStatus] = frozenset(
    {AnalysisStatus.CANCELED, AnalysisStatus.ERRORED, AnalysisStatus.COMPLETED}
)

_TRANSITIONS: Dict[AnalysisStatus, FrozenSet[AnalysisStatus]] = {
    AnalysisStatus.NOT_STARTED: frozenset({AnalysisStatus.QUEUED}),
    AnalysisStatus.QUEUED: IN_PROGRESS_STATUSES | ENDED_STATUSES,
    AnalysisStatus.RUNNING: frozenset({AnalysisStatus.RUNNING}) | ENDED_STATUSES,
    # A finished analysis can be re-queried or re-canceled; the service may
    # then report a different terminal status, but never a live one.
    AnalysisStatus.CANCELED: ENDED_STATUSES,
    AnalysisStatus.ERRORED: ENDED_STATUSES,
    AnalysisStatus.COMPLETED: ENDED_STATUSES,
}


def can_transition(current: AnalysisStatus, new: AnalysisStatus) -> bool:
    return AnalysisStatus(new) in _TRANSITIONS[AnalysisStatus(current)]


def check_transition(current: AnalysisStatus, new: AnalysisStatus) -> None:
    """Raise ``AnalysisError(INVALID_TRANSITION)`` unless ``current -> new`` is legal."""
    if not can_transition(current, new):
        raise AnalysisError(
            f"Analysis status cannot change from {AnalysisStatus(current).value} "
            f"to {AnalysisStatus(new).value}.",
            AnalysisErrorCode.INVALID_TRANSITION,
        )
