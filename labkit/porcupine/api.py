"""Entry points for linearizability checks.

A ``timeout`` is in seconds; 0 or None means no timeout. When a check times
out its result is :attr:`CheckResult.UNKNOWN`, and a timed-out check may
miss a violation.
"""

from __future__ import annotations

from typing import Optional, Sequence

from labkit.porcupine.checker import (
    LinearizationInfo,
    check_event_history,
    check_operation_history,
)
from labkit.porcupine.model import CheckResult, Event, Model, Operation

__all__ = [
    "check_operations",
    "check_operations_timeout",
    "check_operations_verbose",
    "check_events",
    "check_events_timeout",
    "check_events_verbose",
]


def check_operations(model: Model, history: Sequence[Operation]) -> bool:
    """True if the history of operations is linearizable."""
    result, _ = check_operation_history(model, history, False, None)
    return result == CheckResult.OK


def check_operations_timeout(
    model: Model, history: Sequence[Operation], timeout: Optional[float]
) -> CheckResult:
    result, _ = check_operation_history(model, history, False, timeout)
    return result


def check_operations_verbose(
    model: Model, history: Sequence[Operation], timeout: Optional[float]
) -> tuple[CheckResult, LinearizationInfo]:
    """Check and also collect partial linearizations for visualisation."""
    return check_operation_history(model, history, True, timeout)


def check_events(model: Model, history: Sequence[Event]) -> bool:
    """True if the history of events is linearizable."""
    result, _ = check_event_history(model, history, False, None)
    return result == CheckResult.OK


def check_events_timeout(
    model: Model, history: Sequence[Event], timeout: Optional[float]
) -> CheckResult:
    result, _ = check_event_history(model, history, False, timeout)
    return result


def check_events_verbose(
    model: Model, history: Sequence[Event], timeout: Optional[float]
) -> tuple[CheckResult, LinearizationInfo]:
    """Check and also collect partial linearizations for visualisation."""
    return check_event_history(model, history, True, timeout)