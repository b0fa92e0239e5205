"""Histories, events and the model a linearizability check runs against."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence


@dataclass(frozen=True)
class Operation:
    """A completed operation with its invocation and response times."""

    client_id: int = 0
    input: Any = None
    call_time: int = 0
    output: Any = None
    return_time: int = 0


class EventKind(enum.Enum):
    CALL = "call"
    RETURN = "return"


@dataclass(frozen=True)
class Event:
    """One half of an operation: its call or its return."""

    client_id: int = 0
    kind: EventKind = EventKind.CALL
    value: Any = None
    id: int = 0


class CheckResult(str, enum.Enum):
    UNKNOWN = "Unknown"  # timed out
    OK = "Ok"
    ILLEGAL = "Illegal"


def no_partition(history: Sequence[Operation]) -> list[list[Operation]]:
    return [list(history)]


def no_partition_event(history: Sequence[Event]) -> list[list[Event]]:
    return [list(history)]


def shallow_equal(state1: Any, state2: Any) -> bool:
    return state1 == state2


def default_describe_operation(input: Any, output: Any) -> str:
    return f"{input} -> {output}"


def default_describe_state(state: Any) -> str:
    return f"{state}"


@dataclass(frozen=True)
class Model:
    """A sequential specification.

    ``step(state, input, output)`` returns ``(ok, new_state)`` and must not
    mutate ``state``. A history is linearizable if and only if each of its
    partitions is.
    """

    init: Callable[[], Any]
    step: Callable[[Any, Any, Any], tuple[bool, Any]]
    partition: Optional[Callable[[Sequence[Operation]], list[list[Operation]]]] = None
    partition_event: Optional[Callable[[Sequence[Event]], list[list[Event]]]] = None
    equal: Optional[Callable[[Any, Any], bool]] = None
    describe_operation: Optional[Callable[[Any, Any], str]] = None
    describe_state: Optional[Callable[[Any], str]] = None

    def with_defaults(self) -> Model:
        """Return a copy with every missing hook replaced by its default."""
        return dataclasses.replace(
            self,
            partition=self.partition or no_partition,
            partition_event=self.partition_event or no_partition_event,
            equal=self.equal or shallow_equal,
            describe_operation=self.describe_operation or default_describe_operation,
            describe_state=self.describe_state or default_describe_state,
        )