"""Linearizability checking of operation and event histories.

Each partition of a history is searched independently, in its own thread,
for an order of operations that respects real time and the model's
sequential specification. Partial linearizations can be collected for
visualising why a history is not linearizable.
"""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from labkit.porcupine.bitset import Bitset
from labkit.porcupine.model import CheckResult, Event, EventKind, Model, Operation

__all__ = [
    "LinearizationInfo",
    "check_operation_history",
    "check_event_history",
]


@dataclass(frozen=True)
class _Entry:
    kind: EventKind
    value: Any
    id: int
    time: int
    client_id: int


@dataclass
class LinearizationInfo:
    """Per-partition entries and the longest partial linearizations found.

    ``history[p]`` lists the call and return entries of partition ``p``;
    ``partial_linearizations[p]`` lists sequences of operation ids.
    """

    history: list[list[Any]] = field(default_factory=list)
    partial_linearizations: list[list[list[int]]] = field(default_factory=list)


def _make_entries(history: Sequence[Operation]) -> list[_Entry]:
    entries: list[_Entry] = []
    for op_id, op in enumerate(history):
        entries.append(_Entry(EventKind.CALL, op.input, op_id, op.call_time, op.client_id))
        entries.append(_Entry(EventKind.RETURN, op.output, op_id, op.return_time, op.client_id))
    entries.sort(key=lambda e: e.time)
    return entries


def _renumber(events: Sequence[Event]) -> list[Event]:
    mapping: dict[int, int] = {}
    renumbered = []
    for event in events:
        new_id = mapping.setdefault(event.id, len(mapping))
        renumbered.append(Event(event.client_id, event.kind, event.value, new_id))
    return renumbered


def _convert_entries(events: Sequence[Event]) -> list[_Entry]:
    # the position in the list stands in for the time
    return [
        _Entry(
            EventKind.RETURN if event.kind == EventKind.RETURN else EventKind.CALL,
            event.value,
            event.id,
            index,
            event.client_id,
        )
        for index, event in enumerate(events)
    ]


class _Node:
    __slots__ = ("value", "match", "id", "next", "prev")

    def __init__(self, value: Any, match: Optional[_Node], node_id: int) -> None:
        self.value = value
        self.match = match  # the return node for a call, None for a return
        self.id = node_id
        self.next: Optional[_Node] = None
        self.prev: Optional[_Node] = None


def _insert_before(node: _Node, mark: Optional[_Node]) -> _Node:
    if mark is not None:
        before = mark.prev
        mark.prev = node
        node.next = mark
        if before is not None:
            node.prev = before
            before.next = node
    return node


def _length(node: Optional[_Node]) -> int:
    count = 0
    while node is not None:
        node = node.next
        count += 1
    return count


def _make_linked_entries(entries: Sequence[_Entry]) -> Optional[_Node]:
    root: Optional[_Node] = None
    returns: dict[int, _Node] = {}
    for elem in reversed(entries):
        if elem.kind == EventKind.RETURN:
            node = _Node(elem.value, None, elem.id)
            returns[elem.id] = node
        else:
            node = _Node(elem.value, returns.get(elem.id), elem.id)
        _insert_before(node, root)
        root = node
    return root


def _lift(entry: _Node) -> None:
    entry.prev.next = entry.next
    entry.next.prev = entry.prev
    match = entry.match
    match.prev.next = match.next
    if match.next is not None:
        match.next.prev = match.prev


def _unlift(entry: _Node) -> None:
    match = entry.match
    match.prev.next = match
    if match.next is not None:
        match.next.prev = match
    entry.prev.next = entry
    entry.next.prev = entry


def _cache_contains(
    model: Model, cache: dict[int, list[tuple[Bitset, Any]]], linearized: Bitset, state: Any
) -> bool:
    return any(
        linearized == seen and model.equal(state, seen_state)
        for seen, seen_state in cache.get(linearized.digest(), ())
    )


def _check_single(
    model: Model,
    history: Sequence[_Entry],
    compute_partial: bool,
    kill: threading.Event,
) -> tuple[bool, list[Optional[list[int]]]]:
    entry = _make_linked_entries(history)
    n = _length(entry) // 2
    linearized = Bitset(n)
    cache: dict[int, list[tuple[Bitset, Any]]] = {}
    calls: list[tuple[_Node, Any]] = []
    # longest linearizable prefix that includes the given operation
    longest: list[Optional[list[int]]] = [None] * n

    state = model.init()
    head = _insert_before(_Node(None, None, -1), entry)
    while head.next is not None:
        if kill.is_set():
            return False, longest
        if entry.match is not None:
            ok, new_state = model.step(state, entry.value, entry.match.value)
            if ok:
                new_linearized = linearized.clone().set(entry.id)
                if not _cache_contains(model, cache, new_linearized, new_state):
                    cache.setdefault(new_linearized.digest(), []).append(
                        (new_linearized, new_state)
                    )
                    calls.append((entry, state))
                    state = new_state
                    linearized.set(entry.id)
                    _lift(entry)
                    entry = head.next
                else:
                    entry = entry.next
            else:
                entry = entry.next
        else:
            if not calls:
                return False, longest
            if compute_partial:
                seq: Optional[list[int]] = None
                for call, _ in calls:
                    current = longest[call.id]
                    if current is None or len(calls) > len(current):
                        if seq is None:
                            seq = [c.id for c, _ in calls]
                        longest[call.id] = seq
            entry, state = calls.pop()
            linearized.clear(entry.id)
            _unlift(entry)
            entry = entry.next

    # the complete linearization is the longest one for every operation
    seq = [c.id for c, _ in calls]
    return True, [seq] * n


def _check_parallel(
    model: Model,
    history: list[list[_Entry]],
    compute_info: bool,
    timeout: Optional[float],
) -> tuple[CheckResult, LinearizationInfo]:
    kill = threading.Event()
    results: queue.Queue = queue.Queue()
    longest: list[list[Optional[list[int]]]] = [[] for _ in history]

    def work(index: int, subhistory: list[_Entry]) -> None:
        try:
            ok, found = _check_single(model, subhistory, compute_info, kill)
        except BaseException:
            results.put(False)
            raise
        longest[index] = found
        results.put(ok)

    for index, subhistory in enumerate(history):
        threading.Thread(target=work, args=(index, subhistory), daemon=True).start()

    deadline = time.monotonic() + timeout if timeout else None
    ok = True
    timed_out = False
    count = 0
    while count < len(history):
        remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
        try:
            result = results.get(timeout=remaining)
        except queue.Empty:
            # on a timeout the answer might be a false positive
            timed_out = True
            kill.set()
            break
        count += 1
        ok = ok and result
        if not ok and not compute_info:
            kill.set()
            break

    info = LinearizationInfo()
    if compute_info:
        # wait for every thread before reading what they found
        while count < len(history):
            results.get()
            count += 1
        partials: list[list[list[int]]] = []
        for found in longest:
            unique: dict[int, list[int]] = {}
            for seq in found:
                if seq is not None:
                    unique.setdefault(id(seq), seq)
            partials.append([list(seq) for seq in unique.values()])
        info = LinearizationInfo(history=history, partial_linearizations=partials)

    if not ok:
        return CheckResult.ILLEGAL, info
    if timed_out:
        return CheckResult.UNKNOWN, info
    return CheckResult.OK, info


def check_operation_history(
    model: Model,
    history: Sequence[Operation],
    compute_info: bool,
    timeout: Optional[float],
) -> tuple[CheckResult, LinearizationInfo]:
    """Check a history of operations; ``timeout`` in seconds, 0 or None for none."""
    model = model.with_defaults()
    partitions = model.partition(history)
    entries = [_make_entries(sub) for sub in partitions]
    return _check_parallel(model, entries, compute_info, timeout)


def check_event_history(
    model: Model,
    history: Sequence[Event],
    compute_info: bool,
    timeout: Optional[float],
) -> tuple[CheckResult, LinearizationInfo]:
    """Check a history of call and return events; ``timeout`` as above."""
    model = model.with_defaults()
    partitions = model.partition_event(history)
    entries = [_convert_entries(_renumber(sub)) for sub in partitions]
    return _check_parallel(model, entries, compute_info, timeout)