"""Data behind the history visualisation of a linearizability check.

The checker records each partition's call and return entries and the
longest partial linearizations it found. This module turns them into
descriptions of every operation and the model state after each step of
every partial linearization. It also serialises that data to JSON in the
shape the page renderer expects.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from labkit.porcupine.checker import LinearizationInfo
from labkit.porcupine.model import EventKind, Model

__all__ = [
    "HistoryElement",
    "LinearizationStep",
    "PartitionVisualization",
    "compute_visualization_data",
    "visualization_json",
]


@dataclass
class HistoryElement:
    """One operation of a partition, with its client, times and description."""

    client_id: int = 0
    start: int = 0
    end: int = 0
    description: str = ""


@dataclass(frozen=True)
class LinearizationStep:
    """An operation in a partial linearization and the state it leads to."""

    index: int
    state_description: str


@dataclass
class PartitionVisualization:
    """Everything drawn for one partition.

    ``largest`` maps an operation index to the position, in
    ``partial_linearizations``, of the longest linearization containing it.
    """

    history: list[HistoryElement] = field(default_factory=list)
    partial_linearizations: list[list[LinearizationStep]] = field(default_factory=list)
    largest: dict[int, int] = field(default_factory=dict)

    def to_json_object(self) -> dict[str, Any]:
        return {
            "History": [
                {
                    "ClientId": h.client_id,
                    "Start": h.start,
                    "End": h.end,
                    "Description": h.description,
                }
                for h in self.history
            ],
            "PartialLinearizations": [
                [{"Index": s.index, "StateDescription": s.state_description} for s in lin]
                for lin in self.partial_linearizations
            ],
            "Largest": {
                str(k): self.largest[k] for k in sorted(self.largest, key=str)
            },
        }


def _partition_data(
    model: Model, entries: list[Any], partials: list[list[int]]
) -> PartitionVisualization:
    history = [HistoryElement() for _ in range(len(entries) // 2)]
    call_value: dict[int, Any] = {}
    return_value: dict[int, Any] = {}
    for elem in entries:
        element = history[elem.id]
        if elem.kind == EventKind.CALL:
            element.client_id = elem.client_id
            element.start = elem.time
            call_value[elem.id] = elem.value
        else:
            element.end = elem.time
            element.description = model.describe_operation(call_value.get(elem.id), elem.value)
            return_value[elem.id] = elem.value

    ordered = sorted(partials, key=len, reverse=True)
    largest_index: dict[int, int] = {}
    largest_size: dict[int, int] = {}
    linearizations: list[list[LinearizationStep]] = []
    for i, partial in enumerate(ordered):
        steps = []
        state = model.init()
        for hist_id in partial:
            ok, state = model.step(state, call_value.get(hist_id), return_value.get(hist_id))
            if not ok:
                raise ValueError(
                    "valid partial linearization returned non-ok result from model step"
                )
            steps.append(LinearizationStep(hist_id, model.describe_state(state)))
            if largest_size.get(hist_id, 0) < len(partial):
                largest_size[hist_id] = len(partial)
                largest_index[hist_id] = i
        linearizations.append(steps)

    return PartitionVisualization(history, linearizations, largest_index)


def compute_visualization_data(
    model: Model, info: LinearizationInfo
) -> list[PartitionVisualization]:
    """Describe each partition's operations and partial linearizations.

    Raises ValueError if a recorded partial linearization does not replay
    against the model.
    """
    model = model.with_defaults()
    return [
        _partition_data(model, entries, partials)
        for entries, partials in zip(info.history, info.partial_linearizations)
    ]


_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def visualization_json(model: Model, info: LinearizationInfo) -> str:
    """Compact JSON of the visualisation data, safe to embed in a page."""
    data = [p.to_json_object() for p in compute_visualization_data(model, info)]
    text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in text)