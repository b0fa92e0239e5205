"""Sequential model of a key/value store with get, put and append."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Sequence

from labkit.porcupine.model import Model, Operation

__all__ = [
    "KvOp",
    "KvInput",
    "KvOutput",
    "kv_partition",
    "kv_init",
    "kv_step",
    "kv_describe_operation",
    "KV_MODEL",
]


class KvOp(enum.IntEnum):
    GET = 0
    PUT = 1
    APPEND = 2


@dataclass(frozen=True)
class KvInput:
    op: int
    key: str
    value: str = ""


@dataclass(frozen=True)
class KvOutput:
    value: str = ""


def kv_partition(history: Sequence[Operation]) -> list[list[Operation]]:
    """Split a history by key, partitions ordered by key."""
    by_key: dict[str, list[Operation]] = {}
    for op in history:
        by_key.setdefault(op.input.key, []).append(op)
    return [by_key[key] for key in sorted(by_key)]


def kv_init() -> str:
    # a single key's value; the history is partitioned by key
    return ""


def kv_step(state: str, input: KvInput, output: KvOutput) -> tuple[bool, str]:
    if input.op == KvOp.GET:
        return output.value == state, state
    if input.op == KvOp.PUT:
        return True, input.value
    return True, state + input.value


def kv_describe_operation(input: KvInput, output: KvOutput) -> str:
    if input.op == KvOp.GET:
        return f"get('{input.key}') -> '{output.value}'"
    if input.op == KvOp.PUT:
        return f"put('{input.key}', '{input.value}')"
    if input.op == KvOp.APPEND:
        return f"append('{input.key}', '{input.value}')"
    return "<invalid>"


KV_MODEL = Model(
    init=kv_init,
    step=kv_step,
    partition=kv_partition,
    describe_operation=kv_describe_operation,
)