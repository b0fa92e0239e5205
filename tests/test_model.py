import dataclasses

import pytest

from labkit.porcupine.model import (
    CheckResult,
    Event,
    EventKind,
    Model,
    Operation,
    default_describe_operation,
    default_describe_state,
    no_partition,
    no_partition_event,
    shallow_equal,
)


def _register_model(**hooks):
    def step(state, inp, out):
        return True, inp

    return Model(init=lambda: 0, step=step, **hooks)


def test_with_defaults_fills_missing_hooks():
    m = _register_model().with_defaults()
    assert m.partition is no_partition
    assert m.partition_event is no_partition_event
    assert m.equal is shallow_equal
    assert m.describe_operation is default_describe_operation
    assert m.describe_state is default_describe_state


def test_with_defaults_keeps_given_hooks_and_original():
    def custom_equal(a, b):
        return True

    original = _register_model(equal=custom_equal)
    filled = original.with_defaults()
    assert filled.equal is custom_equal
    assert original.partition is None
    assert filled.init is original.init
    assert filled.step(0, 5, None) == (True, 5)


def test_no_partition_returns_whole_history():
    ops = [Operation(input=1), Operation(input=2)]
    assert no_partition(ops) == [ops]
    events = [Event(kind=EventKind.CALL, id=0), Event(kind=EventKind.RETURN, id=0)]
    assert no_partition_event(events) == [events]


def test_shallow_equal():
    assert shallow_equal("a", "a")
    assert not shallow_equal("a", "b")


def test_default_descriptions():
    assert default_describe_operation("a", "b") == "a -> b"
    assert default_describe_state("state") == "state"


def test_operation_is_immutable():
    op = Operation(client_id=1, input="x", call_time=1, output="y", return_time=2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        op.output = "z"
    assert op.output == "y"


def test_check_result_from_string():
    assert CheckResult("Ok") is CheckResult.OK
    assert CheckResult("Illegal") is CheckResult.ILLEGAL
    with pytest.raises(ValueError):
        CheckResult("Maybe")