from labkit.kvmodel import (
    KV_MODEL,
    KvInput,
    KvOp,
    KvOutput,
    kv_describe_operation,
    kv_init,
    kv_partition,
    kv_step,
)
from labkit.porcupine.api import check_operations, check_operations_verbose
from labkit.porcupine.model import CheckResult, Operation


def test_init_is_empty_string():
    assert kv_init() == ""


def test_step_get():
    assert kv_step("v", KvInput(KvOp.GET, "k"), KvOutput("v")) == (True, "v")
    ok, state = kv_step("v", KvInput(KvOp.GET, "k"), KvOutput("w"))
    assert ok is False
    assert state == "v"


def test_step_put_and_append():
    assert kv_step("old", KvInput(KvOp.PUT, "k", "new"), KvOutput()) == (True, "new")
    assert kv_step("ab", KvInput(KvOp.APPEND, "k", "cd"), KvOutput()) == (True, "abcd")


def test_raw_int_ops_work():
    assert kv_step("s", KvInput(1, "k", "t"), KvOutput()) == (True, "t")
    assert kv_step("s", KvInput(2, "k", "t"), KvOutput()) == (True, "st")


def test_describe():
    assert kv_describe_operation(KvInput(KvOp.GET, "k"), KvOutput("v")) == "get('k') -> 'v'"
    assert kv_describe_operation(KvInput(KvOp.PUT, "k", "v"), KvOutput()) == "put('k', 'v')"
    assert kv_describe_operation(KvInput(KvOp.APPEND, "k", "v"), KvOutput()) == "append('k', 'v')"
    assert kv_describe_operation(KvInput(7, "k"), KvOutput()) == "<invalid>"


def test_partition_groups_by_sorted_key():
    ops = [
        Operation(0, KvInput(KvOp.PUT, "b", "1"), 0, KvOutput(), 1),
        Operation(0, KvInput(KvOp.PUT, "a", "2"), 2, KvOutput(), 3),
        Operation(0, KvInput(KvOp.GET, "b"), 4, KvOutput("1"), 5),
    ]
    parts = kv_partition(ops)
    assert [[op.input.key for op in part] for part in parts] == [["a"], ["b", "b"]]
    assert parts[1] == [ops[0], ops[2]]


def test_model_accepts_append_history():
    ops = [
        Operation(0, KvInput(KvOp.PUT, "x", "a"), 0, KvOutput(), 10),
        Operation(0, KvInput(KvOp.APPEND, "x", "b"), 20, KvOutput(), 30),
        Operation(1, KvInput(KvOp.GET, "x"), 40, KvOutput("ab"), 50),
    ]
    assert check_operations(KV_MODEL, ops) is True


def test_model_rejects_wrong_order():
    ops = [
        Operation(0, KvInput(KvOp.PUT, "x", "a"), 0, KvOutput(), 10),
        Operation(0, KvInput(KvOp.APPEND, "x", "b"), 20, KvOutput(), 30),
        Operation(1, KvInput(KvOp.GET, "x"), 40, KvOutput("ba"), 50),
    ]
    assert check_operations(KV_MODEL, ops) is False


def test_keys_do_not_interfere():
    ops = [
        Operation(0, KvInput(KvOp.PUT, "x", "1"), 0, KvOutput(), 10),
        Operation(1, KvInput(KvOp.GET, "y"), 20, KvOutput(""), 30),
        Operation(1, KvInput(KvOp.GET, "x"), 40, KvOutput("1"), 50),
    ]
    result, info = check_operations_verbose(KV_MODEL, ops, 0)
    assert result == CheckResult.OK
    assert len(info.history) == 2