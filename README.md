# labkit

A linearizability checker for histories of concurrent operations, a ready-made
model of a key/value store, and an HTML view of why a history fails.

- **`labkit.porcupine.model`**: the building blocks. A `Model` is a
  sequential specification: `init()` gives the initial state and
  `step(state, input, output)` returns `(ok, new_state)`. Optional hooks are
  `partition`, `partition_event`, `equal`, `describe_operation` and
  `describe_state`; `Model.with_defaults()` fills in the missing ones
  (`no_partition`, `no_partition_event`, `shallow_equal`,
  `default_describe_operation`, `default_describe_state`). A history is
  either a list of `Operation` records (`client_id`, `input`, `call_time`,
  `output`, `return_time`) or a list of `Event` records (`client_id`, `kind`,
  `value`, `id`), where `kind` is `EventKind.CALL` or `EventKind.RETURN` and
  a call and its return share an `id`. Results are `CheckResult.OK`,
  `CheckResult.ILLEGAL` or, after a timeout, `CheckResult.UNKNOWN`.
- **`labkit.porcupine.api`**: the entry points. `check_operations` and
  `check_events` return `True` when the history is linearizable;
  `check_operations_timeout` and `check_events_timeout` return a
  `CheckResult`; `check_operations_verbose` and `check_events_verbose` also
  return a `LinearizationInfo` holding the longest partial linearizations
  found. A timeout is in seconds; `0` or `None` means no timeout. A check that
  times out may miss a violation.
- **`labkit.porcupine.checker`**: the search itself
  (`check_operation_history`, `check_event_history`). Each partition of the
  history is checked in its own thread.
- **`labkit.porcupine.visualization`**: `compute_visualization_data` turns a
  `LinearizationInfo` into `PartitionVisualization` records
  (`HistoryElement` and `LinearizationStep` entries), and
  `visualization_json` serialises them as JSON that is safe to embed in a
  page.
- **`labkit.porcupine.render`**: `render_html` builds a self-contained HTML
  page from that JSON; `visualize` writes the page for a checked history to a
  text stream and `visualize_path` writes it to a file.
- **`labkit.porcupine.bitset`**: the fixed-size `Bitset` the checker uses to
  track which operations are linearized.
- **`labkit.kvmodel`**: a key/value store with get, put and append.
  `KvInput(op, key, value)` takes a `KvOp` (`GET`, `PUT`, `APPEND`),
  `KvOutput(value)` holds what a get returned, and `KV_MODEL` is the `Model`
  built from `kv_init`, `kv_step`, `kv_partition` (one partition per key,
  ordered by key) and `kv_describe_operation`.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from labkit.kvmodel import KV_MODEL, KvInput, KvOp, KvOutput
from labkit.porcupine.api import check_operations, check_operations_verbose
from labkit.porcupine.model import CheckResult, Operation
from labkit.porcupine.render import visualize_path

history = [
    Operation(client_id=0, input=KvInput(KvOp.PUT, "x", "1"),
              call_time=0, output=KvOutput(), return_time=10),
    Operation(client_id=1, input=KvInput(KvOp.GET, "x"),
              call_time=5, output=KvOutput("1"), return_time=15),
]

assert check_operations(KV_MODEL, history)

result, info = check_operations_verbose(KV_MODEL, history, 1.0)
if result == CheckResult.ILLEGAL:
    visualize_path(KV_MODEL, info, "history.html")
```

## What the package does not do

labkit is a library for checking recorded histories. It does not include a
simulated network, an RPC layer, a checked message encoder, a key/value
server or client, or a MapReduce runtime or applications, and it installs no
command-line program. The `labkit.mr` and `labkit.mrapps` subpackages are
present but hold no modules.