# vigilant-canine

Building blocks for a simple host-level intrusion detection system on Linux.

## What it provides

- **Audit records** (`vigilant_canine.audit_fields`): dataclasses for the parts of
  an audit event (`SyscallRecord`, `ExecveRecord`, `CwdRecord`, `PathRecord`,
  `NetworkRecord`) and `AuditEventAccumulator`, which gathers them under one audit
  id. The module also defines the standard audit field names (`PID`, `UID`,
  `COMM`, `EXE` and so on) as constants.
- **Audit rules** (`vigilant_canine.audit_rule`): an `AuditRule` is a list of
  `AuditFieldMatch` conditions that must all hold. A condition compares a field
  by `AuditMatchType` (`exact`, `contains`, `regex`, `starts_with`,
  `numeric_eq`, `numeric_gt`, `numeric_lt`) and can be negated. A rule may also
  carry a `syscall_filter`. `matches_field` and `matches_rule` evaluate them
  against an accumulator. `get_default_audit_rules()` returns ten built-in rules,
  two of which (`suspicious_shell`, `root_network_connection`) are disabled.
- **Baseline strategies** (`vigilant_canine.strategy`): `TraditionalStrategy`,
  `OstreeStrategy` and `BtrfsSnapshotStrategy` say which directories to watch
  (`get_monitor_paths()` returns a `MonitorPaths`) and where a file comes from
  (`get_file_source(path)`). They give answers such as `rpm:<package>`,
  `deb:<package>`, `ostree:<deployment>`, `ostree:overlay` or `snapshot:current`.
  The source is found by running `rpm`, `dpkg` or `ostree` where they are
  installed. `create_baseline_strategy(DistroType.ostree)` returns the strategy
  for a distribution type.
- **API helpers** (`vigilant_canine.json_format`, `vigilant_canine.handlers`):
  JSON string escaping, `paginated_response` and `error_response` bodies, and
  serialization of `JournalEventRecord`. `parse_pagination` and `paginate`
  handle paging, and `handle_health()` returns the health check body.
  `JournalEventHandler` lists journal events from a SQLite connection.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from vigilant_canine.audit_fields import AuditEventAccumulator, SyscallRecord
from vigilant_canine.audit_rule import get_default_audit_rules, matches_rule

event = AuditEventAccumulator(
    audit_id=42,
    syscall=SyscallRecord(audit_id=42, comm="sudo", uid=1000, euid=0),
)
hits = [rule.name for rule in get_default_audit_rules() if matches_rule(rule, event)]
print(hits)   # ['privileged_command', 'setuid_execution']
```

```python
from vigilant_canine.handlers import ApiError, handle_health, parse_pagination

print(handle_health())                      # {"status":"ok"}
print(parse_pagination({"limit": "50"}))    # (50, 0)

try:
    parse_pagination({"limit": "0"})
except ApiError as err:
    print(err.status, err.body)
    # 400 {"error":{"code":"INVALID_PARAMETER","message":"limit must be between 1 and 1000"}}
```

The limit defaults to 100 and must be between 1 and 1000. The offset defaults to
0 and must not be negative.

```python
import sqlite3
from vigilant_canine.handlers import JournalEventHandler

conn = sqlite3.connect("events.db")   # must already hold a journal_events table
handler = JournalEventHandler(conn)
print(handler.handle_list({"limit": "10", "offset": "0"}))
```

`handle_list` raises `ApiError` with status 400 for bad paging values. It raises
`ApiError` with status 500 and code `DATABASE_ERROR` when the query fails.

## What it does not do

- It has no command-line program and no HTTP server. The handlers return
  response bodies or raise `ApiError`, and serving them is left to the caller.
- It does not read from the kernel audit subsystem. You build the
  `AuditEventAccumulator` values yourself.
- It does not create or manage a database. `JournalEventHandler` only reads an
  existing `journal_events` table with the columns `id`, `rule_name`,
  `message`, `priority`, `unit_name` and `created_at`.
- It does not scan files or store baselines. The strategies only name paths and
  file sources.