"""Audit rules: field matching against accumulated audit events."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Callable

from vigilant_canine.audit_fields import AuditEventAccumulator, NetworkRecord, SyscallRecord

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_LEADING_INT = re.compile(r"-?[0-9]+")


class EventSeverity(enum.Enum):
    """Severity attached to events raised by rules."""

    info = "info"
    warning = "warning"
    critical = "critical"


class AuditMatchType(enum.Enum):
    """How a field value is compared with a pattern."""

    exact = enum.auto()
    contains = enum.auto()
    regex = enum.auto()
    starts_with = enum.auto()
    numeric_eq = enum.auto()
    numeric_gt = enum.auto()
    numeric_lt = enum.auto()


class AuditRuleAction(enum.Enum):
    """Kind of event produced when a rule matches."""

    process_execution = enum.auto()
    network_connection = enum.auto()
    failed_access = enum.auto()
    privilege_change = enum.auto()
    suspicious_syscall = enum.auto()


@dataclass
class AuditFieldMatch:
    """A single field condition of a rule."""

    field_name: str
    pattern: str
    match_type: AuditMatchType = AuditMatchType.contains
    negate: bool = False
    compiled_regex: re.Pattern[str] | None = None  # used when match_type is regex


@dataclass
class AuditRule:
    """A named set of field conditions, all of which must hold."""

    name: str
    description: str = ""
    field_matches: list[AuditFieldMatch] = field(default_factory=list)
    action: AuditRuleAction = AuditRuleAction.suspicious_syscall
    severity: EventSeverity = EventSeverity.warning
    enabled: bool = True
    syscall_filter: int = 0  # 0 means any syscall


_SYSCALL_FIELDS: dict[str, Callable[[SyscallRecord], str]] = {
    "pid": lambda s: str(s.pid),
    "ppid": lambda s: str(s.ppid),
    "uid": lambda s: str(s.uid),
    "euid": lambda s: str(s.euid),
    "comm": lambda s: s.comm,
    "exe": lambda s: s.exe,
    "syscall": lambda s: str(s.syscall),
    "success": lambda s: s.success,
    "exit": lambda s: str(s.exit_code),
}

_NETWORK_FIELDS: dict[str, Callable[[NetworkRecord], str]] = {
    "saddr": lambda n: n.local_addr,
    "daddr": lambda n: n.remote_addr,
    "sport": lambda n: str(n.local_port),
    "dport": lambda n: str(n.remote_port),
    "protocol": lambda n: n.protocol,
}


def _join_args(argv: list[str]) -> str:
    cmdline = ""
    for arg in argv:
        cmdline = f"{cmdline} {arg}" if cmdline else arg
    return cmdline


def _field_value(event: AuditEventAccumulator, name: str) -> str | None:
    if event.syscall is not None and name in _SYSCALL_FIELDS:
        return _SYSCALL_FIELDS[name](event.syscall)
    if event.cwd is not None and name == "cwd":
        return event.cwd.cwd
    if event.execve is not None and name == "cmdline":
        return _join_args(event.execve.argv)
    if name == "path" and event.paths:
        return event.paths[0].name
    if event.network is not None and name in _NETWORK_FIELDS:
        return _NETWORK_FIELDS[name](event.network)
    return event.raw_fields.get(name)


def _parse_numeric(value: str) -> int | None:
    """Parse a leading signed 64-bit integer; trailing text is ignored."""
    found = _LEADING_INT.match(value)
    if found is None:
        return None
    number = int(found.group())
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def _compare(match: AuditFieldMatch, value: str) -> bool:
    kind = match.match_type
    if kind is AuditMatchType.exact:
        return value == match.pattern
    if kind is AuditMatchType.contains:
        return match.pattern in value
    if kind is AuditMatchType.regex:
        return match.compiled_regex is not None and match.compiled_regex.search(value) is not None
    if kind is AuditMatchType.starts_with:
        return value.startswith(match.pattern)

    field_num = _parse_numeric(value)
    pattern_num = _parse_numeric(match.pattern)
    if field_num is None or pattern_num is None:
        return False
    if kind is AuditMatchType.numeric_eq:
        return field_num == pattern_num
    if kind is AuditMatchType.numeric_gt:
        return field_num > pattern_num
    return field_num < pattern_num


def matches_field(match: AuditFieldMatch, event: AuditEventAccumulator) -> bool:
    """Tell whether one field condition holds for the event."""
    value = _field_value(event, match.field_name)
    if value is None:
        return match.negate
    result = _compare(match, value)
    return not result if match.negate else result


def matches_rule(rule: AuditRule, event: AuditEventAccumulator) -> bool:
    """Tell whether an enabled rule matches the event."""
    if not rule.enabled:
        return False
    if rule.syscall_filter != 0 and (
        event.syscall is None or event.syscall.syscall != rule.syscall_filter
    ):
        return False
    return all(matches_field(match, event) for match in rule.field_matches)


def _regex_match(field_name: str, pattern: str) -> AuditFieldMatch:
    return AuditFieldMatch(
        field_name=field_name,
        pattern=pattern,
        match_type=AuditMatchType.regex,
        compiled_regex=re.compile(pattern),
    )


def get_default_audit_rules() -> list[AuditRule]:
    """Return the built-in rules for common suspicious activity."""
    return [
        AuditRule(
            name="compiler_execution",
            description="Detect execution of compilers and interpreters",
            field_matches=[_regex_match("comm", r"gcc|g\+\+|clang|python|perl|bash|sh")],
            action=AuditRuleAction.process_execution,
            severity=EventSeverity.info,
        ),
        AuditRule(
            name="privileged_command",
            description="Detect privileged command execution",
            field_matches=[_regex_match("comm", "sudo|su|pkexec|doas")],
            action=AuditRuleAction.privilege_change,
            severity=EventSeverity.warning,
        ),
        AuditRule(
            name="suspicious_shell",
            description="Detect shells spawned by unusual parent processes",
            field_matches=[_regex_match("comm", "bash|sh|zsh|fish")],
            action=AuditRuleAction.suspicious_syscall,
            severity=EventSeverity.warning,
            enabled=False,  # too noisy by default
        ),
        AuditRule(
            name="sensitive_file_access",
            description="Detect access to sensitive system files",
            field_matches=[_regex_match("path", "/etc/shadow|/etc/sudoers|/etc/passwd")],
            action=AuditRuleAction.process_execution,
            severity=EventSeverity.warning,
        ),
        AuditRule(
            name="failed_access",
            description="Detect failed file access attempts (EACCES/EPERM)",
            field_matches=[
                AuditFieldMatch(
                    field_name="success", pattern="no", match_type=AuditMatchType.exact
                ),
                _regex_match("exit", "-13|-1"),  # -EACCES or -EPERM
            ],
            action=AuditRuleAction.failed_access,
            severity=EventSeverity.info,
        ),
        AuditRule(
            name="root_network_connection",
            description="Detect network connections initiated by root",
            field_matches=[
                AuditFieldMatch(
                    field_name="uid", pattern="0", match_type=AuditMatchType.numeric_eq
                )
            ],
            action=AuditRuleAction.network_connection,
            severity=EventSeverity.warning,
            enabled=False,  # can be noisy
        ),
        AuditRule(
            name="setuid_execution",
            description="Detect execution of setuid/setgid binaries",
            field_matches=[
                AuditFieldMatch(
                    field_name="uid",
                    pattern="euid",
                    match_type=AuditMatchType.exact,
                    negate=True,
                )
            ],
            action=AuditRuleAction.privilege_change,
            severity=EventSeverity.warning,
        ),
        AuditRule(
            name="privilege_escalation",
            description="Detect privilege escalation syscalls",
            field_matches=[_regex_match("syscall", "105|106|117")],
            action=AuditRuleAction.privilege_change,
            severity=EventSeverity.warning,
        ),
        AuditRule(
            name="kernel_module_load",
            description="Detect kernel module loading",
            field_matches=[_regex_match("syscall", "175|313")],
            action=AuditRuleAction.suspicious_syscall,
            severity=EventSeverity.critical,
        ),
        AuditRule(
            name="user_management",
            description="Detect user management commands",
            field_matches=[
                _regex_match(
                    "comm", "useradd|usermod|userdel|passwd|groupadd|groupmod|groupdel"
                )
            ],
            action=AuditRuleAction.process_execution,
            severity=EventSeverity.warning,
        ),
    ]