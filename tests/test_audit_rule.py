import re

import pytest

from vigilant_canine.audit_fields import (
    AuditEventAccumulator,
    CwdRecord,
    ExecveRecord,
    NetworkRecord,
    PathRecord,
    SyscallRecord,
)
from vigilant_canine.audit_rule import (
    AuditFieldMatch,
    AuditMatchType,
    AuditRule,
    AuditRuleAction,
    EventSeverity,
    get_default_audit_rules,
    matches_field,
    matches_rule,
)


def make_event(**syscall_kwargs):
    return AuditEventAccumulator(audit_id=1, syscall=SyscallRecord(**syscall_kwargs))


def rule_named(name):
    return next(rule for rule in get_default_audit_rules() if rule.name == name)


@pytest.mark.parametrize(
    ("match_type", "pattern", "expected"),
    [
        (AuditMatchType.exact, "bash", True),
        (AuditMatchType.exact, "bas", False),
        (AuditMatchType.contains, "as", True),
        (AuditMatchType.contains, "zsh", False),
        (AuditMatchType.starts_with, "ba", True),
        (AuditMatchType.starts_with, "sh", False),
    ],
)
def test_string_match_types(match_type, pattern, expected):
    event = make_event(comm="bash")
    match = AuditFieldMatch(field_name="comm", pattern=pattern, match_type=match_type)
    assert matches_field(match, event) is expected


def test_regex_searches_compiled_pattern():
    event = make_event(comm="python3")
    match = AuditFieldMatch(
        field_name="comm",
        pattern="python",
        match_type=AuditMatchType.regex,
        compiled_regex=re.compile("python"),
    )
    assert matches_field(match, event) is True


def test_regex_without_compiled_pattern_never_matches():
    event = make_event(comm="python3")
    match = AuditFieldMatch(field_name="comm", pattern="python", match_type=AuditMatchType.regex)
    assert matches_field(match, event) is False


@pytest.mark.parametrize(
    ("match_type", "pattern", "expected"),
    [
        (AuditMatchType.numeric_eq, "1000", True),
        (AuditMatchType.numeric_eq, "0", False),
        (AuditMatchType.numeric_gt, "999", True),
        (AuditMatchType.numeric_gt, "1000", False),
        (AuditMatchType.numeric_lt, "1001", True),
        (AuditMatchType.numeric_lt, "1000", False),
        (AuditMatchType.numeric_eq, "abc", False),
        (AuditMatchType.numeric_eq, "1000xyz", True),
    ],
)
def test_numeric_match_types(match_type, pattern, expected):
    event = make_event(uid=1000)
    match = AuditFieldMatch(field_name="uid", pattern=pattern, match_type=match_type)
    assert matches_field(match, event) is expected


def test_numeric_handles_negative_exit_code():
    event = make_event(exit_code=-13)
    match = AuditFieldMatch(field_name="exit", pattern="0", match_type=AuditMatchType.numeric_lt)
    assert matches_field(match, event) is True


def test_negate_inverts_result():
    event = make_event(comm="bash")
    match = AuditFieldMatch(
        field_name="comm", pattern="bash", match_type=AuditMatchType.exact, negate=True
    )
    assert matches_field(match, event) is False


@pytest.mark.parametrize("negate", [True, False])
def test_missing_field_returns_negate(negate):
    event = AuditEventAccumulator(audit_id=1)
    match = AuditFieldMatch(field_name="comm", pattern="x", negate=negate)
    assert matches_field(match, event) is negate


def test_cmdline_joins_argv():
    event = AuditEventAccumulator(execve=ExecveRecord(argv=["ls", "-la", "/tmp"]))
    match = AuditFieldMatch(field_name="cmdline", pattern="ls -la /tmp", match_type=AuditMatchType.exact)
    assert matches_field(match, event) is True


def test_cwd_and_first_path():
    event = AuditEventAccumulator(
        cwd=CwdRecord(cwd="/home/alice"),
        paths=[PathRecord(name="/etc/shadow"), PathRecord(name="/etc/hosts")],
    )
    cwd = AuditFieldMatch(field_name="cwd", pattern="/home/alice", match_type=AuditMatchType.exact)
    first = AuditFieldMatch(field_name="path", pattern="/etc/shadow", match_type=AuditMatchType.exact)
    second = AuditFieldMatch(field_name="path", pattern="/etc/hosts", match_type=AuditMatchType.exact)
    assert matches_field(cwd, event) is True
    assert matches_field(first, event) is True
    assert matches_field(second, event) is False


def test_network_fields():
    event = AuditEventAccumulator(
        network=NetworkRecord(
            protocol="tcp", local_addr="10.0.0.1", local_port=5000,
            remote_addr="10.0.0.2", remote_port=443,
        )
    )
    exact = AuditMatchType.exact
    assert matches_field(AuditFieldMatch("daddr", "10.0.0.2", exact), event) is True
    assert matches_field(AuditFieldMatch("saddr", "10.0.0.1", exact), event) is True
    assert matches_field(AuditFieldMatch("dport", "443", exact), event) is True
    assert matches_field(AuditFieldMatch("sport", "5000", exact), event) is True
    assert matches_field(AuditFieldMatch("protocol", "tcp", exact), event) is True


def test_raw_fields_fallback():
    event = make_event(gid=5)
    event.raw_fields["gid"] = "wheel"
    match = AuditFieldMatch(field_name="gid", pattern="wheel", match_type=AuditMatchType.exact)
    assert matches_field(match, event) is True


def test_disabled_rule_never_matches():
    event = make_event(comm="bash")
    rule = AuditRule(name="r", field_matches=[], enabled=False)
    assert matches_rule(rule, event) is False
    rule.enabled = True
    assert matches_rule(rule, event) is True


def test_syscall_filter():
    rule = AuditRule(name="r", syscall_filter=59)
    assert matches_rule(rule, make_event(syscall=59)) is True
    assert matches_rule(rule, make_event(syscall=60)) is False
    assert matches_rule(rule, AuditEventAccumulator()) is False


def test_all_field_matches_required():
    rule = AuditRule(
        name="r",
        field_matches=[
            AuditFieldMatch("comm", "bash", AuditMatchType.exact),
            AuditFieldMatch("uid", "0", AuditMatchType.numeric_eq),
        ],
    )
    assert matches_rule(rule, make_event(comm="bash", uid=0)) is True
    assert matches_rule(rule, make_event(comm="bash", uid=1000)) is False


def test_default_rule_names_and_enabled_state():
    rules = get_default_audit_rules()
    assert len(rules) == 10
    disabled = {rule.name for rule in rules if not rule.enabled}
    assert disabled == {"suspicious_shell", "root_network_connection"}


def test_default_kernel_module_rule():
    rule = rule_named("kernel_module_load")
    assert rule.severity is EventSeverity.critical
    assert rule.action is AuditRuleAction.suspicious_syscall
    assert matches_rule(rule, make_event(syscall=313)) is True
    assert matches_rule(rule, make_event(syscall=59)) is False


def test_default_failed_access_rule():
    rule = rule_named("failed_access")
    assert matches_rule(rule, make_event(success="no", exit_code=-13)) is True
    assert matches_rule(rule, make_event(success="yes", exit_code=-13)) is False


def test_default_sensitive_file_rule():
    rule = rule_named("sensitive_file_access")
    event = make_event(comm="cat")
    event.paths.append(PathRecord(name="/etc/shadow"))
    assert matches_rule(rule, event) is True
    assert matches_rule(rule, make_event(comm="cat")) is False


def test_default_compiler_rule_escapes_plus():
    rule = rule_named("compiler_execution")
    assert matches_rule(rule, make_event(comm="g++")) is True
    assert matches_rule(rule, make_event(comm="vim")) is False


def test_default_setuid_rule_compares_literal():
    rule = rule_named("setuid_execution")
    assert matches_rule(rule, make_event(uid=0, euid=0)) is True
    assert matches_rule(rule, AuditEventAccumulator()) is True