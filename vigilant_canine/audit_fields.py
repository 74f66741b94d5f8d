"""Audit field names and the record types assembled from audit events."""

from __future__ import annotations

from dataclasses import dataclass, field

# Process fields
PID = "pid"
PPID = "ppid"
UID = "uid"
EUID = "euid"
GID = "gid"
EGID = "egid"
COMM = "comm"
EXE = "exe"
CWD = "cwd"

# Syscall fields
SYSCALL = "syscall"
SUCCESS = "success"
EXIT = "exit"

# File/path fields
NAME = "name"
NAMETYPE = "nametype"

# Network fields
SADDR = "saddr"
DADDR = "daddr"
SPORT = "sport"
DPORT = "dport"

# Event metadata
TYPE = "type"
ARCH = "arch"
AUID = "auid"


@dataclass
class SyscallRecord:
    """SYSCALL record of an audit event."""

    audit_id: int = 0
    pid: int = 0
    ppid: int = 0
    uid: int = 0
    euid: int = 0
    gid: int = 0
    egid: int = 0
    comm: str = ""
    exe: str = ""
    syscall: int = 0
    success: str = "yes"
    exit_code: int = 0


@dataclass
class ExecveRecord:
    """EXECVE record holding the command-line arguments."""

    audit_id: int = 0
    argv: list[str] = field(default_factory=list)


@dataclass
class CwdRecord:
    """CWD record holding the current working directory."""

    audit_id: int = 0
    cwd: str = ""


@dataclass
class PathRecord:
    """PATH record naming a file or directory."""

    audit_id: int = 0
    name: str = ""
    nametype: str = ""  # "NORMAL", "CREATE", "DELETE", ...


@dataclass
class NetworkRecord:
    """Network connection record."""

    audit_id: int = 0
    protocol: str = ""
    local_addr: str = ""
    local_port: int = 0
    remote_addr: str = ""
    remote_port: int = 0


@dataclass
class AuditEventAccumulator:
    """An audit event gathered from the several records that share its id."""

    audit_id: int = 0
    received: float = 0.0  # monotonic clock reading when the first record arrived
    syscall: SyscallRecord | None = None
    execve: ExecveRecord | None = None
    cwd: CwdRecord | None = None
    paths: list[PathRecord] = field(default_factory=list)
    network: NetworkRecord | None = None
    raw_fields: dict[str, str] = field(default_factory=dict)