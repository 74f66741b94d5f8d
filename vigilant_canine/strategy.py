"""Baseline strategies: which paths to watch and where files come from."""

from __future__ import annotations

import abc
import enum
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]


class DistroType(enum.Enum):
    """Kind of distribution, which decides how baselines are managed."""

    traditional = "traditional"
    ostree = "ostree"
    btrfs_snapshot = "btrfs_snapshot"


@dataclass
class MonitorPaths:
    """Directories to watch for file integrity, and directories to skip."""

    critical: list[Path] = field(default_factory=list)
    config: list[Path] = field(default_factory=list)
    exclude: list[Path] = field(default_factory=list)


_COMMON_EXCLUDES = (
    "/var/log",
    "/var/cache",
    "/var/tmp",
    "/tmp",
    "/home",
    "/root",
    "/proc",
    "/sys",
    "/dev",
    "/run",
)


def _paths(*names: str) -> list[Path]:
    return [Path(name) for name in names]


def _run_command(args: list[str]) -> str | None:
    """Run a command and return its standard output, or None if it cannot start."""
    try:
        completed = subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=False,
        )
    except OSError:
        return None
    return completed.stdout or ""


def _query_rpm_owner(path: PathLike) -> str | None:
    output = _run_command(["rpm", "-qf", "--queryformat", "%{NAME}", os.fspath(path)])
    if not output or "not owned" in output:
        return None
    return output


def _query_dpkg_owner(path: PathLike) -> str | None:
    output = _run_command(["dpkg", "-S", os.fspath(path)])
    if not output:
        return None
    packages = "\n".join(line.split(":", 1)[0] for line in output.splitlines())
    packages = packages.rstrip()
    return packages or None


class BaselineStrategy(abc.ABC):
    """How a distribution type tracks where its files come from.

    A baseline source is a string such as ``rpm:<package>``, ``deb:<package>``,
    ``ostree:<deployment>``, ``manual`` or ``scan``.
    """

    @abc.abstractmethod
    def get_monitor_paths(self) -> MonitorPaths:
        """Return the paths that should be monitored on this system."""

    @abc.abstractmethod
    def get_file_source(self, path: PathLike) -> str | None:
        """Return the source of an absolute path, or None if it has none."""

    @abc.abstractmethod
    def get_deployment_id(self) -> str | None:
        """Return the current deployment id, or None where there is none."""


class TraditionalStrategy(BaselineStrategy):
    """Strategy for distributions managed by a package manager."""

    def get_monitor_paths(self) -> MonitorPaths:
        return MonitorPaths(
            critical=_paths(
                "/usr/bin",
                "/usr/sbin",
                "/usr/lib",
                "/usr/lib64",
                "/bin",
                "/sbin",
                "/lib",
                "/lib64",
            ),
            config=_paths("/etc"),
            exclude=_paths(*_COMMON_EXCLUDES),
        )

    def get_file_source(self, path: PathLike) -> str | None:
        package = _query_rpm_owner(path)
        if package is not None:
            return f"rpm:{package}"
        package = _query_dpkg_owner(path)
        if package is not None:
            return f"deb:{package}"
        return None

    def get_deployment_id(self) -> str | None:
        return None


class OstreeStrategy(BaselineStrategy):
    """Strategy for OSTree-based distributions."""

    def get_monitor_paths(self) -> MonitorPaths:
        return MonitorPaths(
            critical=_paths("/usr"),
            config=_paths("/etc", "/var"),
            exclude=_paths(*_COMMON_EXCLUDES, "/ostree"),
        )

    def get_file_source(self, path: PathLike) -> str | None:
        text = os.fspath(path)
        if text.startswith("/usr/"):
            deployment = self.get_deployment_id()
            if deployment is not None:
                return f"ostree:{deployment}"
        if text.startswith(("/etc/", "/var/")):
            return "ostree:overlay"
        return None

    def get_deployment_id(self) -> str | None:
        output = _run_command(["ostree", "admin", "status", "--print-current-deployment"])
        if not output:
            return None
        output = output.rstrip()
        return output or None


class BtrfsSnapshotStrategy(BaselineStrategy):
    """Strategy for distributions built on Btrfs snapshots."""

    def get_monitor_paths(self) -> MonitorPaths:
        return MonitorPaths(
            critical=_paths("/usr", "/bin", "/sbin", "/lib", "/lib64"),
            config=_paths("/etc"),
            exclude=_paths(*_COMMON_EXCLUDES, "/.snapshots"),
        )

    def get_file_source(self, path: PathLike) -> str | None:
        package = _query_rpm_owner(path)
        if package is not None:
            return f"rpm:{package}"
        return "snapshot:current"

    def get_deployment_id(self) -> str | None:
        return None


def create_baseline_strategy(distro_type: DistroType) -> BaselineStrategy:
    """Return the strategy suited to the given distribution type."""
    if distro_type is DistroType.ostree:
        return OstreeStrategy()
    if distro_type is DistroType.btrfs_snapshot:
        return BtrfsSnapshotStrategy()
    return TraditionalStrategy()