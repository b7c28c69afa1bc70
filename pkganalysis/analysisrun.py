"""Data types describing analysis runs and their results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pkganalysis.ecosystem import Ecosystem


@dataclass(frozen=True)
class Key:
    """Identifies one analysed package version."""

    ecosystem: Ecosystem
    name: str
    version: str

    def __str__(self) -> str:
        return "-".join((str(self.ecosystem), self.name, self.version))


class DynamicPhase(str, Enum):
    """A way to run a package during its usage lifecycle."""

    IMPORT = "import"
    INSTALL = "install"

    def __str__(self) -> str:
        return self.value


def default_dynamic_phases() -> list[DynamicPhase]:
    """Return the phases run by dynamic analysis, in order."""
    return [DynamicPhase.INSTALL, DynamicPhase.IMPORT]


@dataclass
class WriteInfo:
    write_buffer_id: str
    bytes_written: int


@dataclass
class FileWriteResult:
    path: str
    write_info: list[WriteInfo] = field(default_factory=list)


@dataclass
class FileResult:
    path: str
    read: bool = False
    write: bool = False
    delete: bool = False


@dataclass
class SocketResult:
    address: str
    port: int
    hostnames: list[str] = field(default_factory=list)


@dataclass
class CommandResult:
    command: list[str] = field(default_factory=list)
    environment: list[str] = field(default_factory=list)


@dataclass
class DNSQueries:
    hostname: str
    types: list[str] = field(default_factory=list)


@dataclass
class DNSResult:
    dns_class: str
    queries: list[DNSQueries] = field(default_factory=list)


@dataclass
class StraceSummary:
    status: str = ""
    stdout: bytes = b""
    stderr: bytes = b""
    files: list[FileResult] = field(default_factory=list)
    sockets: list[SocketResult] = field(default_factory=list)
    commands: list[CommandResult] = field(default_factory=list)
    dns: list[DNSResult] = field(default_factory=list)


@dataclass
class DynamicAnalysisResults:
    """Per-phase results of dynamic analysis."""

    strace_summary: dict[DynamicPhase, StraceSummary] = field(default_factory=dict)
    file_writes_summary: dict[DynamicPhase, list[FileWriteResult]] = field(default_factory=dict)
    # Ids naming the files that hold the actual write buffer contents.
    file_write_buffer_ids: dict[DynamicPhase, list[str]] = field(default_factory=dict)
    execution_log: str = ""


@dataclass(frozen=True)
class AnalysisRunComplete:
    """Message sent when a package analysis run is complete."""

    key: Key