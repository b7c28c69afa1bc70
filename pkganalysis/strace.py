"""Parsing of sandbox strace logs into file, socket and command activity."""

from __future__ import annotations

import hashlib
import json
import logging
import posixpath
import re
from dataclasses import dataclass, field, replace
from typing import Iterable

from pkganalysis.tempfiles import create_and_write_temp_file

logger = logging.getLogger(__name__)

# 510 06:34:52.506847   43512 strace.go:587] [   2] python3 E openat(AT_FDCWD /app, 0x7f13f2254c50 /root/.ssh, O_RDONLY|O_CLOEXEC|O_DIRECTORY|O_NONBLOCK, 0o0)
_STRACE_PATTERN = re.compile(r".*strace.go:\d+\] \[.*?\] (.+) (E|X) (\S+)\((.*)\)", re.ASCII)
# 0x7f1c3a0a2620 /usr/bin/uname, 0x7f1c39e12930 ["uname", "-rs"], 0x55bbefc2d070 ["HOME=/root"]
_EXECVE_PATTERN = re.compile(r".*?(\[.*\])", re.ASCII)
# 0x7f13f201a0a3 /path, 0x0
_CREAT_PATTERN = re.compile(r"\S+ ([^,]+)", re.ASCII)
# 0x7f13f201a0a3 /proc/self/fd, O_RDONLY|O_CLOEXEC,
_OPEN_PATTERN = re.compile(r"\S+ ([^,]+), ([^,]+)", re.ASCII)
# AT_FDCWD /app, 0x7f13f201a0a3 /proc/self/fd, O_RDONLY|O_CLOEXEC, 0o0
_OPENAT_PATTERN = re.compile(r"\S+ ([^,]+), \S+ ([^,]+), ([^,]+)", re.ASCII)
# 0x561c42f5be30 /usr/local/bin/Modules/Setup.local, 0x7fdfb323c180
_STAT_PATTERN = re.compile(r"\S+ ([^,]+),", re.ASCII)
# 0x3 /tmp/build/wheel, 0x7ff1e4a30620 mal, 0x7fae4d8741f0, 0x100
_NEWFSTATAT_PATTERN = re.compile(r"\S+ ([^,]+), \S+ ([^,]+)", re.ASCII)
# 0x3 socket:[2], 0x7f1bc9e7b914 {Family: AF_INET, Addr: 8.8.8.8, Port: 53}, 0x10
_SOCKET_PATTERN = re.compile(
    r"\{Family: ([^,]+), (Addr: ([^,]*), Port: ([0-9]+)|[^}]+)\}", re.ASCII
)
# 0x7fe003272980 /tmp/jpu6po61
_UNLINK_PATTERN = re.compile(r"0x[a-f\d]+ ([^)]+)", re.ASCII)
# AT_FDCWD /app, 0x5569a7e83380 /app/vendor/composer/e06632ca, 0x200
_UNLINKAT_PATTERN = re.compile(r"\S+ ([^,]+), 0x[a-f\d]+ ([^,]+), 0x[a-f\d]+", re.ASCII)
# 0x1 pipe:[5], 0x555695ceaab0 "Linux 4.4.0\n", 0xc
_WRITE_PATTERN = re.compile(r"\S+ ([^,]+),.*", re.ASCII)

_HEX_PREFIX = "0x"
_HEX_NUMBER = re.compile(r"[+-]?[0-9a-fA-F]+")
_DECIMAL_NUMBER = re.compile(r"[0-9]+")
_INT64_MAX = 2**63 - 1
_INT64_MIN = -(2**63)


class _SyscallParseError(ValueError):
    """A syscall's arguments were not in the expected format."""


@dataclass
class WriteContentInfo:
    write_buffer_id: str
    bytes_written: int


@dataclass
class FileInfo:
    path: str
    read: bool = False
    write: bool = False
    delete: bool = False
    write_info: list[WriteContentInfo] = field(default_factory=list)


@dataclass(frozen=True)
class SocketInfo:
    address: str
    port: int


@dataclass
class CommandInfo:
    command: list[str]
    env: list[str]


def _parse_open_flags(flags: str) -> tuple[bool, bool]:
    read = write = False
    if "O_RDWR" in flags:
        read = write = True
    if "O_CREAT" in flags or "O_WRONLY" in flags:
        write = True
    if "O_RDONLY" in flags:
        read = True
    return read, write


def _parse_int(text: str, pattern: re.Pattern, base: int) -> int:
    if not pattern.fullmatch(text):
        raise _SyscallParseError(f"invalid integer: {text!r}")
    value = int(text, base)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise _SyscallParseError(f"integer out of range: {text!r}")
    return value


def _join_paths(directory: str, file: str) -> str:
    if posixpath.isabs(file):
        return file
    joined = posixpath.join(directory, file) if directory else file
    if not joined:
        return ""
    cleaned = posixpath.normpath(joined)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _decode_string_list(text: str) -> tuple[list[str], int]:
    """Decode the first JSON value of ``text``; return it and where it ended."""
    stripped = text.lstrip(" \t\r\n")
    offset = len(text) - len(stripped)
    try:
        value, end = json.JSONDecoder().raw_decode(stripped)
    except json.JSONDecodeError as exc:
        raise _SyscallParseError(f"invalid JSON list: {exc}") from exc
    if value is None:
        value = []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise _SyscallParseError(f"expected a list of strings: {value!r}")
    return value, offset + end


def _parse_cmd_and_env(cmd_and_env: str) -> tuple[list[str], list[str]]:
    cmd, end = _decode_string_list(cmd_and_env)
    next_start = cmd_and_env.find("[", end)
    if next_start == -1:
        raise _SyscallParseError(f"missing environment in: {cmd_and_env}")
    env, _ = _decode_string_list(cmd_and_env[next_start:])
    return cmd, env


def _go_list(items: list[str]) -> str:
    return "[" + " ".join(items) + "]"


class StraceResult:
    """Files, sockets and commands collected from an strace log."""

    def __init__(self) -> None:
        self._files: dict[str, FileInfo] = {}
        self._sockets: dict[str, SocketInfo] = {}
        self._commands: dict[str, CommandInfo] = {}
        # write buffers already saved, so none is written to disk twice
        self._seen_write_buffers: set[str] = set()

    def files(self) -> list[FileInfo]:
        """Return all accessed files, sorted by path."""
        return [
            replace(self._files[p], write_info=list(self._files[p].write_info))
            for p in sorted(self._files)
        ]

    def sockets(self) -> list[SocketInfo]:
        """Return all IPv4 and IPv6 sockets, in a stable order."""
        return [self._sockets[k] for k in sorted(self._sockets)]

    def commands(self) -> list[CommandInfo]:
        """Return all executed commands, in a stable order."""
        return [
            CommandInfo(list(self._commands[k].command), list(self._commands[k].env))
            for k in sorted(self._commands)
        ]

    def _record_file_access(self, path: str, read: bool, write: bool, delete: bool) -> None:
        info = self._files.setdefault(path, FileInfo(path))
        info.read = info.read or read
        info.write = info.write or write
        info.delete = info.delete or delete

    def _record_file_write(
        self, path: str, buffer: bytes, bytes_written: int, save_contents: bool
    ) -> None:
        self._record_file_access(path, False, True, False)
        if not save_contents:
            return
        write_id = hashlib.sha256(buffer).hexdigest()
        self._files[path].write_info.append(WriteContentInfo(write_id, bytes_written))
        if write_id not in self._seen_write_buffers:
            create_and_write_temp_file(write_id, buffer)
            self._seen_write_buffers.add(write_id)

    def _record_socket(self, address: str, port: int) -> None:
        # '-' separates since IPv6 addresses contain colons; the port is padded for sorting
        key = f"{address}-{port:05d}"
        self._sockets.setdefault(key, SocketInfo(address, port))

    def _record_command(self, cmd: list[str], env: list[str]) -> None:
        key = f"{_go_list(cmd)}-{_go_list(env)}"
        self._commands.setdefault(key, CommandInfo(cmd, env))

    def _parse_enter_syscall(self, syscall: str, args: str, save_contents: bool) -> None:
        if syscall != "write":
            return
        hex_index = args.rfind(_HEX_PREFIX)
        if hex_index == -1 or len(args) <= hex_index + len(_HEX_PREFIX):
            raise _SyscallParseError(
                "strace of file write syscall has the bytes written argument "
                "in an unexpected format"
            )
        bytes_written = _parse_int(args[hex_index + len(_HEX_PREFIX):], _HEX_NUMBER, 16)
        match = _WRITE_PATTERN.search(args)
        if match is None:
            raise _SyscallParseError(f"failed to parse write args: {args}")
        path = match.group(1)
        buffer = ""
        first_quote = args.find('"')
        last_quote = args.rfind('"')
        if first_quote != -1 and last_quote > first_quote:
            buffer = args[first_quote + 1:last_quote]
        logger.debug("write path=%s size=%d", path, bytes_written)
        self._record_file_write(path, buffer.encode("utf-8", "surrogateescape"), bytes_written, save_contents)

    def _parse_exit_syscall(self, syscall: str, args: str) -> None:
        if syscall == "creat":
            match = self._match(_CREAT_PATTERN, args, "create")
            logger.debug("creat path=%s", match.group(1))
            self._record_file_access(match.group(1), False, True, False)
        elif syscall == "open":
            match = self._match(_OPEN_PATTERN, args, "open")
            read, write = _parse_open_flags(match.group(2))
            logger.debug("open path=%s read=%s write=%s", match.group(1), read, write)
            self._record_file_access(match.group(1), read, write, False)
        elif syscall == "openat":
            match = self._match(_OPENAT_PATTERN, args, "openat")
            path = _join_paths(match.group(1), match.group(2))
            read, write = _parse_open_flags(match.group(3))
            logger.debug("openat path=%s read=%s write=%s", path, read, write)
            self._record_file_access(path, read, write, False)
        elif syscall == "execve":
            match = _EXECVE_PATTERN.match(args)
            if match is None:
                raise _SyscallParseError(f"failed to parse execve args: {args}")
            logger.debug("execve cmdAndEnv=%s", match.group(1))
            self._record_command(*_parse_cmd_and_env(match.group(1)))
        elif syscall in ("bind", "connect"):
            match = self._match(_SOCKET_PATTERN, args, "socket")
            family = match.group(1)
            if family not in ("AF_INET", "AF_INET6"):
                logger.debug("Ignoring socket family=%s socket=%s", family, match.group(2))
                return
            address = match.group(3) or ""
            port = _parse_int(match.group(4) or "", _DECIMAL_NUMBER, 10)
            logger.debug("socket address=%s port=%d", address, port)
            self._record_socket(address, port)
        elif syscall in ("stat", "fstat", "lstat"):
            match = self._match(_STAT_PATTERN, args, "stat")
            logger.debug("stat path=%s", match.group(1))
            self._record_file_access(match.group(1), True, False, False)
        elif syscall == "newfstatat":
            match = self._match(_NEWFSTATAT_PATTERN, args, "newfstatat")
            path = _join_paths(match.group(1), match.group(2))
            logger.debug("newfstatat path=%s", path)
            self._record_file_access(path, True, False, False)
        elif syscall == "unlink":
            match = self._match(_UNLINK_PATTERN, args, "unlink")
            logger.info("unlink path=%s", match.group(1))
            self._record_file_access(match.group(1), False, False, True)
        elif syscall == "unlinkat":
            match = self._match(_UNLINKAT_PATTERN, args, "unlinkat")
            path = _join_paths(match.group(1), match.group(2))
            logger.debug("unlinkat path=%s", path)
            self._record_file_access(path, False, False, True)

    @staticmethod
    def _match(pattern: re.Pattern, args: str, what: str) -> re.Match:
        match = pattern.search(args)
        if match is None:
            raise _SyscallParseError(f"failed to parse {what} args: {args}")
        return match


def parse(stream: Iterable[str], write_file_contents: bool = False) -> StraceResult:
    """Read an strace log and collect the files, sockets and commands accessed.

    ``stream`` yields lines of text. With ``write_file_contents`` set, the
    contents of each write are hashed and saved as temporary files.
    Lines that cannot be understood are logged and skipped.
    """
    result = StraceResult()
    for raw_line in stream:
        line = raw_line.rstrip()
        # lines hold no newline, so anchoring at the start loses no matches
        match = _STRACE_PATTERN.match(line)
        if match is None:
            continue
        kind, syscall, args = match.group(2), match.group(3), match.group(4)
        try:
            if kind == "E":
                result._parse_enter_syscall(syscall, args, write_file_contents)
            else:
                result._parse_exit_syscall(syscall, args)
        except _SyscallParseError as exc:
            phase = "entry" if kind == "E" else "exit"
            logger.warning("Failed to parse %s syscall: %s", phase, exc)
    return result