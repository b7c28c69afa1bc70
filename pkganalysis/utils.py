"""Small general-purpose helpers."""

from __future__ import annotations

import argparse
import hashlib
import math
import os
import re
from dataclasses import dataclass


def combine_regexp(*args) -> re.Pattern:
    """Join regexps with ``|``, wrapping each in a non-capturing group."""
    patterns = (p.pattern if isinstance(p, re.Pattern) else p for p in args)
    return re.compile("|".join(f"(?:{p})" for p in patterns))


@dataclass
class CommaSeparatedFlags:
    """A command-line option taking a comma-separated list of strings."""

    name: str
    values: list[str] | None = None
    info: str = ""

    def set(self, values: str) -> None:
        self.values = values.split(",")

    def __str__(self) -> str:
        return "" if self.values is None else ",".join(self.values)

    def add_to_parser(self, parser: argparse.ArgumentParser) -> None:
        """Register this option with an argparse parser."""
        flags = self

        class _SetAction(argparse.Action):
            def __call__(self, parser, namespace, value, option_string=None):
                flags.set(value)
                setattr(namespace, self.dest, flags.values)

        parser.add_argument(
            f"-{self.name}",
            f"--{self.name}",
            dest=self.name,
            action=_SetAction,
            default=self.values,
            help=self.info,
        )


def float_equals(x1: float, x2: float, abs_tol: float) -> bool:
    """Compare floats within an absolute tolerance; two NaNs are equal."""
    return x1 == x2 or abs(x1 - x2) < abs_tol or (math.isnan(x1) and math.isnan(x2))


def sha256_hash(path) -> str:
    """Return the hex SHA256 digest of the file at ``path``."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def last_n_bytes(data: bytes, n: int) -> bytes:
    """Return the last ``n`` bytes of ``data``."""
    if n < 0:
        raise ValueError("n cannot be negative")
    if len(data) <= n:
        return data
    return data[len(data) - n:]


def remove_duplicates(items) -> list:
    """Return the unique items, ordered by first occurrence."""
    return list(dict.fromkeys(items))


def write_file(path, contents: bytes, executable: bool) -> None:
    """Write ``contents`` to ``path``, optionally marking it executable."""
    with open(path, "wb") as f:
        f.write(contents)
    if executable:
        try:
            os.chmod(path, 0o777)
        except OSError as exc:
            raise OSError(f"could not set exec permissions on {path}: {exc}") from exc