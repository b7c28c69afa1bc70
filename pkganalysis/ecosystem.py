"""Open source package ecosystems supported by package analysis."""

from __future__ import annotations

from enum import Enum


class Ecosystem(str, Enum):
    """An open source package ecosystem from which packages can be downloaded."""

    NONE = ""
    CRATES_IO = "crates.io"
    NPM = "npm"
    PACKAGIST = "packagist"
    PYPI = "pypi"
    RUBYGEMS = "rubygems"

    def __str__(self) -> str:
        return self.value


class UnsupportedEcosystemError(ValueError):
    """Raised when a name does not correspond to a supported ecosystem."""

    def __init__(self, name: str) -> None:
        super().__init__(f"ecosystem unsupported: {name}")
        self.name = name


def unsupported(name: str) -> UnsupportedEcosystemError:
    """Return an error describing the unsupported ecosystem ``name``."""
    return UnsupportedEcosystemError(name)


SUPPORTED_ECOSYSTEMS: tuple[Ecosystem, ...] = (
    Ecosystem.CRATES_IO,
    Ecosystem.NPM,
    Ecosystem.PACKAGIST,
    Ecosystem.PYPI,
    Ecosystem.RUBYGEMS,
)


def ecosystems_as_strings(ecosystems) -> list[str]:
    """Convert a sequence of ecosystems to their string names."""
    return [str(e) for e in ecosystems]


SUPPORTED_ECOSYSTEMS_STRINGS: list[str] = ecosystems_as_strings(SUPPORTED_ECOSYSTEMS)


def parse(name: str) -> Ecosystem:
    """Return the ecosystem named ``name``; an empty name gives ``Ecosystem.NONE``."""
    for ecosystem in (*SUPPORTED_ECOSYSTEMS, Ecosystem.NONE):
        if ecosystem.value == name:
            return ecosystem
    raise unsupported(name)


_PURL_TYPES = {
    "cargo": Ecosystem.CRATES_IO,
    "composer": Ecosystem.PACKAGIST,
    "gem": Ecosystem.RUBYGEMS,
}


def parse_purl_type(purl_type: str) -> Ecosystem:
    """Convert a Package URL type to an ecosystem."""
    if purl_type in _PURL_TYPES:
        return _PURL_TYPES[purl_type]
    # npm and pypi use the same name as their purl type
    return parse(purl_type)