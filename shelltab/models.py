"""Shared data models: directives, candidates, errors and exit codes."""

from __future__ import annotations

import functools
import operator
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag

__all__ = [
    "Candidate",
    "CandidateLike",
    "CompletionResult",
    "Directive",
    "ExitCode",
    "ShellTabError",
    "TreeConfigurationError",
    "combine",
    "has",
]


class Directive(IntFlag):
    """How the invoking shell should treat a list of candidates.

    The values are part of the wire protocol: generated scripts hard-code
    them, so they must never be renumbered.
    """

    DEFAULT = 0  # let the shell perform its default behavior
    ERROR = 1 << 0  # an error occurred, ignore the candidates
    NO_SPACE = 1 << 1  # no trailing space after a single match
    NO_FILE_COMP = 1 << 2  # no file completion fallback
    FILTER_FILE_EXT = 1 << 3  # candidates are file extension filters
    FILTER_DIRS = 1 << 4  # complete directory names only
    KEEP_ORDER = 1 << 5  # do not sort the candidates


def combine(*bits: int) -> Directive:
    """OR-combine directive bits (no bits gives `Directive.DEFAULT`)."""
    return Directive(functools.reduce(operator.or_, (int(bit) for bit in bits), 0))


def has(directive: int, bit: int) -> bool:
    """Return True when `bit` is set in `directive`."""
    return (int(directive) & int(bit)) != 0


@dataclass(frozen=True)
class Candidate:
    """A suggested completion value with an optional description."""

    value: str
    description: str = ""

    @classmethod
    def coerce(cls, item: CandidateLike) -> Candidate:
        """Build a Candidate from a Candidate, a string or a (value, description) pair."""
        if isinstance(item, Candidate):
            return item
        if isinstance(item, str):
            return cls(item)
        value, description = item
        return cls(str(value), "" if description is None else str(description))

    def with_prefix(self, prefix: str) -> Candidate:
        """Return a copy with `prefix` prepended to the value."""
        return Candidate(prefix + self.value, self.description)


CandidateLike = Candidate | str | tuple[str, str]


@dataclass
class CompletionResult:
    """Outcome of one resolution: ordered candidates and a single directive."""

    candidates: list[Candidate] = field(default_factory=list)
    directive: Directive = Directive.DEFAULT

    @classmethod
    def empty(cls) -> CompletionResult:
        """No candidates, let the shell do its default thing."""
        return cls([], Directive.DEFAULT)

    @classmethod
    def explicit(cls, candidates: list[Candidate]) -> CompletionResult:
        """Candidates produced on purpose replace the file fallback."""
        return cls(candidates, Directive.NO_FILE_COMP if candidates else Directive.DEFAULT)


class ShellTabError(Exception):
    """Base class for shelltab errors."""


class TreeConfigurationError(ShellTabError):
    """The command tree is malformed and cannot be used for resolution."""


class ExitCode(IntEnum):
    """Exit codes of the completion entry point."""

    SUCCESS = 0
    USAGE_ERROR = 1  # unknown shell, missing arguments, relative path
    CONFIG_ERROR = 2  # malformed command tree
    WRITE_ERROR = 3  # completion script could not be written
