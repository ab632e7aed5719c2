"""Ready-made completers.

Completers own prefix filtering: the engine passes them the word being
completed and emits what they return unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..models import Candidate, CandidateLike, CompletionResult, Directive

__all__ = ["DirectoryCompleter", "FileExtensionCompleter", "StaticCompleter", "filter_candidates"]


def filter_candidates(items: Iterable[CandidateLike], prefix: str) -> list[Candidate]:
    """Keep the candidates whose value starts with `prefix`, in order."""
    candidates = (Candidate.coerce(item) for item in items)
    return [candidate for candidate in candidates if candidate.value.startswith(prefix)]


class StaticCompleter:
    """Complete from a fixed list of choices."""

    def __init__(self, choices: Iterable[CandidateLike]) -> None:
        self.choices = [Candidate.coerce(choice) for choice in choices]

    def __call__(self, _committed_args: list[str], to_complete: str) -> list[Candidate]:
        return filter_candidates(self.choices, to_complete)

    def __repr__(self) -> str:
        return f"StaticCompleter({[choice.value for choice in self.choices]!r})"


class FileExtensionCompleter:
    """Let the shell complete files having one of the given extensions.

    The candidates are the extensions themselves: the directive tells the
    shell to use them as filters for its own file completion.
    """

    def __init__(self, *extensions: str) -> None:
        self.extensions = [extension.lstrip(".") for extension in extensions]

    def __call__(self, _committed_args: list[str], _to_complete: str) -> CompletionResult:
        return CompletionResult([Candidate(extension) for extension in self.extensions], Directive.FILTER_FILE_EXT)


class DirectoryCompleter:
    """Let the shell complete directory names, optionally inside `base`."""

    def __init__(self, base: str = "") -> None:
        self.base = base

    def __call__(self, _committed_args: list[str], _to_complete: str) -> CompletionResult:
        return CompletionResult([Candidate(self.base)] if self.base else [], Directive.FILTER_DIRS)
