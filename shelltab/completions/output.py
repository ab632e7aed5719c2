"""Rendering of completion results in the line protocol read by the shell scripts.

Each candidate is one line, ``value<TAB>description`` or just ``value``,
followed by exactly one ``:<directive>`` line.
"""

from __future__ import annotations

import re

from ..models import Candidate, CompletionResult, Directive

__all__ = ["error_response", "format_candidate", "format_directive", "render_lines", "render_result"]

_UNSAFE = re.compile(r"[\t\r\n]+")


def _clean(text: str) -> str:
    # tabs and line breaks would corrupt the protocol
    return _UNSAFE.sub(" ", text)


def format_candidate(candidate: Candidate) -> str:
    """Render one candidate line."""
    value = _clean(candidate.value)
    description = _clean(candidate.description).strip()
    return f"{value}\t{description}" if description else value


def format_directive(directive: int) -> str:
    """Render the directive line."""
    return f":{int(directive)}"


def render_lines(result: CompletionResult) -> list[str]:
    """Render every line of a response, directive last."""
    return [format_candidate(candidate) for candidate in result.candidates] + [format_directive(result.directive)]


def render_result(result: CompletionResult) -> str:
    """Render a full response, newline terminated."""
    return "\n".join(render_lines(result)) + "\n"


def error_response() -> str:
    """Response telling the shell to show nothing."""
    return format_directive(Directive.ERROR) + "\n"
