"""Helpers shared by the shell script generators."""

from __future__ import annotations

import re

from ...constants import COMPLETE_COMMAND, SCRIPT_DEBUG_ENV_VAR
from ...models import Directive

__all__ = [
    "DIRECTIVE_NAMES",
    "COMPLETE_COMMAND",
    "SCRIPT_DEBUG_ENV_VAR",
    "comment_safe",
    "directive_variables",
    "double_quote_escape",
    "fish_quote",
    "powershell_double_quote_escape",
    "powershell_quote",
    "sanitize_identifier",
]

_NOT_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")

# Names used for the directive variables in every generated script
DIRECTIVE_NAMES: dict[str, Directive] = {
    "Error": Directive.ERROR,
    "NoSpace": Directive.NO_SPACE,
    "NoFileComp": Directive.NO_FILE_COMP,
    "FilterFileExt": Directive.FILTER_FILE_EXT,
    "FilterDirs": Directive.FILTER_DIRS,
    "KeepOrder": Directive.KEEP_ORDER,
}


def sanitize_identifier(program_name: str) -> str:
    """Turn a program name into a string usable inside shell identifiers.

    >>> sanitize_identifier("test-cli:app")
    'test_cli_app'
    """
    return _NOT_IDENTIFIER.sub("_", program_name) or "_"


def double_quote_escape(text: str) -> str:
    """Escape text for a POSIX (bash/zsh) double-quoted string."""
    return re.sub(r'([\\"$`])', r"\\\1", text)


def fish_quote(text: str) -> str:
    """Quote text as a fish single-quoted string."""
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


def powershell_quote(text: str) -> str:
    """Quote text as a PowerShell single-quoted string."""
    return "'" + text.replace("'", "''") + "'"


def powershell_double_quote_escape(text: str) -> str:
    """Escape text for a PowerShell double-quoted (expandable) string."""
    return re.sub(r'([`"$])', r"`\1", text)


def comment_safe(text: str) -> str:
    """Keep text on a single comment line."""
    return " ".join(text.splitlines())


def directive_variables(template: str, indent: str = "    ") -> str:
    """Render one line per directive bit from `template`.

    `template` receives ``name`` and ``value``, e.g. ``"local shellCompDirective{name}={value}"``.
    """
    return "\n".join(indent + template.format(name=name, value=int(bit)) for name, bit in DIRECTIVE_NAMES.items())
