"""Shell completion for programs described by a command tree.

Answers completion requests coming from the shell scripts and generates
those scripts.

This package provides:
- The resolution engine turning the typed words into candidates and a directive
- The line protocol rendering the engine's result for the scripts
- Shell-specific completion script generators (bash, zsh, fish, powershell)
- Ready-made completers
- Handlers for the `<program> complete` command
- A Fig spec export of the command tree
"""

from __future__ import annotations

from .completers import DirectoryCompleter, FileExtensionCompleter, StaticCompleter, filter_candidates
from .engine import resolve, resolve_sync
from .figspec import generate_fig_spec
from .generators import GENERATORS
from .handlers import default_exec_invocation, get_default_path, handle_complete
from .output import render_result

__all__ = [
    "GENERATORS",
    "DirectoryCompleter",
    "FileExtensionCompleter",
    "StaticCompleter",
    "default_exec_invocation",
    "filter_candidates",
    "generate_fig_spec",
    "get_default_path",
    "handle_complete",
    "render_result",
    "resolve",
    "resolve_sync",
]
