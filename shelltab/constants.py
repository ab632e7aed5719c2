"""Shared constants for shelltab."""

__all__ = [
    "COMPLETE_COMMAND",
    "DEBUG_ENV_VAR",
    "DEFAULT_PATHS",
    "LOG_FILE_ENV_VAR",
    "REQUEST_MARKER",
    "SCRIPT_DEBUG_ENV_VAR",
    "SUPPORTED_SHELLS",
]

# Word following the program name in every completion request:
#   <program> complete -- <args...>
#   <program> complete <shell> [default|path]
COMPLETE_COMMAND = "complete"
# Separates the request words from the "complete" word
REQUEST_MARKER = "--"

# Supported shells for script generation
SUPPORTED_SHELLS = ("zsh", "bash", "fish", "powershell")

# Default user-level completion paths, "{name}" is the program name
DEFAULT_PATHS = {
    "bash": "~/.local/share/bash-completion/completions/{name}",
    "zsh": "~/.zsh/completions/_{name}",
    "fish": "~/.config/fish/completions/{name}.fish",
    "powershell": "~/.config/powershell/completions/{name}.ps1",
}

# Environment
DEBUG_ENV_VAR = "SHELLTAB_DEBUG"
LOG_FILE_ENV_VAR = "SHELLTAB_LOG_FILE"
# Read by the generated scripts, mirrors the variable used by cobra-based tools
SCRIPT_DEBUG_ENV_VAR = "BASH_COMP_DEBUG_FILE"
