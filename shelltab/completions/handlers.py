"""Handlers for the ``complete`` subcommand of a host program.

``<program> complete -- <args...>`` answers a completion request,
``<program> complete <shell> [default|path]`` prints or installs the script.
"""

from __future__ import annotations

import os
import shlex
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ..constants import COMPLETE_COMMAND, DEFAULT_PATHS, REQUEST_MARKER, SUPPORTED_SHELLS
from ..logging_setup import get_logger
from ..models import ExitCode, TreeConfigurationError
from .engine import resolve_sync
from .generators import GENERATORS
from .output import error_response, render_result

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..commands.models import CommandNode

__all__ = ["default_exec_invocation", "get_default_path", "handle_complete"]

log = get_logger("shelltab.handlers")


def get_default_path(shell: str, program_name: str) -> str:
    """Get the default user-level completion path for a shell.

    Args:
        shell: Shell type ("bash", "zsh", "fish" or "powershell")
        program_name: Name of the completed program

    Returns:
        Expanded absolute path to the default completion file
    """
    return str(Path(DEFAULT_PATHS[shell].format(name=program_name)).expanduser())


def default_exec_invocation() -> str:
    """Return the shell text that runs the current program again.

    Scripts run through the interpreter (``python tool.py``) are invoked the
    same way; installed entry points by their absolute path.
    """
    program = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    if program.endswith(".py"):
        return shlex.join([sys.executable, os.path.abspath(program)])
    found = shutil.which(program)
    return shlex.quote(os.path.abspath(found or program))


def _get_success_message(shell: str, output_path: str, used_default: bool) -> str:
    """Generate a friendly success message after installing completions.

    Args:
        shell: Shell type
        output_path: Path where completions were written
        used_default: Whether the default path was used

    Returns:
        User-friendly success message
    """
    # Use ~ in display path for readability
    display_path = output_path.replace(str(Path.home()), "~")

    if not used_default:
        return f"Completions written to {display_path}"

    if shell == "bash":
        return f"Completions installed to {display_path}\nReload your shell to use them."

    if shell == "zsh":
        return (
            f"Completions installed to {display_path}\n"
            "Ensure ~/.zsh/completions is in your fpath. Add to ~/.zshrc:\n"
            "  fpath=(~/.zsh/completions $fpath)\n"
            "  autoload -Uz compinit && compinit\n"
            "Then reload your shell."
        )

    if shell == "fish":
        return f"Completions installed to {display_path}\nReload your shell or run: source {display_path}"

    if shell == "powershell":
        return f"Completions installed to {display_path}\nAdd this line to your $PROFILE:\n  . {display_path}"

    return f"Completions written to {display_path}"


def _usage(program_name: str) -> str:
    shells = "|".join(SUPPORTED_SHELLS)
    return (
        f"Usage: {program_name} {COMPLETE_COMMAND} <{shells}> [default|path]\n"
        f"       {program_name} {COMPLETE_COMMAND} {REQUEST_MARKER} <args...>"
    )


def _parse_complete_args(args: Sequence[str], program_name: str) -> tuple[bool, str, str | None]:
    """Parse and validate the script generation arguments.

    Args:
        args: Arguments after "complete" (e.g., ["zsh"] or ["zsh", "default"])
        program_name: Name used in the usage text

    Returns:
        Tuple of (success, shell_or_error, path_arg):
        - On success: (True, shell, path_arg or None)
        - On failure: (False, error_message, None)
    """
    if not args or len(args) > 2:  # noqa: PLR2004
        return (False, _usage(program_name), None)

    shell = args[0]
    if shell not in SUPPORTED_SHELLS:
        return (False, f"Unsupported shell: {shell}. Supported: {', '.join(SUPPORTED_SHELLS)}", None)

    path_arg = args[1] if len(args) > 1 else None
    if path_arg is not None and path_arg != "default" and not path_arg.startswith(("/", "~")):
        return (False, "Relative paths not supported. Use absolute path, ~/path, or 'default'.", None)

    return (True, shell, path_arg)


def _answer_request(root: CommandNode, args: Sequence[str]) -> tuple[ExitCode, str]:
    try:
        result = resolve_sync(root, args)
    except TreeConfigurationError as e:
        log.error("Cannot complete: %s", e)
        return (ExitCode.CONFIG_ERROR, error_response())
    return (ExitCode.SUCCESS, render_result(result))


def handle_complete(
    root: CommandNode,
    program_name: str,
    args: Sequence[str],
    exec_invocation: str | None = None,
) -> tuple[ExitCode, str]:
    """Handle the ``complete`` subcommand.

    Args:
        root: The program's command tree
        program_name: Command the completion scripts register for
        args: Arguments after "complete" (e.g. ["--", "dev", ""] or ["zsh", "default"])
        exec_invocation: Shell text running the program, guessed from sys.argv if not set

    Returns:
        Tuple of (exit code, text):
        - "--" request: the completion lines, or the error response
        - No path arg: the script content
        - With path arg: success/error message
    """
    if args and args[0] == REQUEST_MARKER:
        return _answer_request(root, args[1:])

    success, shell_or_error, path_arg = _parse_complete_args(args, program_name)
    if not success:
        return (ExitCode.USAGE_ERROR, shell_or_error)

    shell = shell_or_error
    content = GENERATORS[shell](program_name, exec_invocation or default_exec_invocation())

    if path_arg is None:
        return (ExitCode.SUCCESS, content)

    # Determine output path
    if path_arg == "default":
        output_path = get_default_path(shell, program_name)
        used_default = True
    else:
        output_path = str(Path(path_arg).expanduser())
        used_default = False

    log.debug("Writing completions to: %s", output_path)

    # Write to file
    try:
        parent_dir = Path(output_path).parent
        parent_dir.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_text(content, encoding="utf-8")
    except OSError as e:
        return (ExitCode.WRITE_ERROR, f"Failed to write completion file: {e}")

    return (ExitCode.SUCCESS, _get_success_message(shell, output_path, used_default))
