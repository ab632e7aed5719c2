"""Client-side glue: run the ``complete`` subcommand of a host program."""

import os
import sys
from collections.abc import Sequence

from .ansi import ERROR_CODES, paint, should_colorize
from .commands.models import CommandNode
from .completions.handlers import handle_complete
from .constants import COMPLETE_COMMAND, LOG_FILE_ENV_VAR
from .logging_setup import init_logger
from .models import ExitCode

__all__ = ["run_completion"]


def run_completion(
    root: CommandNode,
    program_name: str,
    args: Sequence[str] | None = None,
    exec_invocation: str | None = None,
) -> ExitCode:
    """Run ``<program> complete ...`` and print its result.

    Args:
        root: The program's command tree
        program_name: Command the completion scripts register for
        args: Arguments after "complete", defaults to the command line after it
        exec_invocation: Shell text running the program, guessed if not set

    Returns:
        The exit code to terminate with
    """
    if args is None:
        args = _args_after_complete(sys.argv[1:])
    init_logger(os.environ.get(LOG_FILE_ENV_VAR))

    code, text = handle_complete(root, program_name, args, exec_invocation)
    if code in (ExitCode.USAGE_ERROR, ExitCode.WRITE_ERROR):
        message = f"Error: {text}"
        print(paint(message, *ERROR_CODES) if should_colorize(sys.stderr) else message, file=sys.stderr)
    elif text:
        # completion responses are newline-terminated already
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
        sys.stdout.flush()
    return code


def _args_after_complete(argv: Sequence[str]) -> list[str]:
    """Drop everything up to the first "complete" word."""
    args = list(argv)
    if COMPLETE_COMMAND in args:
        return args[args.index(COMPLETE_COMMAND) + 1 :]
    return args
