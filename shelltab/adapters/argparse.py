"""Build a command tree from an `argparse.ArgumentParser`.

Relies on the parser's private ``_actions`` list, the only way argparse
exposes what it accepts.
"""

from __future__ import annotations

import argparse
from collections.abc import Mapping
from typing import TYPE_CHECKING

from ..commands.models import CommandNode
from ..commands.tree import validate_tree
from ..completions.completers import StaticCompleter
from ..logging_setup import get_logger

if TYPE_CHECKING:
    from ..commands.models import Completer

__all__ = ["from_argparse"]

log = get_logger("shelltab.argparse")

# Actions consuming no value on the command line
_FLAG_ACTIONS = (
    argparse._StoreConstAction,  # store_true, store_false, append_const too  # noqa: SLF001
    argparse._CountAction,  # noqa: SLF001
    argparse._HelpAction,  # noqa: SLF001
    argparse._VersionAction,  # noqa: SLF001
    argparse.BooleanOptionalAction,
)

_VARIADIC_NARGS = (argparse.ZERO_OR_MORE, argparse.ONE_OR_MORE, argparse.REMAINDER)
_OPTIONAL_NARGS = (argparse.OPTIONAL, argparse.ZERO_OR_MORE, argparse.REMAINDER)


def _completer_for(
    action: argparse.Action,
    path: str,
    completers: Mapping[str, Completer],
) -> Completer | None:
    for key in (f"{path} {action.dest}".strip(), action.dest):
        if key in completers:
            return completers[key]
    if action.choices is not None and not isinstance(action, argparse._SubParsersAction):  # noqa: SLF001
        return StaticCompleter([str(choice) for choice in action.choices])
    return None


def _add_option(node: CommandNode, action: argparse.Action, completer: Completer | None) -> None:
    longs = [flag for flag in action.option_strings if flag.startswith("--")]
    shorts = [flag for flag in action.option_strings if len(flag) == 2 and not flag.startswith("--")]  # noqa: PLR2004
    if not longs:
        log.debug("Skipping %s: options without a long form are not completed", "/".join(action.option_strings))
        return
    takes_value = not isinstance(action, _FLAG_ACTIONS) and action.nargs != 0
    for index, flag in enumerate(longs):
        node.option(
            flag,
            action.help or "",
            completer if takes_value else None,
            short=shorts[0] if index == 0 and shorts else None,
            takes_value=takes_value,
            required=bool(action.required),
        )


def _add_positional(node: CommandNode, action: argparse.Action, completer: Completer | None) -> None:
    if isinstance(action.nargs, int):
        for index in range(action.nargs):
            name = action.dest if action.nargs == 1 else f"{action.dest}[{index}]"
            node.argument(name, completer, required=True)
        return
    node.argument(
        action.dest,
        completer,
        required=action.nargs not in _OPTIONAL_NARGS,
        variadic=action.nargs in _VARIADIC_NARGS,
    )


def _populate(node: CommandNode, parser: argparse.ArgumentParser, completers: Mapping[str, Completer]) -> None:
    path = node.full_name
    for action in parser._actions:  # noqa: SLF001
        if action.help == argparse.SUPPRESS:
            continue
        if isinstance(action, argparse._SubParsersAction):  # noqa: SLF001
            helps = {subaction.dest: subaction.help or "" for subaction in action._get_subactions()}  # noqa: SLF001
            for name, subparser in action.choices.items():
                child = node.command(name, helps.get(name, "") or subparser.description or "")
                _populate(child, subparser, completers)
            continue
        completer = _completer_for(action, path, completers)
        if action.option_strings:
            _add_option(node, action, completer)
        else:
            _add_positional(node, action, completer)


def from_argparse(
    parser: argparse.ArgumentParser,
    completers: Mapping[str, Completer] | None = None,
) -> CommandNode:
    """Build the command tree of an argparse parser.

    Args:
        parser: The program's top-level parser, subparsers included
        completers: Completers by argument ``dest``, or by ``"<command path> <dest>"``
            to target a single subcommand. Arguments with ``choices`` get a
            static completer when none is given.

    Returns:
        The root node

    Raises:
        TreeConfigurationError: If the resulting tree is malformed
    """
    root = CommandNode(description=parser.description or "")
    _populate(root, parser, completers or {})
    validate_tree(root)
    return root
