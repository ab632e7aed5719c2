"""Export a command tree as a Fig completion spec (JSON)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from ..commands.tree import validate_tree

if TYPE_CHECKING:
    from ..commands.models import CommandNode, Option, PositionalArg

__all__ = ["generate_fig_spec"]


def _option_spec(option: Option) -> dict[str, Any]:
    names = [option.flag]
    if option.short_flag:
        names.append(option.short_flag)
    spec: dict[str, Any] = {"name": names, "description": option.description}
    if option.required:
        spec["isRequired"] = True
    if option.takes_value:
        spec["args"] = {"name": option.name}
    return spec


def _arg_spec(positional: PositionalArg) -> dict[str, Any]:
    spec: dict[str, Any] = {"name": positional.name}
    if not positional.required:
        spec["isOptional"] = True
    if positional.variadic:
        spec["isVariadic"] = True
    return spec


def _command_spec(node: CommandNode, name: str) -> dict[str, Any]:
    spec: dict[str, Any] = {"name": name, "description": node.description}
    if node.options:
        spec["options"] = [_option_spec(option) for option in node.options.values()]
    if node.positionals:
        spec["args"] = [_arg_spec(positional) for positional in node.positionals]
    if node.children:
        spec["subcommands"] = [_command_spec(child, child.name) for child in node.children.values()]
    return spec


def generate_fig_spec(root: CommandNode, program_name: str) -> str:
    """Generate the Fig spec of a program.

    Options declared on the root are flagged as persistent, since they are
    accepted after any subcommand.

    Args:
        root: The program's command tree
        program_name: Name of the program

    Returns:
        The spec as indented JSON

    Raises:
        TreeConfigurationError: If the tree is malformed
    """
    validate_tree(root)
    spec = _command_spec(root, program_name)
    if root.children:
        for option in spec.get("options", []):
            option["isPersistent"] = True
    return json.dumps(spec, indent=2)
