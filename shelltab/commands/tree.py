"""Command tree traversal and validation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import TreeConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .models import CommandNode

__all__ = ["get_command", "iter_commands", "validate_tree"]


def iter_commands(root: CommandNode) -> Iterator[CommandNode]:
    """Yield every node of the tree, depth first, in declaration order."""
    yield root
    for child in root.children.values():
        yield from iter_commands(child)


def get_command(root: CommandNode, path: str) -> CommandNode | None:
    """Return the node at the space-separated `path`, or None.

    An empty path is the root itself.
    """
    node = root
    for part in path.split():
        child = node.children.get(part)
        if child is None:
            return None
        node = child
    return node


def _node_errors(node: CommandNode) -> list[str]:
    where = node.full_name or "<root>"
    errors: list[str] = []

    for index, positional in enumerate(node.positionals):
        if positional.variadic and index != len(node.positionals) - 1:
            errors.append(f"{where}: variadic positional '{positional.name}' is not the last one")

    shorts: dict[str, str] = {}
    for name, option in node.options.items():
        if option.name != name:
            errors.append(f"{where}: option stored as '{name}' is named '{option.name}'")
        if option.short is None:
            continue
        if len(option.short) != 1:
            errors.append(f"{where}: short alias '{option.short}' of --{name} is not a single character")
        elif option.short in shorts:
            errors.append(f"{where}: short alias -{option.short} is claimed by both --{shorts[option.short]} and --{name}")
        else:
            shorts[option.short] = name

    for name, child in node.children.items():
        if not name or name != child.name or " " in name:
            errors.append(f"{where}: invalid subcommand name '{name}'")
        if child.parent is not node:
            errors.append(f"{where}: subcommand '{name}' is not linked to its parent")
    return errors


def validate_tree(root: CommandNode) -> None:
    """Check the invariants the resolution engine relies on.

    Raises:
        TreeConfigurationError: listing every defect found
    """
    errors: list[str] = []
    for node in iter_commands(root):
        errors.extend(_node_errors(node))
    if errors:
        raise TreeConfigurationError("Malformed command tree:\n  " + "\n  ".join(errors))
