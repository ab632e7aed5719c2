"""Build a command tree from a declarative mapping or a TOML file.

Example file::

    description = "Next generation frontend tooling"

    [options.config]
    short = "c"
    description = "Use specified config file"
    choices = ["vite.config.ts", "vite.config.js"]

    [[arguments]]
    name = "project"
    choices = [{ value = "my-app", description = "My application" }]

    [commands.dev]
    description = "Start dev server"

    [commands.dev.options.verbose]
    takes_value = false
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from ..completions.completers import StaticCompleter
from ..models import Candidate, TreeConfigurationError
from .models import CommandNode
from .tree import validate_tree

__all__ = ["build_tree", "load_tree"]

_COMMAND_KEYS = {"description", "options", "arguments", "commands"}
_OPTION_KEYS = {"description", "short", "takes_value", "required", "choices"}
_ARGUMENT_KEYS = {"name", "required", "variadic", "choices"}


def _expect(value: Any, expected: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(value, expected):
        names = expected.__name__ if isinstance(expected, type) else " or ".join(t.__name__ for t in expected)
        raise TreeConfigurationError(f"{where}: expected {names}, got {type(value).__name__}")
    return value


def _check_keys(table: dict[str, Any], allowed: set[str], where: str) -> None:
    unknown = sorted(set(table) - allowed)
    if unknown:
        raise TreeConfigurationError(f"{where}: unknown key(s) {', '.join(unknown)}")


def _choices(raw: Any, where: str) -> StaticCompleter | None:
    if raw is None:
        return None
    candidates: list[Candidate] = []
    for index, item in enumerate(_expect(raw, list, where)):
        if isinstance(item, str):
            candidates.append(Candidate(item))
            continue
        entry = _expect(item, dict, f"{where}[{index}]")
        if "value" not in entry:
            raise TreeConfigurationError(f"{where}[{index}]: missing 'value'")
        candidates.append(Candidate(str(entry["value"]), str(entry.get("description", ""))))
    return StaticCompleter(candidates)


def _populate(node: CommandNode, table: dict[str, Any], where: str) -> None:
    _check_keys(table, _COMMAND_KEYS, where)
    node.description = str(table.get("description", node.description))

    for name, raw in _expect(table.get("options", {}), dict, f"{where}.options").items():
        opt_where = f"{where}.options.{name}"
        spec = _expect(raw, dict, opt_where)
        _check_keys(spec, _OPTION_KEYS, opt_where)
        node.option(
            name,
            str(spec.get("description", "")),
            _choices(spec.get("choices"), f"{opt_where}.choices"),
            short=None if spec.get("short") is None else _expect(spec["short"], str, f"{opt_where}.short"),
            takes_value=bool(spec.get("takes_value", True)),
            required=bool(spec.get("required", False)),
        )

    for index, raw in enumerate(_expect(table.get("arguments", []), list, f"{where}.arguments")):
        arg_where = f"{where}.arguments[{index}]"
        spec = _expect(raw, dict, arg_where)
        _check_keys(spec, _ARGUMENT_KEYS, arg_where)
        if "name" not in spec:
            raise TreeConfigurationError(f"{arg_where}: missing 'name'")
        node.argument(
            str(spec["name"]),
            _choices(spec.get("choices"), f"{arg_where}.choices"),
            required=bool(spec.get("required", False)),
            variadic=bool(spec.get("variadic", False)),
        )

    for name, raw in _expect(table.get("commands", {}), dict, f"{where}.commands").items():
        _populate(node.command(name), _expect(raw, dict, f"{where}.commands.{name}"), f"{where}.commands.{name}")


def build_tree(config: dict[str, Any], root: CommandNode | None = None) -> CommandNode:
    """Build (or extend) a command tree from a nested mapping.

    Args:
        config: The mapping, shaped like the module example
        root: An existing root to extend, a new one is created otherwise

    Returns:
        The root node

    Raises:
        TreeConfigurationError: On any invalid shape or tree invariant violation
    """
    root = root if root is not None else CommandNode()
    _populate(root, _expect(config, dict, "<root>"), "<root>")
    validate_tree(root)
    return root


def load_tree(filename: str | Path, root: CommandNode | None = None) -> CommandNode:
    """Load a command tree from a TOML file.

    Raises:
        TreeConfigurationError: If the file is missing, is not valid TOML or has an invalid shape
    """
    fname = Path(os.path.expandvars(str(filename))).expanduser()
    try:
        with fname.open("rb") as stream:
            config = tomllib.load(stream)
    except FileNotFoundError as e:
        raise TreeConfigurationError(f"Command tree file not found: {fname}") from e
    except tomllib.TOMLDecodeError as e:
        raise TreeConfigurationError(f"Invalid TOML in {fname}: {e}") from e
    return build_tree(config, root)
