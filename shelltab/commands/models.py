"""Data models for the command tree."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

from ..models import CandidateLike, CompletionResult, TreeConfigurationError

__all__ = ["CommandNode", "Completer", "Option", "PositionalArg"]

# (committed args, word being completed) -> candidates, or an awaitable of them.
# Returning a CompletionResult also chooses the directive.
_Produced = Iterable[CandidateLike] | CompletionResult
Completer = Callable[[list[str], str], _Produced | Awaitable[_Produced]]


@dataclass
class Option:
    """A named option of a command."""

    name: str  # long name without dashes, e.g. "port"
    description: str = ""
    short: str | None = None  # single character alias, e.g. "p"
    takes_value: bool = True  # False for boolean flags
    required: bool = False
    completer: Completer | None = None

    @property
    def flag(self) -> str:
        """Long form, e.g. "--port"."""
        return f"--{self.name}"

    @property
    def short_flag(self) -> str | None:
        """Short form, e.g. "-p"."""
        return f"-{self.short}" if self.short else None

    def match(self, prefix: str) -> str | None:
        """Return the form of this option that starts with `prefix`, long form first."""
        if self.flag.startswith(prefix):
            return self.flag
        if self.short_flag and self.short_flag.startswith(prefix):
            return self.short_flag
        return None


@dataclass
class PositionalArg:
    """A positional argument of a command."""

    name: str
    index: int
    required: bool = False
    variadic: bool = False
    completer: Completer | None = None


@dataclass
class CommandNode:
    """A node in the command hierarchy.

    The root has an empty name. Nodes are built once with `command()`,
    `option()` and `argument()`, then only read during resolution.
    """

    name: str = ""
    description: str = ""
    parent: CommandNode | None = field(default=None, repr=False, compare=False)
    options: dict[str, Option] = field(default_factory=dict)
    positionals: list[PositionalArg] = field(default_factory=list)
    children: dict[str, CommandNode] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        """Space-joined path from the root, e.g. "dev build"."""
        parts: list[str] = []
        node: CommandNode | None = self
        while node is not None and node.parent is not None:
            parts.append(node.name)
            node = node.parent
        return " ".join(reversed(parts))

    @property
    def is_root(self) -> bool:
        """True for the root of the tree."""
        return self.parent is None

    @property
    def root(self) -> CommandNode:
        """The root of the tree this node belongs to."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def command(self, name: str, description: str = "") -> CommandNode:
        """Declare a subcommand and return it.

        `name` may be a space-separated path ("dev build"); missing
        intermediate commands are created. Declaring an existing command
        again returns it, updating the description when one is given.
        """
        parts = name.split()
        if not parts:
            raise TreeConfigurationError(f"Empty command name under '{self.full_name or '<root>'}'")
        node = self
        for part in parts[:-1]:
            node = node.children.get(part) or node._add_child(part, "")
        existing = node.children.get(parts[-1])
        if existing is not None:
            if description:
                existing.description = description
            return existing
        return node._add_child(parts[-1], description)

    def _add_child(self, name: str, description: str) -> CommandNode:
        child = CommandNode(name=name, description=description, parent=self)
        self.children[name] = child
        return child

    def option(  # noqa: PLR0913  # pylint: disable=too-many-arguments
        self,
        name: str,
        description: str = "",
        completer: Completer | None = None,
        *,
        short: str | None = None,
        takes_value: bool = True,
        required: bool = False,
    ) -> CommandNode:
        """Declare an option on this command and return the command.

        A second declaration with the same long name replaces the first.
        """
        long_name = name.lstrip("-")
        if not long_name:
            raise TreeConfigurationError(f"Empty option name on '{self.full_name or '<root>'}'")
        short_name = short.lstrip("-") if short else None
        if short_name is not None:
            if len(short_name) != 1:
                raise TreeConfigurationError(f"Short alias of --{long_name} must be a single character, got '{short}'")
            for other in self.options.values():
                if other.short == short_name and other.name != long_name:
                    raise TreeConfigurationError(f"Short alias -{short_name} is claimed by both --{other.name} and --{long_name}")
        self.options[long_name] = Option(
            name=long_name,
            description=description,
            short=short_name,
            takes_value=takes_value,
            required=required,
            completer=completer,
        )
        return self

    def flag(self, name: str, description: str = "", *, short: str | None = None) -> CommandNode:
        """Declare a boolean option (takes no value)."""
        return self.option(name, description, short=short, takes_value=False)

    def argument(
        self,
        name: str,
        completer: Completer | None = None,
        *,
        required: bool = False,
        variadic: bool = False,
    ) -> CommandNode:
        """Declare the next positional argument and return the command."""
        if self.positionals and self.positionals[-1].variadic:
            raise TreeConfigurationError(
                f"Positional '{name}' of '{self.full_name or '<root>'}' follows variadic '{self.positionals[-1].name}'"
            )
        self.positionals.append(
            PositionalArg(
                name=name,
                index=len(self.positionals),
                required=required,
                variadic=variadic,
                completer=completer,
            )
        )
        return self

    def positional_at(self, index: int) -> PositionalArg | None:
        """Return the positional filled by the value at `index`.

        Past the last declared positional, a variadic one keeps absorbing
        values; otherwise there is none.
        """
        if index < len(self.positionals):
            return self.positionals[index]
        if self.positionals and self.positionals[-1].variadic:
            return self.positionals[-1]
        return None
