"""Option token parsing shared by every completion rule."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import CommandNode, Option

__all__ = [
    "END_OF_OPTIONS",
    "OptionToken",
    "find_option",
    "is_option_like",
    "parse_option_token",
    "visible_options",
]

END_OF_OPTIONS = "--"


@dataclass(frozen=True)
class OptionToken:
    """An option as typed on the command line."""

    flag: str  # "--port" or "-p"
    value: str | None = None  # inline value after "=", None when there is no "="

    @property
    def is_long(self) -> bool:
        """True for the "--name" form."""
        return self.flag.startswith("--")


def is_option_like(token: str) -> bool:
    """Return True if `token` names an option.

    Bare "-" (conventionally stdin) and "--" (end of options) are not options.
    """
    return token.startswith("-") and token not in ("-", END_OF_OPTIONS)


def parse_option_token(token: str) -> OptionToken | None:
    """Split an option token at its first "=".

    >>> parse_option_token("--port=3000")
    OptionToken(flag='--port', value='3000')
    >>> parse_option_token("-p")
    OptionToken(flag='-p', value=None)
    >>> parse_option_token("src/") is None
    True
    """
    if not is_option_like(token):
        return None
    flag, sep, value = token.partition("=")
    return OptionToken(flag=flag, value=value if sep else None)


def _lookup(node: CommandNode, flag: str) -> Option | None:
    if flag.startswith("--"):
        return node.options.get(flag[2:])
    if len(flag) == 2:  # noqa: PLR2004
        for option in node.options.values():
            if option.short == flag[1]:
                return option
    return None


def find_option(node: CommandNode, flag: str) -> Option | None:
    """Find the option named by `flag` on `node`, falling back to the root's global options."""
    option = _lookup(node, flag)
    if option is None and not node.is_root:
        option = _lookup(node.root, flag)
    return option


def visible_options(node: CommandNode) -> list[Option]:
    """Options usable on `node`: its own, then the root's ones it does not shadow."""
    options = list(node.options.values())
    if not node.is_root:
        options.extend(option for name, option in node.root.options.items() if name not in node.options)
    return options
