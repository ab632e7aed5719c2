"""Shell completion generators.

Provides generator functions for each supported shell. Every generator
takes the program name and the text that runs the program, and returns
a script that queries the program on each Tab press.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .bash import generate_bash
from .fish import generate_fish
from .powershell import generate_powershell
from .zsh import generate_zsh

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = ["GENERATORS", "generate_bash", "generate_fish", "generate_powershell", "generate_zsh"]

GENERATORS: dict[str, Callable[[str, str], str]] = {
    "bash": generate_bash,
    "zsh": generate_zsh,
    "fish": generate_fish,
    "powershell": generate_powershell,
}
