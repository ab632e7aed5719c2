"""Demo program: completion for a vite-like command line.

Try it with::

    shelltab-demo complete -- dev --port ""
    source <(shelltab-demo complete bash)
"""

import asyncio
import os
import sys

from .client import run_completion
from .commands.models import CommandNode
from .completions.completers import DirectoryCompleter, StaticCompleter, filter_candidates
from .constants import COMPLETE_COMMAND
from .models import Candidate
from .version import VERSION

__all__ = ["PROGRAM_NAME", "build_demo_tree", "main"]

PROGRAM_NAME = "shelltab-demo"

HOSTS = StaticCompleter([("localhost", "Localhost"), ("0.0.0.0", "All interfaces")])
PORTS = StaticCompleter([("3000", "Development server port"), ("8080", "Alternative port")])

SOURCES = [
    Candidate("src/", "Source directory"),
    Candidate("dist/", "Distribution directory"),
    Candidate("public/", "Public assets"),
]


def _local_directories() -> list[str]:
    with os.scandir() as entries:
        return sorted(f"{entry.name}/" for entry in entries if entry.is_dir() and not entry.name.startswith("."))


async def complete_source(_committed_args: list[str], to_complete: str) -> list[Candidate]:
    """Well-known source directories, then the ones found in the current directory."""
    candidates = list(SOURCES)
    known = {candidate.value for candidate in candidates}
    for name in await asyncio.to_thread(_local_directories):
        if name not in known:
            candidates.append(Candidate(name, "Directory"))
    return filter_candidates(candidates, to_complete)


def complete_destination(committed_args: list[str], to_complete: str) -> list[Candidate]:
    """Output directories, never the one picked as source."""
    source = committed_args[-1] if committed_args else ""
    choices = [
        Candidate("build/", "Build output"),
        Candidate("release/", "Release directory"),
        Candidate("backup/", "Backup location"),
    ]
    return [candidate for candidate in filter_candidates(choices, to_complete) if candidate.value != source]


def build_demo_tree() -> CommandNode:
    """Build the command tree of the demo program."""
    root = CommandNode(description="Next generation frontend tooling")
    root.option(
        "config",
        "Use specified config file",
        StaticCompleter([("vite.config.ts", "Vite config file"), ("vite.config.js", "Vite config file")]),
        short="c",
    )
    root.option(
        "mode",
        "Set env mode",
        StaticCompleter([("development", "Development mode"), ("production", "Production mode")]),
        short="m",
    )
    root.option(
        "logLevel",
        "info | warn | error | silent",
        StaticCompleter([("info", "Info level"), ("warn", "Warn level"), ("error", "Error level"), ("silent", "Silent level")]),
        short="l",
    )
    root.argument(
        "project",
        StaticCompleter([("my-app", "My application"), ("my-lib", "My library"), ("my-tool", "My tool")]),
    )

    for name, description in (("dev", "Start dev server"), ("serve", "Start the server")):
        command = root.command(name, description)
        command.option("host", "Specify hostname", HOSTS, short="H")
        command.option("port", "Specify port", PORTS, short="p")
        command.flag("verbose", "Enable verbose logging", short="v")

    root.command("dev build", "Build project").option("outDir", "Output directory", DirectoryCompleter())
    root.command("dev start", "Start development server")

    copy = root.command("copy", "Copy files")
    copy.argument("source", complete_source, required=True)
    copy.argument("destination", complete_destination, required=True)

    root.command("lint", "Lint project").argument(
        "files",
        StaticCompleter(
            [
                ("main.ts", "Main file"),
                ("index.ts", "Index file"),
                ("src/", "Source directory"),
                ("tests/", "Tests directory"),
            ]
        ),
        variadic=True,
    )
    return root


def main() -> None:
    """Entry point of the demo program."""
    if len(sys.argv) > 1 and sys.argv[1] == COMPLETE_COMMAND:
        sys.exit(run_completion(build_demo_tree(), PROGRAM_NAME, sys.argv[2:]))
    if len(sys.argv) > 1 and sys.argv[1] == "--version":
        print(VERSION)
        return
    print(f"{PROGRAM_NAME} {VERSION}: a vite-like demo program")
    print(f'Use "{PROGRAM_NAME} {COMPLETE_COMMAND} <shell>" to get its completion script')


if __name__ == "__main__":
    main()
