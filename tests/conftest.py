" generic fixtures "
import pytest

from shelltab.commands.models import CommandNode
from shelltab.completions.completers import StaticCompleter


def pytest_configure():
    "Runs once before all"
    from shelltab.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


def _ports(_args, _to_complete):
    # no prefix filtering: the engine must emit these unchanged
    return [("3000", "dev"), ("8080", "alt")]


@pytest.fixture
def port_tree() -> CommandNode:
    "`dev` command with a `--port` option"
    root = CommandNode()
    root.command("dev", "Start dev server").option("port", "Specify port", _ports, short="p")
    return root


@pytest.fixture
def vite_tree() -> CommandNode:
    "A vite-like tree with global options, subcommands and positionals"
    root = CommandNode(description="Next generation frontend tooling")
    root.option("config", "Use specified config file", StaticCompleter(["vite.config.ts", "vite.config.js"]), short="c")
    root.option("mode", "Set env mode", StaticCompleter(["development", "production"]), short="m")
    root.argument("project", StaticCompleter([("my-app", "My application"), ("my-lib", "My library")]))

    dev = root.command("dev", "Start dev server")
    dev.option("host", "Specify hostname", StaticCompleter(["localhost", "0.0.0.0"]), short="H")
    dev.option("port", "Specify port", StaticCompleter([("3000", "Development server port"), ("8080", "Alternative port")]), short="p")
    dev.flag("verbose", "Enable verbose logging", short="v")
    root.command("dev build", "Build project")
    root.command("dev start", "Start development server")

    copy = root.command("copy", "Copy files")
    copy.argument("source", StaticCompleter(["src/", "dist/"]), required=True)
    copy.argument("destination", StaticCompleter(["build/", "release/"]), required=True)

    root.command("lint", "Lint project").argument("files", StaticCompleter(["main.ts", "index.ts"]), variadic=True)
    return root
