"""Tests for the command tree: declaration, traversal and validation."""

import pytest

from shelltab.commands.models import CommandNode, Option, PositionalArg
from shelltab.commands.tree import get_command, iter_commands, validate_tree
from shelltab.models import TreeConfigurationError


class TestCommandDeclaration:
    """Tests for CommandNode.command()."""

    def test_root_has_empty_name(self):
        """The root is nameless and is its own root."""
        root = CommandNode()
        assert root.name == ""
        assert root.is_root
        assert root.root is root
        assert root.full_name == ""

    def test_nested_path_creates_intermediates(self):
        """A space-separated path creates missing parents."""
        root = CommandNode()
        build = root.command("dev build", "Build project")
        assert build.full_name == "dev build"
        assert build.description == "Build project"
        assert root.children["dev"].children["build"] is build
        assert build.parent is root.children["dev"]
        assert build.root is root

    def test_redeclaration_returns_existing(self):
        """Declaring a command twice returns the same node."""
        root = CommandNode()
        dev = root.command("dev")
        assert root.command("dev", "Start dev server") is dev
        assert dev.description == "Start dev server"
        root.command("dev")
        assert dev.description == "Start dev server"

    def test_children_keep_declaration_order(self):
        """Children are suggested in registration order."""
        root = CommandNode()
        for name in ("serve", "dev", "build"):
            root.command(name)
        assert list(root.children) == ["serve", "dev", "build"]

    def test_empty_name_rejected(self):
        """An empty command name is a configuration error."""
        with pytest.raises(TreeConfigurationError):
            CommandNode().command("  ")


class TestOptionDeclaration:
    """Tests for CommandNode.option() and flag()."""

    def test_dashes_are_stripped(self):
        """Long names are stored without dashes."""
        root = CommandNode().option("--port", "Specify port", short="-p")
        option = root.options["port"]
        assert option.flag == "--port"
        assert option.short_flag == "-p"
        assert option.takes_value

    def test_flag_takes_no_value(self):
        """Boolean options take no value."""
        root = CommandNode().flag("verbose", short="v")
        assert root.options["verbose"].takes_value is False

    def test_same_name_overwrites(self):
        """A second declaration replaces the first."""
        root = CommandNode().option("port", "first").option("port", "second")
        assert len(root.options) == 1
        assert root.options["port"].description == "second"

    def test_short_alias_must_be_one_character(self):
        """Multi-character short aliases are rejected."""
        with pytest.raises(TreeConfigurationError):
            CommandNode().option("port", short="pp")

    def test_short_alias_collision(self):
        """Two options cannot share a short alias."""
        root = CommandNode().option("port", short="p")
        with pytest.raises(TreeConfigurationError):
            root.option("path", short="p")

    def test_empty_option_name(self):
        """An option needs a long name."""
        with pytest.raises(TreeConfigurationError):
            CommandNode().option("--")


class TestOptionMatch:
    """Tests for Option.match()."""

    def test_long_form_first(self):
        """The long form is preferred when both match."""
        assert Option("port", short="p").match("-") == "--port"

    def test_short_form(self):
        """The short form matches its own prefix."""
        assert Option("port", short="p").match("-p") == "-p"

    def test_no_match(self):
        """Unrelated prefixes do not match."""
        assert Option("port", short="p").match("--h") is None


class TestPositionals:
    """Tests for positional arguments."""

    def test_indexes(self):
        """Positionals are numbered in declaration order."""
        root = CommandNode().argument("source").argument("destination")
        assert [(p.name, p.index) for p in root.positionals] == [("source", 0), ("destination", 1)]

    def test_variadic_absorbs_the_rest(self):
        """Past the end, the variadic positional keeps matching."""
        root = CommandNode().argument("files", variadic=True)
        assert root.positional_at(0).name == "files"
        assert root.positional_at(5).name == "files"

    def test_past_the_end(self):
        """Without a variadic one, there is nothing past the end."""
        root = CommandNode().argument("source")
        assert root.positional_at(1) is None
        assert CommandNode().positional_at(0) is None

    def test_nothing_after_variadic(self):
        """Only the last positional may be variadic."""
        root = CommandNode().argument("files", variadic=True)
        with pytest.raises(TreeConfigurationError):
            root.argument("other")


class TestTraversal:
    """Tests for iter_commands() and get_command()."""

    def test_iter_depth_first(self):
        """Nodes are yielded depth first, in declaration order."""
        root = CommandNode()
        root.command("dev build")
        root.command("dev start")
        root.command("lint")
        assert [node.full_name for node in iter_commands(root)] == ["", "dev", "dev build", "dev start", "lint"]

    def test_get_command(self, vite_tree):
        """Paths resolve to nodes, unknown paths to None."""
        assert get_command(vite_tree, "") is vite_tree
        assert get_command(vite_tree, "dev build").full_name == "dev build"
        assert get_command(vite_tree, "dev nope") is None


class TestValidation:
    """Tests for validate_tree()."""

    def test_valid_tree(self, vite_tree):
        """A tree built with the declaration methods is valid."""
        validate_tree(vite_tree)

    def test_hand_built_variadic_in_the_middle(self):
        """Direct list manipulation is caught too."""
        root = CommandNode()
        root.positionals = [PositionalArg("files", 0, variadic=True), PositionalArg("out", 1)]
        with pytest.raises(TreeConfigurationError, match="variadic"):
            validate_tree(root)

    def test_hand_built_short_collision(self):
        """Every defect is listed."""
        root = CommandNode()
        root.options = {"port": Option("port", short="p"), "path": Option("path", short="p"), "x": Option("y")}
        with pytest.raises(TreeConfigurationError) as excinfo:
            validate_tree(root)
        assert "-p" in str(excinfo.value)
        assert "'x'" in str(excinfo.value)

    def test_unlinked_child(self):
        """Children must point back to their parent."""
        root = CommandNode()
        root.children["dev"] = CommandNode(name="dev")
        with pytest.raises(TreeConfigurationError, match="not linked"):
            validate_tree(root)
