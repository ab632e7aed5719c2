"""Command tree utilities for shelltab.

This package provides:
- models: Data structures (CommandNode, Option, PositionalArg, Completer)
- parsing: Option token parsing shared by the completion rules
- tree: Traversal and validation of a command tree
- config: Building a command tree from a mapping or a TOML file
"""
