"""Adapters building a command tree from other CLI definitions.

This package provides:
- argparse: Conversion of an `argparse.ArgumentParser`, subparsers included
"""

from .argparse import from_argparse

__all__ = ["from_argparse"]
