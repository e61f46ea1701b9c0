"""Command-line interface for promptshelf."""

from promptshelf.cli.main import cli, main

__all__ = ["cli", "main"]
