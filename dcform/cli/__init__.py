"""Command-line interface for dcform.

Built with Click and Rich.
"""

from dcform.cli.main import cli

__all__ = ["cli"]
