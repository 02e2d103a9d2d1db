"""Command line entry points."""

from .commands import cli

__all__ = ["cli"]
