"""Command-line tools for jsondb."""

from .shell import Shell, ShellContext

__all__ = ["Shell", "ShellContext"]
