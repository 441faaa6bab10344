"""CLI command implementations."""

from flimfit.cli.commands.fit import fit_command
from flimfit.cli.commands.init import init_command

__all__ = ["fit_command", "init_command"]
