"""Init command implementation."""

from __future__ import annotations

import pathlib
from typing import Annotated

import typer

from flimfit.io.config import generate_default_config
from flimfit.ui.messages import error, success


def init_command(
    path: Annotated[
        pathlib.Path,
        typer.Argument(help="Path for the new configuration file"),
    ] = pathlib.Path("flimfit.toml"),
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file"),
    ] = False,
) -> None:
    """Write a default TOML configuration file."""
    if path.exists() and not force:
        error(f"File already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    path.write_text(generate_default_config())
    success(f"Created configuration file: {path}")
