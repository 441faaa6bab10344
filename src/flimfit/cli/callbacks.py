"""Typer callbacks for CLI."""

import typer

from flimfit.ui.console import VERSION, console


def version_callback(value: bool | None) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"flimfit [success]{VERSION}[/success]")
        raise typer.Exit
