"""UI messages and status indicators."""

from __future__ import annotations

from rich.panel import Panel

from flimfit.ui.console import console
from flimfit.ui.logging import log


def success(message: str, indent: int = 0) -> None:
    console.print(f"{'  ' * indent}[success]✓[/success] {message}")
    log(message)


def warning(message: str, indent: int = 0) -> None:
    console.print(f"{'  ' * indent}[warning]⚠[/warning]  {message}")
    log(message, level="warning")


def error(message: str, indent: int = 0) -> None:
    console.print(f"{'  ' * indent}[error]✗[/error] {message}")
    log(message, level="error")


def info(message: str, indent: int = 0) -> None:
    console.print(f"{'  ' * indent}[dim]▸[/dim] {message}")
    log(message)


def action(message: str) -> None:
    """Display an action/process message with visual separation."""
    console.print(f"\n[bold yellow]—[/bold yellow] {message}")
    log(f"[ACTION] {message}")


def show_error_with_details(context: str, err: Exception, suggestion: str | None = None) -> None:
    """Display an error with details in a panel."""
    error(f"{context} failed")
    console.print(
        Panel(
            f"[error]{type(err).__name__}[/error]: {err!s}",
            title="Error Details",
            border_style="red",
        )
    )
    if suggestion:
        info(f"Suggestion: {suggestion}")


__all__ = ["action", "error", "info", "show_error_with_details", "success", "warning"]
