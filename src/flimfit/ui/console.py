"""Console configuration and theme for the flimfit UI."""

from rich.console import Console
from rich.theme import Theme

from flimfit import __version__

FLIMFIT_THEME = Theme(
    {
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "info": "cyan",
        "header": "bold cyan",
        "key": "cyan",
        "value": "green",
        "metric": "bold green",
        "path": "blue underline",
    }
)

# Single console instance for entire application
console = Console(theme=FLIMFIT_THEME)

VERSION = __version__

__all__ = ["FLIMFIT_THEME", "VERSION", "console"]
