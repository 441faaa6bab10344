"""Terminal output and logging for flimfit.

Submodules:
- console: Theme and console instance
- logging: File and console logging setup
- messages: Status messages (success, error, warning, etc.)
- reporter: Reporter implementation printing to the console
- tables: Fit summary tables
"""

from flimfit.ui.console import FLIMFIT_THEME, VERSION, console
from flimfit.ui.logging import close_logging, log, log_dict, log_section, setup_logging
from flimfit.ui.messages import action, error, info, show_error_with_details, success, warning
from flimfit.ui.reporter import ConsoleReporter
from flimfit.ui.tables import print_status_summary, status_table

__all__ = [
    "FLIMFIT_THEME",
    "VERSION",
    "ConsoleReporter",
    "action",
    "close_logging",
    "console",
    "error",
    "info",
    "log",
    "log_dict",
    "log_section",
    "print_status_summary",
    "setup_logging",
    "show_error_with_details",
    "status_table",
    "success",
    "warning",
]
