"""Rich tables summarizing fit results."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from rich import box
from rich.table import Table

from flimfit.core.domain.results import FitStatus
from flimfit.ui.console import console

if TYPE_CHECKING:
    from flimfit.core.domain.results import BatchStatistic


def create_table(title: str | None = None, show_header: bool = True) -> Table:
    """Create a table with the application's styling."""
    return Table(
        title=title,
        title_style="header" if title else None,
        box=box.ROUNDED,
        show_header=show_header,
        header_style="bold cyan",
        border_style="dim",
    )


def status_table(counts: dict[FitStatus, int], statistics: list[BatchStatistic]) -> Table:
    """Table of pixel counts per status, followed by the batch chi-square range."""
    table = create_table("Fit Summary")
    table.add_column("Status", style="key")
    table.add_column("Pixels", style="value", justify="right")
    table.add_column("Share", justify="right")

    total = sum(counts.values())
    for status in FitStatus:
        n = counts.get(status, 0)
        share = f"{100 * n / total:.1f}%" if total else "-"
        table.add_row(status.label, str(n), share)

    reduced = [s.reduced_chisq for s in statistics if not math.isnan(s.reduced_chisq)]
    if reduced:
        table.add_section()
        table.add_row("batch reduced chi2", f"{min(reduced):.4g} .. {max(reduced):.4g}", "")
    return table


def print_status_summary(counts: dict[FitStatus, int], statistics: list[BatchStatistic]) -> None:
    console.print(status_table(counts, statistics))


__all__ = ["create_table", "print_status_summary", "status_table"]
