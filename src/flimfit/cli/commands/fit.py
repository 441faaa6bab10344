"""Fit command implementation."""

from __future__ import annotations

import math
import pathlib  # noqa: TC003
from typing import TYPE_CHECKING, Annotated

import typer
from pydantic import ValidationError
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from flimfit.core.domain.config import FlimFitConfig
from flimfit.core.shared.exceptions import FlimFitError
from flimfit.io.config import load_config
from flimfit.io.data_access import ArrayDataAccess, read_image
from flimfit.io.output import save_results
from flimfit.services.fit import FitService
from flimfit.ui.console import console
from flimfit.ui.logging import close_logging, log_dict, log_section, setup_logging
from flimfit.ui.messages import show_error_with_details, success
from flimfit.ui.reporter import ConsoleReporter
from flimfit.ui.tables import print_status_summary

if TYPE_CHECKING:
    from flimfit.core.domain.config import FitParams
    from flimfit.core.domain.results import BatchStatistic


class _ProgressHandler:
    """Advances a progress bar each time a batch completes."""

    def __init__(self, progress: Progress, task_id: TaskID) -> None:
        self._progress = progress
        self._task_id = task_id

    def on_complete(self, params: FitParams, statistic: BatchStatistic) -> None:
        self._progress.advance(self._task_id)


def _build_config(
    config_path: pathlib.Path | None,
    output: pathlib.Path | None,
    batch_size: int | None,
    n_comp: int | None,
    x_inc: float | None,
    drop_bad: bool | None,
) -> FlimFitConfig:
    config = load_config(config_path) if config_path is not None else FlimFitConfig()
    data = config.model_dump()
    overrides = {"n_comp": n_comp, "x_inc": x_inc, "drop_bad": drop_bad}
    data["fitting"].update({k: v for k, v in overrides.items() if v is not None})
    if batch_size is not None:
        data["batch"]["size"] = batch_size
    if output is not None:
        data["output"]["path"] = output
    return FlimFitConfig.model_validate(data)


def fit_command(
    data: Annotated[
        pathlib.Path,
        typer.Argument(
            help="Path to the decay image (.npy)",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    config: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to TOML configuration file",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    output: Annotated[
        pathlib.Path | None,
        typer.Option("--output", "-o", help="Result archive (.npz)", dir_okay=False),
    ] = None,
    batch_size: Annotated[
        int | None,
        typer.Option("--batch-size", "-b", help="Maximum traces per joint fit", min=1),
    ] = None,
    n_comp: Annotated[
        int | None,
        typer.Option("--n-comp", "-n", help="Number of exponential components", min=1),
    ] = None,
    x_inc: Annotated[
        float | None,
        typer.Option("--x-inc", help="Time between two samples"),
    ] = None,
    drop_bad: Annotated[
        bool | None,
        typer.Option(
            "--drop-bad/--keep-bad",
            help="Drop divergent traces from the joint fit (default: from config)",
        ),
    ] = None,
    log_file: Annotated[
        pathlib.Path | None,
        typer.Option(
            "--log-file",
            help="Write a log file (format from [output] log_format)",
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Also log to the console"),
    ] = False,
) -> None:
    """Fit every pixel of a lifetime image with shared lifetimes per batch.

    Examples
    --------
    Basic usage:
        $ flimfit fit decays.npy --n-comp 2 --output results.npz

    Using a configuration file:
        $ flimfit fit decays.npy --config flimfit.toml
    """
    try:
        fit_config = _build_config(config, output, batch_size, n_comp, x_inc, drop_bad)
    except ValidationError as e:
        show_error_with_details("Configuration", e)
        raise typer.Exit(code=1) from e

    setup_logging(
        log_file=log_file,
        verbose=verbose,
        log_format=fit_config.output.log_format,
    )
    try:
        log_section("Configuration")
        log_dict(fit_config.fitting.model_dump(exclude_none=True))

        access = ArrayDataAccess.from_params(read_image(data), fit_config.fitting)
        service = FitService(reporter=ConsoleReporter())
        n_batches = math.ceil(access.n_pixels / fit_config.batch.size)

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("Fitting batches", total=n_batches)
            result = service.fit_access(
                access, fit_config, handler=_ProgressHandler(progress, task_id)
            )

        print_status_summary(result.status_counts, result.statistics)
        written = save_results(
            fit_config.output.path, result.maps, result.statistics, fit_config.fitting
        )
        success(f"Results written to [path]{written}[/path]")
    except FlimFitError as e:
        show_error_with_details("Fitting process", e)
        raise typer.Exit(code=1) from e
    finally:
        close_logging()
