"""Main Typer application for flimfit."""

from typing import Annotated

import typer

from flimfit.cli.callbacks import version_callback
from flimfit.cli.commands import fit_command, init_command

app = typer.Typer(
    name="flimfit",
    help="flimfit - Global multi-exponential fitting of lifetime images",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """flimfit - Global multi-exponential fitting of lifetime images.

    Lifetimes are shared by all pixels of a batch while offsets and
    amplitudes are fitted per pixel.
    """


app.command(name="fit")(fit_command)
app.command(name="init")(init_command)
