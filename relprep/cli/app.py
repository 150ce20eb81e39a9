from __future__ import annotations

import typer

from relprep import __version__
from relprep.cli.commands.audit import audit, changelog_path_cmd
from relprep.cli.commands.prepare import prepare

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(prepare)
app.command()(audit)
app.command("changelog-path")(changelog_path_cmd)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
) -> None:
    del version


def main() -> None:
    app()
