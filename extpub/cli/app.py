from __future__ import annotations

import typer

from extpub import __version__
from extpub.cli.commands.env_cmd import env
from extpub.cli.commands.plan import plan

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
    help="Publishing policy for multi-project builds.",
)

app.command()(env)
app.command()(plan)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
