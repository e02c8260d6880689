from __future__ import annotations

import os
from pathlib import Path

import typer

from ship import __version__
from ship.cli.commands.changelog_cmd import changelog
from ship.cli.commands.release_cmd import release
from ship.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Publish a GitHub release for a tag.",
)

app.command()(release)
app.command()(changelog)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    project_dir: Path | None = typer.Option(
        None,
        "--chdir",
        "-C",
        help="Run as if started in this directory (where .ship.toml and dist/ live).",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if project_dir is not None:
        try:
            os.chdir(project_dir.expanduser())
        except OSError as e:
            typer.echo(f"error: invalid --chdir: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))


def main() -> None:
    app()
