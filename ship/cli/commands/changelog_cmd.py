from __future__ import annotations

from pathlib import Path

import typer

from ship.cli.context import build_context
from ship.core.config import DEFAULT_CONFIG_FILE
from ship.core.result import Err
from ship.output.errors import print_release_error, release_error_exit_code
from ship.services.release.changelog import changelog as build_changelog
from ship.services.release.provider import new_github_api, repo_from_config, require_repo


def changelog(
    tag: str = typer.Option(..., "--tag", help="Current tag."),
    previous_tag: str = typer.Option(..., "--previous-tag", help="Previous tag."),
    config: Path = typer.Option(Path(DEFAULT_CONFIG_FILE), "--config", "-f", help="Config file."),
) -> None:
    """Print the commit log between two tags."""
    ctx = build_context(config_path=config, tag=tag, previous_tag=previous_tag)

    repo_cfg = ctx.config.release.github
    ok = require_repo(repo_cfg, "release.github")
    if isinstance(ok, Err):
        print_release_error(ok.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(ok.error))

    api = new_github_api(ctx)
    if isinstance(api, Err):
        print_release_error(api.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(api.error))

    log = build_changelog(
        api.value,
        repo_from_config(repo_cfg),
        previous_tag,
        tag,
        abbrev=ctx.config.changelog.abbrev,
    )
    if isinstance(log, Err):
        print_release_error(log.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(log.error))

    typer.echo(log.value)
