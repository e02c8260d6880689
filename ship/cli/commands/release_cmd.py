from __future__ import annotations

import signal
from pathlib import Path

import typer

from ship.cli.context import build_context
from ship.core.config import DEFAULT_CONFIG_FILE
from ship.core.context import ExecutionContext
from ship.core.result import Err
from ship.output.console import Style
from ship.output.errors import release_error_exit_code
from ship.pipeline.engine import run_pipeline
from ship.pipes import PUBLISH_PIPES


def release(
    tag: str = typer.Option(..., "--tag", help="Tag being released (e.g. v1.2.0)."),
    previous_tag: str = typer.Option("", "--previous-tag", help="Previous tag, for the changelog."),
    commit: str = typer.Option("", "--commit", help="Commit the tag points to."),
    config: Path = typer.Option(Path(DEFAULT_CONFIG_FILE), "--config", "-f", help="Config file."),
    dist: Path | None = typer.Option(None, "--dist", help="Directory of artifacts to upload."),
    release_notes: Path | None = typer.Option(
        None,
        "--release-notes",
        help="Use this file as release notes instead of building a changelog.",
    ),
) -> None:
    """Publish the release for a tag: changelog, release, milestones, announce."""
    ctx = build_context(
        config_path=config,
        tag=tag,
        previous_tag=previous_tag,
        commit=commit,
        dist=dist,
        release_notes=release_notes,
    )
    _cancel_on_sigterm(ctx)

    result = run_pipeline(PUBLISH_PIPES, ctx)
    if isinstance(result, Err):
        # The engine already reported the failing stage.
        raise typer.Exit(code=release_error_exit_code(result.error.error))

    report = result.value
    if report.skipped:
        ctx.console.print(f"skipped: {', '.join(report.skipped)}", Style.DIM)
    for url in ctx.uploaded_urls:
        ctx.console.print(url, Style.DIM)
    ctx.console.success(f"released {tag}")


def _cancel_on_sigterm(ctx: ExecutionContext) -> None:
    def handler(signum: int, frame: object) -> None:
        del signum, frame
        ctx.cancel.set()

    signal.signal(signal.SIGTERM, handler)
