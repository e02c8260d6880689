from __future__ import annotations

import os
from pathlib import Path

import typer

from ship.client.http import RealHttpClient
from ship.core.config import DEFAULT_CONFIG_FILE, Config, load_config
from ship.core.context import Artifact, ExecutionContext, GitInfo, resolve_prerelease
from ship.core.errors import ErrorCode
from ship.core.result import Err
from ship.output.console import ConsoleProtocol, RichConsole, Style


def load_run_config(path: Path, console: ConsoleProtocol) -> Config:
    """Load the config file; a missing default file means an empty config."""
    if not path.exists() and path == Path(DEFAULT_CONFIG_FILE):
        console.print(f"no {DEFAULT_CONFIG_FILE} found, using defaults", Style.DIM)
        return Config()

    result = load_config(path)
    if isinstance(result, Err):
        console.error(result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return result.value


def collect_artifacts(dist: Path | None) -> list[Artifact]:
    """Every regular, non-hidden file directly inside ``dist``."""
    if dist is None:
        return []
    if not dist.is_dir():
        typer.echo(f"error: --dist '{dist}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))
    return [
        Artifact(name=p.name, path=p)
        for p in sorted(dist.iterdir())
        if p.is_file() and not p.name.startswith(".")
    ]


def read_notes_file(path: Path | None) -> str | None:
    if path is None:
        return None
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        typer.echo(f"error: failed to read --release-notes: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))


def build_context(
    *,
    config_path: Path,
    tag: str,
    previous_tag: str = "",
    commit: str = "",
    dist: Path | None = None,
    release_notes: Path | None = None,
) -> ExecutionContext:
    console = RichConsole()
    config = load_run_config(config_path, console)

    token = os.environ.get("GITHUB_TOKEN", "")
    if not token:
        console.warning("GITHUB_TOKEN is not set; provider calls will be anonymous")

    return ExecutionContext(
        config=config,
        git=GitInfo(current_tag=tag, previous_tag=previous_tag, commit=commit),
        console=console,
        http=RealHttpClient(verify_tls=not config.github_urls.skip_tls_verify),
        token=token,
        env=dict(os.environ),
        prerelease=resolve_prerelease(config.release.prerelease, tag),
        artifacts=collect_artifacts(dist),
        release_notes=read_notes_file(release_notes),
    )
