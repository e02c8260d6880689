from __future__ import annotations

from ship.client.github import GitHubApi
from ship.client.http import HttpError
from ship.client.model import Repo
from ship.core.config import RepoConfig
from ship.core.context import ExecutionContext
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result
from ship.core.template import render


def remote_error(context: str, error: HttpError) -> ReleaseError:
    """Wrap a transport error with the operation that failed."""
    return ReleaseError(
        kind="cancelled" if error.cancelled else "remote",
        message=f"{context}: {error}",
        hint=f"request-id {error.request_id}" if error.request_id else None,
    )


def repo_from_config(cfg: RepoConfig) -> Repo:
    return Repo(owner=cfg.owner, name=cfg.name, branch=cfg.branch)


def require_repo(cfg: RepoConfig, section: str) -> Result[None, ReleaseError]:
    if cfg.owner and cfg.name:
        return Ok(None)
    return Err(
        ReleaseError(
            kind="config",
            message=f"{section}: repository owner and name are required",
            hint=f"set [{section}] owner = \"...\" and name = \"...\"",
        )
    )


def new_github_api(ctx: ExecutionContext) -> Result[GitHubApi, ReleaseError]:
    """Build the API client for this run.

    The API and upload base URLs are templates so enterprise installs can
    derive them from the environment of the run.
    """
    urls = ctx.config.github_urls
    variables = ctx.template_vars()

    api_url = render(urls.api, variables)
    if isinstance(api_url, Err):
        return Err(api_url.error.with_context("templating GitHub API URL"))
    upload_url = render(urls.upload, variables)
    if isinstance(upload_url, Err):
        return Err(upload_url.error.with_context("templating GitHub upload URL"))

    return Ok(
        GitHubApi(
            http=ctx.http,
            token=ctx.token,
            api_url=api_url.value,
            upload_url=upload_url.value,
            cancel=ctx.cancel,
        )
    )
