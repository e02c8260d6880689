"""Repository metadata: default branch, milestones, single-file commits."""

from __future__ import annotations

from ship.client.github import MILESTONES_PER_PAGE, GitHubApi
from ship.client.model import CommitAuthor, MilestoneInfo, Repo
from ship.client.pagination import find_first
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol, format_fields
from ship.services.release.provider import remote_error


def get_default_branch(api: GitHubApi, console: ConsoleProtocol, repo: Repo) -> Result[str, ReleaseError]:
    """Read the repository's default branch. Never guesses one on failure."""
    result = api.get_repository(repo)
    if isinstance(result, Err):
        console.warning(
            "error checking for default branch "
            + format_fields(
                {
                    "projectID": repo.slug,
                    "statusCode": result.error.status,
                    "err": result.error.message,
                }
            )
        )
        return Err(remote_error(f"get repository {repo}", result.error))
    return Ok(result.value.default_branch)


def find_milestone(api: GitHubApi, repo: Repo, title: str) -> Result[MilestoneInfo | None, ReleaseError]:
    # The API has no lookup by title; scan in listing order, first match wins.
    result = find_first(
        lambda page: api.list_milestones(repo, page=page, per_page=MILESTONES_PER_PAGE),
        lambda m: m.title == title,
    )
    if isinstance(result, Err):
        return Err(remote_error(f"list milestones on {repo}", result.error))
    return result


def close_milestone(api: GitHubApi, repo: Repo, title: str) -> Result[MilestoneInfo, ReleaseError]:
    """Close the milestone titled ``title``.

    Returns ``kind="not_found"`` when no milestone has that title.
    """
    found = find_milestone(api, repo, title)
    if isinstance(found, Err):
        return found
    if found.value is None:
        return Err(
            ReleaseError(
                kind="not_found",
                message=f"no milestone found: {title}",
                hint=repo.slug,
            )
        )

    closed = api.edit_milestone(repo, found.value.number, state="closed")
    if isinstance(closed, Err):
        return Err(remote_error(f"close milestone {title}", closed.error))
    return closed


def create_file(
    api: GitHubApi,
    console: ConsoleProtocol,
    repo: Repo,
    *,
    author: CommitAuthor,
    content: bytes,
    path: str,
    message: str,
) -> Result[None, ReleaseError]:
    """Create ``path`` in ``repo``, or update it if it already exists.

    The target branch is ``repo.branch`` when set, else the default branch.
    If the default branch cannot be read, the branch is left out of the
    request and the provider applies its own default.
    """
    branch = repo.branch
    if not branch:
        default = get_default_branch(api, console, repo)
        if isinstance(default, Err):
            console.warning(
                "error checking for default branch, using provider default "
                + format_fields({"fileName": path, "projectID": repo.slug})
            )
        else:
            branch = default.value

    existing = api.get_contents_sha(repo, path, ref=branch)
    if isinstance(existing, Err):
        return Err(remote_error(f"get contents {repo}/{path}", existing.error))

    written = api.put_contents(
        repo,
        path,
        content=content,
        message=message,
        committer={"name": author.name, "email": author.email},
        branch=branch or None,
        sha=existing.value,
    )
    if isinstance(written, Err):
        action = "update" if existing.value else "create"
        return Err(remote_error(f"{action} file {repo}/{path}", written.error))
    return Ok(None)
