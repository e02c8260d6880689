from __future__ import annotations

from ship.client.github import COMMITS_PER_PAGE, GitHubApi
from ship.client.model import CommitInfo, Repo
from ship.client.pagination import collect
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result
from ship.services.release.provider import remote_error


def format_commit(commit: CommitInfo, abbrev: int) -> str:
    """One changelog line: ``<sha>: <first message line> (@<login>)``.

    ``abbrev`` <= 0 keeps the full sha.
    """
    sha = commit.sha[:abbrev] if abbrev > 0 else commit.sha
    return f"{sha}: {commit.summary} (@{commit.author_login})"


def changelog(
    api: GitHubApi,
    repo: Repo,
    prev: str,
    current: str,
    *,
    abbrev: int = 7,
) -> Result[str, ReleaseError]:
    """Build the commit log between two tags, in the provider's order."""
    commits = collect(
        lambda page: api.compare_commits(repo, prev, current, page=page, per_page=COMMITS_PER_PAGE)
    )
    if isinstance(commits, Err):
        return Err(remote_error(f"compare {prev}...{current} on {repo}", commits.error))
    return Ok("\n".join(format_commit(c, abbrev) for c in commits.value))


def generate_release_notes(
    api: GitHubApi,
    repo: Repo,
    prev: str,
    current: str,
) -> Result[str, ReleaseError]:
    """Ask the provider to write the notes between two tags."""
    notes = api.generate_release_notes(repo, tag=current, previous_tag=prev)
    if isinstance(notes, Err):
        return Err(remote_error(f"generate release notes on {repo}", notes.error))
    return notes
