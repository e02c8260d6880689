from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Repo:
    """A hosted project addressed by release operations."""

    owner: str
    name: str
    # Optional: write files to this branch instead of the default branch.
    branch: str = ""

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.slug


@dataclass(frozen=True, slots=True)
class ReleaseInfo:
    id: int
    tag_name: str
    name: str
    body: str
    draft: bool
    prerelease: bool
    target_commitish: str = ""
    html_url: str = ""
    request_id: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseData:
    """Release attributes sent on create and edit."""

    name: str
    tag_name: str
    body: str
    draft: bool
    prerelease: bool
    target_commitish: str | None = None
    discussion_category_name: str | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "name": self.name,
            "tag_name": self.tag_name,
            "body": self.body,
            "draft": self.draft,
            "prerelease": self.prerelease,
        }
        if self.target_commitish:
            payload["target_commitish"] = self.target_commitish
        if self.discussion_category_name:
            payload["discussion_category_name"] = self.discussion_category_name
        return payload


@dataclass(frozen=True, slots=True)
class CommitInfo:
    sha: str
    message: str
    author_login: str

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


@dataclass(frozen=True, slots=True)
class MilestoneInfo:
    number: int
    title: str
    state: str


@dataclass(frozen=True, slots=True)
class RepositoryInfo:
    full_name: str
    default_branch: str


@dataclass(frozen=True, slots=True)
class CommitAuthor:
    name: str
    email: str
