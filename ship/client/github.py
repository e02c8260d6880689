"""Typed access to the GitHub REST endpoints used when publishing.

Every method returns ``Result[..., HttpError]`` and checks the run's
cancellation signal before sending anything. Payloads are narrowed into the
dataclasses of ``ship.client.model``; malformed payloads are errors, not
exceptions.
"""

from __future__ import annotations

import base64
import json
import threading
from urllib.parse import quote, urlencode

from ship.client.http import HttpClient, HttpError, HttpResponse
from ship.client.model import (
    CommitInfo,
    MilestoneInfo,
    ReleaseData,
    ReleaseInfo,
    Repo,
    RepositoryInfo,
)
from ship.client.pagination import Page, next_page_from_link
from ship.core.config import DEFAULT_GITHUB_API_URL, DEFAULT_GITHUB_UPLOAD_URL
from ship.core.result import Err, Ok, Result
from ship.core.structured import (
    StrDict,
    as_obj_list,
    as_str_dict,
    get_bool,
    get_int,
    get_raw_str,
    get_str,
    get_table,
)

__all__ = [
    "GitHubApi",
    "COMMITS_PER_PAGE",
    "MILESTONES_PER_PAGE",
    "RELEASES_PER_PAGE",
]

RELEASES_PER_PAGE = 50
COMMITS_PER_PAGE = 100
MILESTONES_PER_PAGE = 100

_API_VERSION = "2022-11-28"


def _join(base: str, path: str) -> str:
    return base.rstrip("/") + "/" + path.lstrip("/")


def _parse_release(data: StrDict, request_id: str | None) -> ReleaseInfo | None:
    release_id = get_int(data, "id")
    if release_id is None:
        return None
    return ReleaseInfo(
        id=release_id,
        tag_name=get_raw_str(data, "tag_name"),
        name=get_raw_str(data, "name"),
        body=get_raw_str(data, "body"),
        draft=get_bool(data, "draft"),
        prerelease=get_bool(data, "prerelease"),
        target_commitish=get_raw_str(data, "target_commitish"),
        html_url=get_raw_str(data, "html_url"),
        request_id=request_id,
    )


def _parse_commit(data: StrDict) -> CommitInfo | None:
    sha = get_str(data, "sha")
    commit = get_table(data, "commit")
    if sha is None or commit is None:
        return None
    # "author" is null when the commit email is not linked to an account.
    author = get_table(data, "author") or {}
    return CommitInfo(
        sha=sha,
        message=get_raw_str(commit, "message"),
        author_login=get_raw_str(author, "login"),
    )


def _parse_milestone(data: StrDict) -> MilestoneInfo | None:
    number = get_int(data, "number")
    if number is None:
        return None
    return MilestoneInfo(
        number=number,
        title=get_raw_str(data, "title"),
        state=get_raw_str(data, "state"),
    )


class GitHubApi:
    """GitHub REST client bound to one token and one set of base URLs."""

    def __init__(
        self,
        *,
        http: HttpClient,
        token: str,
        api_url: str = DEFAULT_GITHUB_API_URL,
        upload_url: str = DEFAULT_GITHUB_UPLOAD_URL,
        cancel: threading.Event | None = None,
    ) -> None:
        self._http = http
        self._token = token
        self._api_url = api_url
        self._upload_url = upload_url
        self._cancel = cancel or threading.Event()

    # -- transport ---------------------------------------------------------

    def _url(self, path: str, **query: object) -> str:
        url = _join(self._api_url, path)
        if query:
            url += "?" + urlencode(query)
        return url

    def _send(
        self,
        method: str,
        url: str,
        *,
        payload: object = None,
        body: bytes | None = None,
        content_type: str | None = None,
    ) -> Result[HttpResponse, HttpError]:
        if self._cancel.is_set():
            return Err(HttpError(url=url, status=0, message="operation cancelled", cancelled=True))

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if payload is not None:
            body = json.dumps(payload).encode("utf-8")
            content_type = "application/json"
        if content_type is not None:
            headers["Content-Type"] = content_type

        return self._http.request(method, url, body=body, headers=headers)

    def _decode(self, response: HttpResponse, url: str) -> Result[object, HttpError]:
        try:
            return Ok(response.json())
        except ValueError as e:
            return Err(
                HttpError(
                    url=url,
                    status=response.status,
                    message=f"invalid JSON in response: {e}",
                    request_id=response.request_id,
                )
            )

    def _get_object(self, method: str, url: str, payload: object = None) -> Result[tuple[StrDict, HttpResponse], HttpError]:
        sent = self._send(method, url, payload=payload)
        if isinstance(sent, Err):
            return sent
        decoded = self._decode(sent.value, url)
        if isinstance(decoded, Err):
            return decoded
        data = as_str_dict(decoded.value)
        if data is None:
            return Err(HttpError(url=url, status=sent.value.status, message="expected a JSON object"))
        return Ok((data, sent.value))

    def _get_list(self, url: str) -> Result[tuple[list[StrDict], HttpResponse], HttpError]:
        sent = self._send("GET", url)
        if isinstance(sent, Err):
            return sent
        decoded = self._decode(sent.value, url)
        if isinstance(decoded, Err):
            return decoded
        raw = as_obj_list(decoded.value)
        if raw is None:
            return Err(HttpError(url=url, status=sent.value.status, message="expected a JSON array"))
        items = [d for d in (as_str_dict(item) for item in raw) if d is not None]
        return Ok((items, sent.value))

    # -- repositories ------------------------------------------------------

    def get_repository(self, repo: Repo) -> Result[RepositoryInfo, HttpError]:
        url = self._url(f"repos/{repo.owner}/{repo.name}")
        result = self._get_object("GET", url)
        if isinstance(result, Err):
            return result
        data, _ = result.value
        return Ok(
            RepositoryInfo(
                full_name=get_raw_str(data, "full_name"),
                default_branch=get_raw_str(data, "default_branch"),
            )
        )

    def compare_commits(
        self,
        repo: Repo,
        base: str,
        head: str,
        *,
        page: int,
        per_page: int = COMMITS_PER_PAGE,
    ) -> Result[Page[CommitInfo], HttpError]:
        basehead = quote(f"{base}...{head}", safe=".")
        url = self._url(f"repos/{repo.owner}/{repo.name}/compare/{basehead}", per_page=per_page, page=page)
        result = self._get_object("GET", url)
        if isinstance(result, Err):
            return result
        data, response = result.value

        commits: list[CommitInfo] = []
        for item in as_obj_list(data.get("commits")) or []:
            d = as_str_dict(item)
            commit = _parse_commit(d) if d is not None else None
            if commit is not None:
                commits.append(commit)
        return Ok(Page(items=tuple(commits), next_page=next_page_from_link(response.header("Link"))))

    # -- contents ----------------------------------------------------------

    def get_contents_sha(self, repo: Repo, path: str, *, ref: str = "") -> Result[str | None, HttpError]:
        """Return the blob sha of ``path`` at ``ref`` (default branch when empty), or None if absent."""
        if ref:
            url = self._url(f"repos/{repo.owner}/{repo.name}/contents/{quote(path)}", ref=ref)
        else:
            url = self._url(f"repos/{repo.owner}/{repo.name}/contents/{quote(path)}")
        result = self._get_object("GET", url)
        if isinstance(result, Err):
            if result.error.status == 404:
                return Ok(None)
            return result
        data, _ = result.value
        return Ok(get_str(data, "sha"))

    def put_contents(
        self,
        repo: Repo,
        path: str,
        *,
        content: bytes,
        message: str,
        committer: dict[str, str],
        branch: str | None = None,
        sha: str | None = None,
    ) -> Result[None, HttpError]:
        url = self._url(f"repos/{repo.owner}/{repo.name}/contents/{quote(path)}")
        payload: dict[str, object] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "committer": committer,
        }
        if branch:
            payload["branch"] = branch
        if sha:
            payload["sha"] = sha
        result = self._send("PUT", url, payload=payload)
        if isinstance(result, Err):
            return result
        return Ok(None)

    # -- releases ----------------------------------------------------------

    def get_release_by_tag(self, repo: Repo, tag: str) -> Result[ReleaseInfo | None, HttpError]:
        """Return the release for ``tag``, or None when the provider has none."""
        url = self._url(f"repos/{repo.owner}/{repo.name}/releases/tags/{quote(tag, safe='')}")
        result = self._get_object("GET", url)
        if isinstance(result, Err):
            if result.error.status == 404:
                return Ok(None)
            return result
        data, response = result.value
        return self._release_or_error(data, response, url)

    def _release_or_error(self, data: StrDict, response: HttpResponse, url: str) -> Result[ReleaseInfo, HttpError]:
        release = _parse_release(data, response.request_id)
        if release is None:
            return Err(HttpError(url=url, status=response.status, message="release payload without id"))
        return Ok(release)

    def create_release(self, repo: Repo, data: ReleaseData) -> Result[ReleaseInfo, HttpError]:
        url = self._url(f"repos/{repo.owner}/{repo.name}/releases")
        result = self._get_object("POST", url, data.to_payload())
        if isinstance(result, Err):
            return result
        return self._release_or_error(*result.value, url)

    def edit_release(self, repo: Repo, release_id: int, data: ReleaseData) -> Result[ReleaseInfo, HttpError]:
        url = self._url(f"repos/{repo.owner}/{repo.name}/releases/{release_id}")
        result = self._get_object("PATCH", url, data.to_payload())
        if isinstance(result, Err):
            return result
        return self._release_or_error(*result.value, url)

    def delete_release(self, repo: Repo, release_id: int) -> Result[None, HttpError]:
        url = self._url(f"repos/{repo.owner}/{repo.name}/releases/{release_id}")
        result = self._send("DELETE", url)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def list_releases(
        self,
        repo: Repo,
        *,
        page: int,
        per_page: int = RELEASES_PER_PAGE,
    ) -> Result[Page[ReleaseInfo], HttpError]:
        url = self._url(f"repos/{repo.owner}/{repo.name}/releases", per_page=per_page, page=page)
        result = self._get_list(url)
        if isinstance(result, Err):
            return result
        items, response = result.value
        releases = [r for r in (_parse_release(d, None) for d in items) if r is not None]
        return Ok(Page(items=tuple(releases), next_page=next_page_from_link(response.header("Link"))))

    def generate_release_notes(self, repo: Repo, *, tag: str, previous_tag: str) -> Result[str, HttpError]:
        url = self._url(f"repos/{repo.owner}/{repo.name}/releases/generate-notes")
        payload: dict[str, object] = {"tag_name": tag}
        if previous_tag:
            payload["previous_tag_name"] = previous_tag
        result = self._get_object("POST", url, payload)
        if isinstance(result, Err):
            return result
        data, _ = result.value
        return Ok(get_raw_str(data, "body"))

    def upload_release_asset(
        self,
        repo: Repo,
        release_id: int,
        *,
        name: str,
        content: bytes,
    ) -> Result[None, HttpError]:
        url = _join(self._upload_url, f"repos/{repo.owner}/{repo.name}/releases/{release_id}/assets")
        url += "?" + urlencode({"name": name})
        result = self._send("POST", url, body=content, content_type="application/octet-stream")
        if isinstance(result, Err):
            return result
        return Ok(None)

    # -- milestones --------------------------------------------------------

    def list_milestones(
        self,
        repo: Repo,
        *,
        page: int,
        per_page: int = MILESTONES_PER_PAGE,
    ) -> Result[Page[MilestoneInfo], HttpError]:
        url = self._url(f"repos/{repo.owner}/{repo.name}/milestones", per_page=per_page, page=page)
        result = self._get_list(url)
        if isinstance(result, Err):
            return result
        items, response = result.value
        milestones = [m for m in (_parse_milestone(d) for d in items) if m is not None]
        return Ok(Page(items=tuple(milestones), next_page=next_page_from_link(response.header("Link"))))

    def edit_milestone(self, repo: Repo, number: int, *, state: str) -> Result[MilestoneInfo, HttpError]:
        url = self._url(f"repos/{repo.owner}/{repo.name}/milestones/{number}")
        result = self._get_object("PATCH", url, {"state": state})
        if isinstance(result, Err):
            return result
        data, response = result.value
        milestone = _parse_milestone(data)
        if milestone is None:
            return Err(HttpError(url=url, status=response.status, message="milestone payload without number"))
        return Ok(milestone)
