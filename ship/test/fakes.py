"""In-memory GitHub used by service, stage and CLI tests.

``FakeGitHub`` implements the ``HttpClient`` protocol and answers the REST
routes ship talks to, keeping releases, assets, milestones, commits and files
in plain dicts so tests can assert on the resulting remote state.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import parse_qs, unquote, urlencode, urlsplit

from ship.client.http import HttpError, HttpResponse
from ship.core.config import Config, GitHubUrlsConfig, ReleaseConfig, RepoConfig
from ship.core.context import Artifact, ExecutionContext, GitInfo
from ship.core.result import Err, Ok, Result
from ship.output.console import MockConsole

API_HOST = "api.github.com"
UPLOAD_HOST = "uploads.github.com"
REQUEST_ID = "FAKE-REQ-1"


@dataclass
class FakeRelease:
    id: int
    tag_name: str
    name: str
    body: str
    draft: bool
    prerelease: bool
    target_commitish: str = ""
    assets: dict[str, bytes] = field(default_factory=lambda: {})

    def to_json(self) -> dict[str, object]:
        return {
            "id": self.id,
            "tag_name": self.tag_name,
            "name": self.name,
            "body": self.body,
            "draft": self.draft,
            "prerelease": self.prerelease,
            "target_commitish": self.target_commitish,
            "html_url": f"https://github.com/releases/{self.id}",
        }


@dataclass
class FakeCall:
    method: str
    host: str
    path: str
    query: dict[str, str]
    body: bytes | None
    headers: Mapping[str, str]

    def json(self) -> object:
        if self.body is None:
            return None
        return json.loads(self.body.decode("utf-8"))


class FakeGitHub:
    """Stateful fake of one GitHub repository."""

    def __init__(self, owner: str = "acme", name: str = "widget", *, default_branch: str = "main") -> None:
        self.owner = owner
        self.name = name
        self.default_branch = default_branch
        self.releases: list[FakeRelease] = []
        self.milestones: list[dict[str, object]] = []
        self.commits: list[dict[str, object]] = []
        self.files: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.generated_notes = "## What's Changed\n* generated"
        self.calls: list[FakeCall] = []
        # Scripted failures: status codes returned, in order, for matching requests.
        self.upload_failures: dict[str, list[int]] = {}
        self.fail_routes: dict[tuple[str, str], int] = {}
        self._next_id = 100

    # -- seeding -------------------------------------------------------------

    def add_release(
        self,
        tag: str,
        *,
        name: str = "",
        body: str = "",
        draft: bool = False,
        target_commitish: str = "",
    ) -> FakeRelease:
        self._next_id += 1
        release = FakeRelease(
            id=self._next_id,
            tag_name=tag,
            name=name or tag,
            body=body,
            draft=draft,
            prerelease=False,
            target_commitish=target_commitish,
        )
        self.releases.append(release)
        return release

    def add_milestone(self, title: str, *, state: str = "open") -> int:
        number = len(self.milestones) + 1
        self.milestones.append({"number": number, "title": title, "state": state})
        return number

    def add_commit(self, sha: str, message: str, login: str | None = "octocat") -> None:
        self.commits.append(
            {
                "sha": sha,
                "commit": {"message": message},
                "author": {"login": login} if login is not None else None,
            }
        )

    def fail(self, method: str, path: str, status: int) -> None:
        """Make every ``method path`` request fail with ``status``."""
        self.fail_routes[(method, path)] = status

    # -- queries -------------------------------------------------------------

    def release_for(self, tag: str) -> FakeRelease | None:
        return next((r for r in self.releases if r.tag_name == tag), None)

    def calls_matching(self, method: str, path_prefix: str = "") -> list[FakeCall]:
        return [c for c in self.calls if c.method == method and c.path.startswith(path_prefix)]

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.name}"

    # -- HttpClient ----------------------------------------------------------

    def request(
        self,
        method: str,
        url: str,
        *,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        parts = urlsplit(url)
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}
        path = unquote(parts.path)
        call = FakeCall(method, parts.netloc, path, query, body, dict(headers or {}))
        self.calls.append(call)

        status = self.fail_routes.get((method, path))
        if status is not None:
            return self._error(url, status, "scripted failure")

        if parts.netloc == UPLOAD_HOST:
            return self._upload(call, url)
        return self._api(call, url)

    def _api(self, call: FakeCall, url: str) -> Result[HttpResponse, HttpError]:
        base = self.repo_path
        path = call.path
        method = call.method

        if path == base and method == "GET":
            return self._json({"full_name": f"{self.owner}/{self.name}", "default_branch": self.default_branch})

        if path.startswith(f"{base}/releases/tags/") and method == "GET":
            release = self.release_for(path.removeprefix(f"{base}/releases/tags/"))
            if release is None:
                return self._error(url, 404, "Not Found")
            return self._json(release.to_json())

        if path == f"{base}/releases/generate-notes" and method == "POST":
            return self._json({"name": "notes", "body": self.generated_notes})

        if path == f"{base}/releases":
            if method == "POST":
                return self._create_release(call)
            if method == "GET":
                newest_first = [r.to_json() for r in reversed(self.releases)]
                return self._page(newest_first, call, url)

        if path.startswith(f"{base}/releases/"):
            release_id = int(path.removeprefix(f"{base}/releases/"))
            release = next((r for r in self.releases if r.id == release_id), None)
            if release is None:
                return self._error(url, 404, "Not Found")
            if method == "PATCH":
                self._apply(release, call.json())
                return self._json(release.to_json())
            if method == "DELETE":
                self.releases.remove(release)
                return Ok(HttpResponse(status=204))

        if path == f"{base}/milestones" and method == "GET":
            return self._page(list(self.milestones), call, url)

        if path.startswith(f"{base}/milestones/") and method == "PATCH":
            number = int(path.removeprefix(f"{base}/milestones/"))
            milestone = next((m for m in self.milestones if m["number"] == number), None)
            if milestone is None:
                return self._error(url, 404, "Not Found")
            payload = call.json()
            assert isinstance(payload, dict)
            milestone["state"] = payload["state"]
            return self._json(milestone)

        if path.startswith(f"{base}/compare/") and method == "GET":
            page = self._page(list(self.commits), call, url)
            if isinstance(page, Err):
                return page
            items = json.loads(page.value.body.decode("utf-8"))
            return self._json({"commits": items}, headers=page.value.headers)

        if path.startswith(f"{base}/contents/"):
            return self._contents(call, url, path.removeprefix(f"{base}/contents/"))

        return self._error(url, 404, "Not Found")

    def _create_release(self, call: FakeCall) -> Result[HttpResponse, HttpError]:
        payload = call.json()
        assert isinstance(payload, dict)
        self._next_id += 1
        release = FakeRelease(
            id=self._next_id,
            tag_name=str(payload["tag_name"]),
            name=str(payload["name"]),
            body=str(payload["body"]),
            draft=bool(payload["draft"]),
            prerelease=bool(payload["prerelease"]),
            target_commitish=str(payload.get("target_commitish", "")),
        )
        self.releases.append(release)
        return self._json(release.to_json(), status=201)

    def _apply(self, release: FakeRelease, payload: object) -> None:
        assert isinstance(payload, dict)
        release.name = str(payload["name"])
        release.body = str(payload["body"])
        release.draft = bool(payload["draft"])
        release.prerelease = bool(payload["prerelease"])
        if "target_commitish" in payload:
            release.target_commitish = str(payload["target_commitish"])

    def _upload(self, call: FakeCall, url: str) -> Result[HttpResponse, HttpError]:
        # /repos/{owner}/{name}/releases/{id}/assets
        segments = call.path.strip("/").split("/")
        release_id = int(segments[4])
        name = call.query.get("name", "")
        release = next((r for r in self.releases if r.id == release_id), None)
        if release is None:
            return self._error(url, 404, "Not Found")

        scripted = self.upload_failures.get(name)
        if scripted:
            return self._error(url, scripted.pop(0), "scripted upload failure")

        if name in release.assets:
            return self._error(url, 422, "Validation Failed")
        release.assets[name] = call.body or b""
        return self._json({"name": name, "state": "uploaded"}, status=201)

    def _contents(self, call: FakeCall, url: str, path: str) -> Result[HttpResponse, HttpError]:
        if call.method == "GET":
            branch = call.query.get("ref", self.default_branch)
            existing = self.files.get((branch, path))
            if existing is None:
                return self._error(url, 404, "Not Found")
            return self._json({"path": path, "sha": existing[1]})

        payload = call.json()
        assert isinstance(payload, dict)
        branch = str(payload.get("branch", self.default_branch))
        current = self.files.get((branch, path))
        if current is not None and payload.get("sha") != current[1]:
            return self._error(url, 409, "sha does not match")
        content = base64.b64decode(str(payload["content"]))
        sha = f"sha{len(self.files) + 1}"
        self.files[(branch, path)] = (content, sha)
        return self._json({"content": {"path": path, "sha": sha}}, status=201 if current is None else 200)

    # -- responses -----------------------------------------------------------

    def _page(self, items: list[dict[str, object]], call: FakeCall, url: str) -> Result[HttpResponse, HttpError]:
        per_page = int(call.query.get("per_page", "30"))
        page = int(call.query.get("page", "1"))
        start = (page - 1) * per_page
        chunk = items[start : start + per_page]
        headers: dict[str, str] = {}
        if start + per_page < len(items):
            query = dict(call.query, page=str(page + 1))
            next_url = f"https://{call.host}{urlsplit(url).path}?{urlencode(query)}"
            headers["Link"] = f'<{next_url}>; rel="next", <{url}>; rel="first"'
        return self._json(chunk, headers=headers)

    def _json(
        self,
        payload: object,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        all_headers = {"X-GitHub-Request-Id": REQUEST_ID}
        all_headers.update(headers or {})
        return Ok(HttpResponse(status=status, headers=all_headers, body=json.dumps(payload).encode("utf-8")))

    def _error(self, url: str, status: int, message: str) -> Result[HttpResponse, HttpError]:
        return Err(HttpError(url=url, status=status, message=message, request_id=REQUEST_ID))


def make_context(
    gh: FakeGitHub | None = None,
    *,
    tag: str = "v1.0.0",
    previous_tag: str = "v0.9.0",
    release: ReleaseConfig | None = None,
    config: Config | None = None,
    artifacts_dir: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ExecutionContext:
    """Build a context wired to ``gh`` with a release repo configured."""
    gh = gh or FakeGitHub()
    if config is None:
        config = Config(
            project_name="widget",
            release=release or release_config(gh),
            github_urls=GitHubUrlsConfig(),
        )
    artifacts: list[Artifact] = []
    if artifacts_dir is not None:
        artifacts = [Artifact(name=p.name, path=p) for p in sorted(artifacts_dir.iterdir())]
    return ExecutionContext(
        config=config,
        git=GitInfo(current_tag=tag, previous_tag=previous_tag, commit="0123456789abcdef"),
        console=MockConsole(),
        http=gh,
        token="t0ken",
        env=dict(env or {}),
        artifacts=artifacts,
    )


def console_of(ctx: ExecutionContext) -> MockConsole:
    assert isinstance(ctx.console, MockConsole)
    return ctx.console


def release_config(gh: FakeGitHub, **overrides: object) -> ReleaseConfig:
    """A ``ReleaseConfig`` pointing at ``gh``, as the release stage's defaults leave it."""
    values: dict[str, object] = {
        "name_template": "{{ tag }}",
        "github": RepoConfig(owner=gh.owner, name=gh.name),
    }
    values.update(overrides)
    return ReleaseConfig(**values)  # type: ignore[arg-type]
