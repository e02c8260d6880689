from __future__ import annotations

import threading

from ship.client.github import GitHubApi
from ship.client.http import HttpError, MockHttpClient
from ship.client.model import ReleaseData, Repo
from ship.core.result import Err, Ok

API = "https://api.github.com"
REPO = Repo(owner="acme", name="widget")


def _api(http: MockHttpClient, **kwargs) -> GitHubApi:
    return GitHubApi(http=http, token="t0ken", **kwargs)


def _release(id: int = 7, **overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "id": id,
        "tag_name": "v1.0.0",
        "name": "v1.0.0",
        "body": "notes",
        "draft": False,
        "prerelease": False,
    }
    data.update(overrides)
    return data


def test_requests_carry_auth_and_api_headers() -> None:
    http = MockHttpClient()
    http.add_json("GET", f"{API}/repos/acme/widget", {"full_name": "acme/widget", "default_branch": "main"})

    result = _api(http).get_repository(REPO)

    assert isinstance(result, Ok)
    assert result.value.default_branch == "main"
    headers = http.calls[0].headers
    assert headers["Authorization"] == "Bearer t0ken"
    assert headers["Accept"] == "application/vnd.github+json"


def test_api_url_override() -> None:
    http = MockHttpClient()
    base = "https://ghe.example.com/api/v3"
    http.add_json("GET", f"{base}/repos/acme/widget", {"full_name": "acme/widget", "default_branch": "trunk"})

    result = _api(http, api_url=base + "/").get_repository(REPO)

    assert result.unwrap().default_branch == "trunk"


def test_get_release_by_tag_404_is_none() -> None:
    http = MockHttpClient()
    assert _api(http).get_release_by_tag(REPO, "v1.0.0") == Ok(None)


def test_get_release_by_tag_other_errors_surface() -> None:
    http = MockHttpClient()
    url = f"{API}/repos/acme/widget/releases/tags/v1.0.0"
    http.add("GET", url, HttpError(url=url, status=500, message="boom", request_id="R9"))

    result = _api(http).get_release_by_tag(REPO, "v1.0.0")

    assert isinstance(result, Err)
    assert result.error.status == 500
    assert result.error.request_id == "R9"


def test_get_release_by_tag_parses_release() -> None:
    http = MockHttpClient()
    http.add_json(
        "GET",
        f"{API}/repos/acme/widget/releases/tags/v1.0.0",
        _release(body=None),
        headers={"X-GitHub-Request-Id": "R1"},
    )

    release = _api(http).get_release_by_tag(REPO, "v1.0.0").unwrap()

    assert release is not None
    assert release.id == 7
    assert release.body == ""
    assert release.request_id == "R1"


def test_create_release_sends_payload() -> None:
    http = MockHttpClient()
    http.add_json("POST", f"{API}/repos/acme/widget/releases", _release(id=11), status=201)
    data = ReleaseData(name="v1.0.0", tag_name="v1.0.0", body="notes", draft=True, prerelease=False)

    result = _api(http).create_release(REPO, data)

    assert result.unwrap().id == 11
    payload = http.calls[0].json()
    assert payload == {"name": "v1.0.0", "tag_name": "v1.0.0", "body": "notes", "draft": True, "prerelease": False}


def test_release_payload_without_id_is_error() -> None:
    http = MockHttpClient()
    http.add_json("PATCH", f"{API}/repos/acme/widget/releases/3", {"name": "x"})
    data = ReleaseData(name="x", tag_name="v1", body="", draft=False, prerelease=False)

    result = _api(http).edit_release(REPO, 3, data)

    assert isinstance(result, Err)
    assert "without id" in result.error.message


def test_list_releases_reads_next_page_from_link() -> None:
    http = MockHttpClient()
    http.add_json(
        "GET",
        f"{API}/repos/acme/widget/releases?per_page=50&page=1",
        [_release(id=1), _release(id=2)],
        headers={"Link": f'<{API}/repos/acme/widget/releases?per_page=50&page=2>; rel="next"'},
    )

    page = _api(http).list_releases(REPO, page=1).unwrap()

    assert [r.id for r in page.items] == [1, 2]
    assert page.next_page == 2


def test_compare_commits_parses_authorless_commits() -> None:
    http = MockHttpClient()
    http.add_json(
        "GET",
        f"{API}/repos/acme/widget/compare/v1...v2?per_page=100&page=1",
        {
            "commits": [
                {"sha": "abc", "commit": {"message": "fix: a\n\nbody"}, "author": {"login": "octocat"}},
                {"sha": "def", "commit": {"message": "chore"}, "author": None},
            ]
        },
    )

    page = _api(http).compare_commits(REPO, "v1", "v2", page=1).unwrap()

    assert [c.summary for c in page.items] == ["fix: a", "chore"]
    assert [c.author_login for c in page.items] == ["octocat", ""]
    assert page.is_last


def test_upload_goes_to_upload_host() -> None:
    http = MockHttpClient()
    url = "https://uploads.github.com/repos/acme/widget/releases/5/assets?name=a+b.zip"
    http.add_json("POST", url, {"name": "a b.zip"}, status=201)

    result = _api(http).upload_release_asset(REPO, 5, name="a b.zip", content=b"data")

    assert result == Ok(None)
    call = http.calls[0]
    assert call.body == b"data"
    assert call.headers["Content-Type"] == "application/octet-stream"


def test_cancelled_api_sends_nothing() -> None:
    http = MockHttpClient()
    cancel = threading.Event()
    cancel.set()

    result = _api(http, cancel=cancel).get_release_by_tag(REPO, "v1.0.0")

    assert isinstance(result, Err)
    assert result.error.cancelled is True
    assert http.calls == []


def test_get_contents_sha() -> None:
    http = MockHttpClient()
    http.add_json("GET", f"{API}/repos/acme/widget/contents/Formula/widget.rb?ref=main", {"sha": "s1"})
    api = _api(http)

    assert api.get_contents_sha(REPO, "Formula/widget.rb", ref="main") == Ok("s1")
    assert api.get_contents_sha(REPO, "missing.rb") == Ok(None)


def test_generate_release_notes() -> None:
    http = MockHttpClient()
    http.add_json("POST", f"{API}/repos/acme/widget/releases/generate-notes", {"name": "n", "body": "## Notes"})

    assert _api(http).generate_release_notes(REPO, tag="v2", previous_tag="v1") == Ok("## Notes")
    assert http.calls[0].json() == {"tag_name": "v2", "previous_tag_name": "v1"}
