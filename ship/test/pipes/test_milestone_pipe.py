from dataclasses import replace

from ship.core.config import MilestonesConfig, RepoConfig
from ship.core.result import Err, Ok
from ship.pipes.milestone import MilestonePipe
from ship.test.fakes import FakeGitHub, console_of, make_context


def _ctx(gh: FakeGitHub, **milestones: object):
    ctx = make_context(gh)
    ctx.config = replace(ctx.config, milestones=MilestonesConfig(close=True, **milestones))  # type: ignore[arg-type]
    return ctx


def test_skipped_unless_close_is_set() -> None:
    assert MilestonePipe().skip(make_context()) is True
    assert MilestonePipe().skip(_ctx(FakeGitHub())) is False


def test_default_uses_release_repo_and_tag() -> None:
    ctx = _ctx(FakeGitHub())

    assert MilestonePipe().default(ctx) == Ok(None)
    assert ctx.config.milestones.repo == RepoConfig(owner="acme", name="widget")
    assert ctx.config.milestones.name_template == "{{ tag }}"


def test_explicit_repo_is_kept() -> None:
    ctx = _ctx(FakeGitHub(), repo=RepoConfig(owner="acme", name="roadmap"))

    MilestonePipe().default(ctx).unwrap()

    assert ctx.config.milestones.repo.name == "roadmap"


def test_closes_matching_milestone() -> None:
    gh = FakeGitHub()
    gh.add_milestone("v0.9.0")
    number = gh.add_milestone("v1.0.0")
    ctx = _ctx(gh)
    pipe = MilestonePipe()
    pipe.default(ctx).unwrap()

    assert pipe.execute(ctx) == Ok(None)
    assert gh.milestones[number - 1]["state"] == "closed"
    assert gh.milestones[0]["state"] == "open"
    assert console_of(ctx).find("OK closed milestone v1.0.0")


def test_custom_title_template() -> None:
    gh = FakeGitHub()
    gh.add_milestone("Release 1.0.0")
    ctx = _ctx(gh, name_template="Release {{ version }}")
    pipe = MilestonePipe()
    pipe.default(ctx).unwrap()

    pipe.execute(ctx).unwrap()

    assert gh.milestones[0]["state"] == "closed"


def test_missing_milestone_only_warns() -> None:
    gh = FakeGitHub()
    ctx = _ctx(gh)
    pipe = MilestonePipe()
    pipe.default(ctx).unwrap()

    assert pipe.execute(ctx) == Ok(None)
    assert console_of(ctx).find("milestone not closed: no milestone found: v1.0.0")


def test_missing_milestone_fails_when_asked() -> None:
    gh = FakeGitHub()
    ctx = _ctx(gh, fail_on_error=True)
    pipe = MilestonePipe()
    pipe.default(ctx).unwrap()

    result = pipe.execute(ctx)

    assert isinstance(result, Err)
    assert result.error.kind == "not_found"
