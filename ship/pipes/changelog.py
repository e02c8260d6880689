from __future__ import annotations

from dataclasses import replace

from ship.core.context import ExecutionContext
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result
from ship.output.console import Style
from ship.services.release.changelog import changelog, generate_release_notes
from ship.services.release.provider import new_github_api, repo_from_config, require_repo


class ChangelogPipe:
    """Builds the release notes unless the caller already supplied them."""

    name = "changelog"

    def skip(self, ctx: ExecutionContext) -> bool:
        return ctx.config.changelog.disable or ctx.release_notes is not None

    def default(self, ctx: ExecutionContext) -> Result[None, ReleaseError]:
        if not ctx.config.changelog.use:
            ctx.config = replace(ctx.config, changelog=replace(ctx.config.changelog, use="github"))
        return require_repo(ctx.config.release.github, "release.github")

    def execute(self, ctx: ExecutionContext) -> Result[None, ReleaseError]:
        prev = ctx.git.previous_tag
        current = ctx.git.current_tag
        if not prev:
            ctx.console.warning("no previous tag, release notes will be empty")
            ctx.release_notes = ""
            return Ok(None)

        api = new_github_api(ctx)
        if isinstance(api, Err):
            return api
        repo = repo_from_config(ctx.config.release.github)

        cfg = ctx.config.changelog
        if cfg.use == "github-native":
            notes = generate_release_notes(api.value, repo, prev, current)
            if isinstance(notes, Err):
                return notes
            ctx.release_notes = notes.value
        else:
            log = changelog(api.value, repo, prev, current, abbrev=cfg.abbrev)
            if isinstance(log, Err):
                return log
            ctx.release_notes = f"## Changelog\n\n{log.value}\n"

        ctx.console.print(f"changelog {prev}...{current} ({cfg.use})", Style.DIM)
        return Ok(None)
