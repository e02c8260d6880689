from __future__ import annotations

from dataclasses import replace

from ship.core.context import ExecutionContext
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result
from ship.core.template import render
from ship.services.release.metadata import close_milestone
from ship.services.release.provider import new_github_api, repo_from_config, require_repo

DEFAULT_MILESTONE_TEMPLATE = "{{ tag }}"


class MilestonePipe:
    """Closes the milestone named after the release."""

    name = "milestones"

    def skip(self, ctx: ExecutionContext) -> bool:
        return not ctx.config.milestones.close

    def default(self, ctx: ExecutionContext) -> Result[None, ReleaseError]:
        milestones = ctx.config.milestones
        if not milestones.name_template:
            milestones = replace(milestones, name_template=DEFAULT_MILESTONE_TEMPLATE)
        if not milestones.repo.owner and not milestones.repo.name:
            milestones = replace(milestones, repo=ctx.config.release.github)
        ctx.config = replace(ctx.config, milestones=milestones)
        return require_repo(milestones.repo, "milestones.repo")

    def execute(self, ctx: ExecutionContext) -> Result[None, ReleaseError]:
        cfg = ctx.config.milestones
        title = render(cfg.name_template, ctx.template_vars())
        if isinstance(title, Err):
            return title

        api = new_github_api(ctx)
        if isinstance(api, Err):
            return api

        closed = close_milestone(api.value, repo_from_config(cfg.repo), title.value)
        if isinstance(closed, Ok):
            ctx.console.success(f"closed milestone {closed.value.title}")
            return Ok(None)

        error = closed.error
        if cfg.fail_on_error or error.kind == "cancelled":
            return closed
        ctx.console.warning(f"milestone not closed: {error.pretty()}")
        return Ok(None)
