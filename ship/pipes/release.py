from __future__ import annotations

from dataclasses import replace

from ship.core.context import Artifact, ExecutionContext
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result
from ship.core.template import render
from ship.output.console import Style
from ship.services.release.lifecycle import ReleaseManager
from ship.services.release.provider import new_github_api, require_repo
from ship.services.release.retry import retry_upload

DEFAULT_NAME_TEMPLATE = "{{ tag }}"


def _upload_one(manager: ReleaseManager, release_id: str, artifact: Artifact) -> Result[None, ReleaseError]:
    # Reopen on every attempt so a retry never sends a half-read file.
    try:
        with artifact.path.open("rb") as f:
            return manager.upload(release_id, artifact, f)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io",
                message=f"failed to open artifact {artifact.name}: {e}",
                hint=str(artifact.path),
            )
        )


class ReleasePipe:
    """Creates or updates the GitHub release and uploads the artifacts."""

    name = "release"

    def skip(self, ctx: ExecutionContext) -> bool:
        return ctx.config.release.disable

    def default(self, ctx: ExecutionContext) -> Result[None, ReleaseError]:
        release = ctx.config.release
        if not release.name_template:
            ctx.config = replace(ctx.config, release=replace(release, name_template=DEFAULT_NAME_TEMPLATE))
        return require_repo(ctx.config.release.github, "release.github")

    def execute(self, ctx: ExecutionContext) -> Result[None, ReleaseError]:
        api = new_github_api(ctx)
        if isinstance(api, Err):
            return api
        manager = ReleaseManager(ctx=ctx, api=api.value)

        release_id = manager.create_release(ctx.release_notes or "")
        if isinstance(release_id, Err):
            return release_id
        ctx.release_id = release_id.value

        download = render(ctx.config.github_urls.download, ctx.template_vars())
        if isinstance(download, Err):
            return Err(download.error.with_context("templating GitHub download URL"))
        repo = manager.repo
        ctx.release_url = f"{download.value.rstrip('/')}/{repo.owner}/{repo.name}/releases/tag/{ctx.git.current_tag}"
        ctx.console.print(f"release: {ctx.release_url}", Style.DIM)

        url_template = manager.release_url_template()
        if isinstance(url_template, Err):
            return url_template

        for artifact in ctx.artifacts:
            if ctx.cancelled:
                return Err(ReleaseError(kind="cancelled", message=f"run cancelled before uploading {artifact.name}"))

            uploaded = retry_upload(
                lambda: _upload_one(manager, release_id.value, artifact),
                on_retry=lambda n, err: ctx.console.print(
                    f"retrying {artifact.name} (attempt {n + 1}): {err.message}", Style.DIM
                ),
            )
            if isinstance(uploaded, Err):
                return Err(uploaded.error.with_context(f"failed to upload {artifact.name}"))

            url = render(url_template.value, ctx.template_vars(artifact_name=artifact.name))
            if isinstance(url, Err):
                return url
            ctx.uploaded_urls.append(url.value)
            ctx.console.success(f"uploaded {artifact.name}")

        return Ok(None)
