"""Create-or-update of the GitHub release for the current tag.

One run publishes exactly one release per tag:

1. render the title,
2. optionally delete a previous draft with the same title,
3. look the tag up; create the release if there is none, otherwise merge the
   new notes into the body read from the provider and edit it in place,
4. upload artifacts against the returned release id.

The manager holds no locks. Callers must not run two ``create_release`` calls
for the same tag at once.
"""

from __future__ import annotations

from typing import BinaryIO

from ship.client.github import GitHubApi
from ship.client.model import ReleaseData, ReleaseInfo, Repo
from ship.client.pagination import collect
from ship.core.context import Artifact, ExecutionContext
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result
from ship.core.template import render
from ship.output.console import Style, format_fields
from ship.services.release.notes import merge_release_notes, truncate_release_body
from ship.services.release.provider import remote_error, repo_from_config
from ship.services.release.retry import UploadOutcome, classify_upload

__all__ = ["ReleaseManager"]


class ReleaseManager:
    def __init__(self, *, ctx: ExecutionContext, api: GitHubApi) -> None:
        self._ctx = ctx
        self._api = api

    @property
    def repo(self) -> Repo:
        return repo_from_config(self._ctx.config.release.github)

    def create_release(self, notes_body: str) -> Result[str, ReleaseError]:
        """Publish or update the release for the current tag.

        Returns:
            Ok(release id as an opaque string) or Err(ReleaseError).
        """
        ctx = self._ctx
        cfg = ctx.config.release
        variables = ctx.template_vars()

        title = render(cfg.name_template, variables)
        if isinstance(title, Err):
            return title

        if cfg.draft and cfg.replace_existing_draft:
            deleted = self._delete_existing_draft(title.value)
            if isinstance(deleted, Err):
                return deleted

        body = truncate_release_body(notes_body)

        target: str | None = None
        if cfg.target_commitish:
            rendered = render(cfg.target_commitish, variables)
            if isinstance(rendered, Err):
                return rendered
            target = rendered.value or None

        data = ReleaseData(
            name=title.value,
            tag_name=ctx.git.current_tag,
            body=body,
            draft=cfg.draft,
            prerelease=ctx.prerelease,
            target_commitish=target,
            discussion_category_name=cfg.discussion_category_name or None,
        )

        release = self._create_or_update(data)
        if isinstance(release, Err):
            return Err(release.error.with_context("could not release"))
        return Ok(str(release.value.id))

    def _create_or_update(self, data: ReleaseData) -> Result[ReleaseInfo, ReleaseError]:
        repo = self.repo
        console = self._ctx.console

        existing = self._api.get_release_by_tag(repo, data.tag_name)
        if isinstance(existing, Err):
            return Err(remote_error("get release by tag", existing.error))

        if existing.value is None:
            created = self._api.create_release(repo, data)
            if isinstance(created, Err):
                return Err(remote_error("create release", created.error))
            console.info(
                "release created "
                + format_fields(
                    {
                        "name": data.name,
                        "release-id": created.value.id,
                        "request-id": created.value.request_id,
                    }
                )
            )
            return created

        # Merge against the body just read, not anything cached from earlier.
        merged = merge_release_notes(existing.value.body, data.body, self._ctx.config.release.mode)
        update = ReleaseData(
            name=data.name,
            tag_name=data.tag_name,
            body=truncate_release_body(merged),
            draft=data.draft,
            prerelease=data.prerelease,
            target_commitish=data.target_commitish,
            discussion_category_name=data.discussion_category_name,
        )
        updated = self._api.edit_release(repo, existing.value.id, update)
        if isinstance(updated, Err):
            return Err(remote_error("edit release", updated.error))
        console.info(
            "release updated "
            + format_fields(
                {
                    "name": update.name,
                    "release-id": updated.value.id,
                    "request-id": updated.value.request_id,
                }
            )
        )
        return updated

    def _delete_existing_draft(self, title: str) -> Result[None, ReleaseError]:
        repo = self.repo
        # Scan every page before deleting anything; a partial scan could miss
        # the draft and leave a duplicate behind.
        releases = collect(lambda page: self._api.list_releases(repo, page=page))
        if isinstance(releases, Err):
            return Err(remote_error("could not delete existing drafts", releases.error))

        # Listing is newest first, so the first match is the most recent draft.
        draft = next((r for r in releases.value if r.draft and r.name == title), None)
        if draft is None:
            return Ok(None)

        deleted = self._api.delete_release(repo, draft.id)
        if isinstance(deleted, Err):
            return Err(remote_error("could not delete previous draft release", deleted.error))

        self._ctx.console.info(
            "deleted previous draft release "
            + format_fields(
                {
                    "commit": draft.target_commitish,
                    "tag": draft.tag_name,
                    "name": draft.name,
                }
            )
        )
        return Ok(None)

    def upload(self, release_id: str, artifact: Artifact, file: BinaryIO) -> Result[None, ReleaseError]:
        """Upload one artifact to the release.

        Errors come back as ``upload_fatal`` (do not retry) or
        ``upload_retriable``; see ``classify_upload``.
        """
        try:
            numeric_id = int(release_id)
        except ValueError:
            return Err(
                ReleaseError(
                    kind="invalid_id",
                    message=f"invalid release id: {release_id!r}",
                )
            )

        try:
            if file.seekable():
                file.seek(0)
            content = file.read()
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="io",
                    message=f"failed to read artifact {artifact.name}: {e}",
                    hint=str(artifact.path),
                )
            )

        result = self._api.upload_release_asset(self.repo, numeric_id, name=artifact.name, content=content)
        if isinstance(result, Ok):
            return result

        error = result.error
        self._ctx.console.warning(
            "upload failed "
            + format_fields(
                {
                    "name": artifact.name,
                    "release-id": release_id,
                    "request-id": error.request_id or "",
                }
            )
        )

        if error.cancelled:
            return Err(ReleaseError(kind="cancelled", message=str(error)))

        match classify_upload(error):
            case UploadOutcome.FATAL:
                return Err(ReleaseError(kind="upload_fatal", message=str(error)))
            case _:
                self._ctx.console.print(f"upload of {artifact.name} is retriable", Style.DIM)
                return Err(ReleaseError(kind="upload_retriable", message=str(error)))

    def release_url_template(self) -> Result[str, ReleaseError]:
        """Template of the public download URL of a release artifact."""
        ctx = self._ctx
        download = render(ctx.config.github_urls.download, ctx.template_vars())
        if isinstance(download, Err):
            return Err(download.error.with_context("templating GitHub download URL"))
        repo = self.repo
        return Ok(
            f"{download.value.rstrip('/')}/{repo.owner}/{repo.name}"
            "/releases/download/{{ tag }}/{{ artifact_name }}"
        )
