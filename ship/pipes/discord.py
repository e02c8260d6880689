from __future__ import annotations

import json
from dataclasses import replace

from ship.core.context import ExecutionContext
from ship.core.errors import ReleaseError
from ship.core.result import Err, Ok, Result
from ship.core.template import render
from ship.output.console import Style

DEFAULT_MESSAGE_TEMPLATE = "{{ project_name }} {{ tag }} is out! Check it out at {{ release_url }}"
DEFAULT_AUTHOR = "ship"
DEFAULT_COLOR = "3888754"

WEBHOOK_BASE_URL = "https://discord.com/api/webhooks"


class DiscordPipe:
    """Announces the release on a Discord webhook."""

    name = "discord"

    def skip(self, ctx: ExecutionContext) -> bool:
        return not ctx.config.announce.discord.enabled

    def default(self, ctx: ExecutionContext) -> Result[None, ReleaseError]:
        d = ctx.config.announce.discord
        d = replace(
            d,
            message_template=d.message_template or DEFAULT_MESSAGE_TEMPLATE,
            author=d.author or DEFAULT_AUTHOR,
            color=d.color or DEFAULT_COLOR,
        )
        ctx.config = replace(ctx.config, announce=replace(ctx.config.announce, discord=d))
        return Ok(None)

    def execute(self, ctx: ExecutionContext) -> Result[None, ReleaseError]:
        cfg = ctx.config.announce.discord

        message = render(cfg.message_template, ctx.template_vars())
        if isinstance(message, Err):
            return Err(message.error.with_context("discord"))

        webhook_id = ctx.env.get("DISCORD_WEBHOOK_ID", "").strip()
        webhook_token = ctx.env.get("DISCORD_WEBHOOK_TOKEN", "").strip()
        if not webhook_id or not webhook_token:
            return Err(
                ReleaseError(
                    kind="config",
                    message="discord: DISCORD_WEBHOOK_ID and DISCORD_WEBHOOK_TOKEN must be set",
                )
            )
        if not webhook_id.isdigit():
            return Err(ReleaseError(kind="config", message=f"discord: invalid webhook id: {webhook_id!r}"))

        try:
            color = int(cfg.color)
        except ValueError:
            return Err(ReleaseError(kind="config", message=f"discord: invalid color: {cfg.color!r}"))

        author: dict[str, str] = {"name": cfg.author}
        if cfg.icon_url:
            author["icon_url"] = cfg.icon_url
        payload = {"embeds": [{"author": author, "description": message.value, "color": color}]}

        if ctx.cancelled:
            return Err(ReleaseError(kind="cancelled", message="discord: run cancelled"))

        ctx.console.print(f"posting: '{message.value}'", Style.DIM)
        sent = ctx.http.request(
            "POST",
            f"{WEBHOOK_BASE_URL}/{webhook_id}/{webhook_token}",
            body=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        if isinstance(sent, Err):
            # The URL carries the webhook token; keep it out of the message.
            return Err(
                ReleaseError(
                    kind="remote",
                    message=f"discord: HTTP {sent.error.status}: {sent.error.message}",
                )
            )
        return Ok(None)
