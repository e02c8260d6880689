"""Typed configuration loading and access.

This module provides frozen dataclasses for the ``.ship.toml`` structure.
Stages fill their own defaults at run time (see ``Pipe.default``), so the
dataclass defaults here are the raw "not configured" values.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, cast, get_args

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_table

__all__ = [
    "AnnounceConfig",
    "ChangelogConfig",
    "Config",
    "ConfigError",
    "DiscordConfig",
    "GitHubUrlsConfig",
    "MilestonesConfig",
    "NotesMode",
    "PrereleaseMode",
    "ReleaseConfig",
    "RepoConfig",
    "load_config",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_GITHUB_API_URL",
    "DEFAULT_GITHUB_UPLOAD_URL",
    "DEFAULT_GITHUB_DOWNLOAD_URL",
]

DEFAULT_CONFIG_FILE = ".ship.toml"

DEFAULT_GITHUB_API_URL = "https://api.github.com/"
DEFAULT_GITHUB_UPLOAD_URL = "https://uploads.github.com/"
DEFAULT_GITHUB_DOWNLOAD_URL = "https://github.com"

NotesMode = Literal["keep-existing", "append", "replace"]
PrereleaseMode = Literal["auto", "true", "false"]
ChangelogSource = Literal["github", "github-native"]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RepoConfig:
    owner: str = ""
    name: str = ""
    branch: str = ""


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    disable: bool = False
    draft: bool = False
    replace_existing_draft: bool = False
    prerelease: PrereleaseMode = "auto"
    name_template: str = ""
    target_commitish: str = ""
    discussion_category_name: str = ""
    mode: NotesMode = "keep-existing"
    github: RepoConfig = field(default_factory=RepoConfig)


@dataclass(frozen=True, slots=True)
class GitHubUrlsConfig:
    """Provider endpoints; override for GitHub Enterprise."""

    api: str = DEFAULT_GITHUB_API_URL
    upload: str = DEFAULT_GITHUB_UPLOAD_URL
    download: str = DEFAULT_GITHUB_DOWNLOAD_URL
    skip_tls_verify: bool = False


@dataclass(frozen=True, slots=True)
class ChangelogConfig:
    disable: bool = False
    use: ChangelogSource | Literal[""] = ""
    abbrev: int = 7


@dataclass(frozen=True, slots=True)
class MilestonesConfig:
    close: bool = False
    fail_on_error: bool = False
    name_template: str = ""
    repo: RepoConfig = field(default_factory=RepoConfig)


@dataclass(frozen=True, slots=True)
class DiscordConfig:
    enabled: bool = False
    message_template: str = ""
    icon_url: str = ""
    author: str = ""
    color: str = ""


@dataclass(frozen=True, slots=True)
class AnnounceConfig:
    discord: DiscordConfig = field(default_factory=DiscordConfig)


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    project_name: str = ""
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    github_urls: GitHubUrlsConfig = field(default_factory=GitHubUrlsConfig)
    changelog: ChangelogConfig = field(default_factory=ChangelogConfig)
    milestones: MilestonesConfig = field(default_factory=MilestonesConfig)
    announce: AnnounceConfig = field(default_factory=AnnounceConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If an enumerated option has an unknown value.
        """
        release: StrDict = get_table(data, "release") or {}
        urls: StrDict = get_table(data, "github_urls") or {}
        changelog: StrDict = get_table(data, "changelog") or {}
        milestones: StrDict = get_table(data, "milestones") or {}
        announce: StrDict = get_table(data, "announce") or {}
        discord: StrDict = get_table(announce, "discord") or {}

        abbrev = get_int(changelog, "abbrev")

        return cls(
            project_name=get_str(data, "project_name") or "",
            release=ReleaseConfig(
                disable=get_bool(release, "disable"),
                draft=get_bool(release, "draft"),
                replace_existing_draft=get_bool(release, "replace_existing_draft"),
                prerelease=_prerelease_mode(release),
                name_template=get_str(release, "name_template") or "",
                target_commitish=get_str(release, "target_commitish") or "",
                discussion_category_name=get_str(release, "discussion_category_name") or "",
                mode=_choice(release, "mode", get_args(NotesMode), "keep-existing"),
                github=_repo(get_table(release, "github") or {}),
            ),
            github_urls=GitHubUrlsConfig(
                api=get_str(urls, "api") or DEFAULT_GITHUB_API_URL,
                upload=get_str(urls, "upload") or DEFAULT_GITHUB_UPLOAD_URL,
                download=get_str(urls, "download") or DEFAULT_GITHUB_DOWNLOAD_URL,
                skip_tls_verify=get_bool(urls, "skip_tls_verify"),
            ),
            changelog=ChangelogConfig(
                disable=get_bool(changelog, "disable"),
                use=_choice(changelog, "use", ("", *get_args(ChangelogSource)), ""),
                abbrev=7 if abbrev is None else abbrev,
            ),
            milestones=MilestonesConfig(
                close=get_bool(milestones, "close"),
                fail_on_error=get_bool(milestones, "fail_on_error"),
                name_template=get_str(milestones, "name_template") or "",
                repo=_repo(get_table(milestones, "repo") or {}),
            ),
            announce=AnnounceConfig(
                discord=DiscordConfig(
                    enabled=get_bool(discord, "enabled"),
                    message_template=get_str(discord, "message_template") or "",
                    icon_url=get_str(discord, "icon_url") or "",
                    author=get_str(discord, "author") or "",
                    color=_color(discord),
                ),
            ),
        )


def _repo(table: StrDict) -> RepoConfig:
    return RepoConfig(
        owner=get_str(table, "owner") or "",
        name=get_str(table, "name") or "",
        branch=get_str(table, "branch") or "",
    )


def _choice[S: str](table: StrDict, key: str, allowed: tuple[str, ...], default: S) -> S:
    value = table.get(key)
    if value is None:
        return default
    if not isinstance(value, str) or value not in allowed:
        choices = ", ".join(repr(a) for a in allowed if a)
        raise ValueError(f"{key} must be one of {choices}, got {value!r}")
    return cast(S, value)


def _prerelease_mode(release: StrDict) -> PrereleaseMode:
    # TOML users write `prerelease = true` as often as `prerelease = "true"`.
    value = release.get("prerelease")
    if isinstance(value, bool):
        return "true" if value else "false"
    return _choice(release, "prerelease", get_args(PrereleaseMode), "auto")


def _color(discord: StrDict) -> str:
    value = discord.get("color")
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return get_str(discord, "color") or ""


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the config file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
