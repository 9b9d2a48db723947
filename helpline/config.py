"""
helpline.config — YAML Configuration Loader
============================================

Reads ``config.yaml`` for infrastructure and identity settings (guild,
staff roles, which channels count as help channels).  Secrets such as the
bot token and database URL stay in the environment (``.env``).

Usage::

    from helpline.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.community_name)    # "Amplify Community"
    print(cfg.staff_role_ids)    # (976838371383083070,)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_HELP_CHANNEL_PATTERN = r"-help$"
DEFAULT_DISCUSSION_CATEGORY = "Q&A"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class HelplineConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str

    # Discord
    bot_prefix: str
    guild_id: int  # Primary guild snowflake

    # Dashboard
    dashboard_port: int

    # Roles
    admin_role_id: int
    staff_role_ids: tuple[int, ...] = ()  # Answers from these roles count as "staff"

    # Help channels
    help_channel_pattern: str = DEFAULT_HELP_CHANNEL_PATTERN

    # Optional
    github_org: str | None = None

    # GitHub Discussions (/admin thread-create)
    discussion_repositories: tuple[str, ...] = ()  # "owner/name"
    discussion_category: str = DEFAULT_DISCUSSION_CATEGORY


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> HelplineConfig:
    """Read *path* and return a :class:`HelplineConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh)

    return HelplineConfig(
        community_name=raw["community_name"],
        bot_prefix=raw["bot_prefix"],
        guild_id=int(raw["guild_id"]),
        dashboard_port=int(raw["dashboard_port"]),
        admin_role_id=int(raw["admin_role_id"]),
        staff_role_ids=tuple(int(r) for r in raw.get("staff_role_ids") or ()),
        help_channel_pattern=raw.get("help_channel_pattern") or DEFAULT_HELP_CHANNEL_PATTERN,
        github_org=raw.get("github_org") or None,
        discussion_repositories=tuple(raw.get("discussion_repositories") or ()),
        discussion_category=raw.get("discussion_category") or DEFAULT_DISCUSSION_CATEGORY,
    )
