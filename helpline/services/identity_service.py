"""
helpline.services.identity_service — Discord identity resolution
=================================================================

Answers the questions the attribution pipeline can't answer itself:

- Who is this Discord user (display name, avatar)?
- Are they staff?  Holding any configured staff role (or the admin role)
  counts; with ``github_org`` configured, a linked GitHub account that
  belongs to the org counts too.
- Which GitHub account have they linked?  Only resolved for staff.
- Which guild channels are help channels?

Talks to the Discord REST API with the bot token (``httpx``), so the
dashboard works without a gateway connection.  Every lookup degrades to a
safe default on failure and logs a warning.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable

import httpx
from sqlalchemy import Engine

from helpline.config import HelplineConfig
from helpline.constants import UNKNOWN_USER, avatar_url
from helpline.database.engine import run_db
from helpline.engine.contributors import Identity
from helpline.services.github_service import GitHubClient
from helpline.services.question_service import get_github_id

logger = logging.getLogger(__name__)

DISCORD_API = "https://discord.com/api/v10"
GUILD_TEXT_CHANNEL = 0


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------
def has_staff_role(role_ids: Iterable[int | str], cfg: HelplineConfig) -> bool:
    """True if any of *role_ids* is a staff role or the admin role."""
    staff = {*cfg.staff_role_ids, cfg.admin_role_id}
    return any(int(r) in staff for r in role_ids)


def has_admin_role(role_ids: Iterable[int | str], cfg: HelplineConfig) -> bool:
    return any(int(r) == cfg.admin_role_id for r in role_ids)


def is_help_channel(name: str | None, cfg: HelplineConfig) -> bool:
    return bool(name) and re.search(cfg.help_channel_pattern, name) is not None


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------
class IdentityResolver:
    """Resolves Discord users and guild metadata for the dashboard.

    Parameters
    ----------
    cfg:
        Parsed :class:`HelplineConfig`.
    engine:
        SQLAlchemy engine (linked GitHub accounts live in ``users``).
    discord_token:
        Bot token; falls back to ``DISCORD_TOKEN``.
    github:
        Optional :class:`GitHubClient`.
    client:
        Optional pre-built Discord :class:`httpx.AsyncClient`.
    """

    def __init__(
        self,
        cfg: HelplineConfig,
        engine: Engine,
        discord_token: str | None = None,
        github: GitHubClient | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.cfg = cfg
        self.engine = engine
        self.github = github or GitHubClient()
        token = discord_token if discord_token is not None else os.getenv("DISCORD_TOKEN", "")
        self._client = client or httpx.AsyncClient(
            base_url=DISCORD_API,
            timeout=10,
            transport=httpx.AsyncHTTPTransport(retries=1),
        )
        if token:
            self._client.headers["Authorization"] = f"Bot {token}"

    async def aclose(self) -> None:
        await self._client.aclose()
        await self.github.aclose()

    async def _get(self, path: str):
        resp = await self._client.get(path)
        resp.raise_for_status()
        return resp.json()

    # -------------------------------------------------------------------
    # Members
    # -------------------------------------------------------------------
    async def fetch_member(self, user_id: int) -> dict | None:
        try:
            return await self._get(f"/guilds/{self.cfg.guild_id}/members/{user_id}")
        except httpx.HTTPError as exc:
            logger.warning("Guild member %s lookup failed: %s", user_id, exc)
            return None

    async def is_staff(self, user_id: int) -> bool:
        member = await self.fetch_member(user_id)
        if member is None:
            return False
        return await self._member_is_staff(user_id, member)

    async def _member_is_staff(self, user_id: int, member: dict) -> bool:
        if has_staff_role(member.get("roles", []), self.cfg):
            return True
        if not self.cfg.github_org:
            return False
        github_id = await run_db(get_github_id, self.engine, user_id)
        if github_id is None:
            return False
        return await self.github.is_org_member(self.cfg.github_org, github_id)

    async def github_username(self, user_id: int) -> str:
        try:
            github_id = await run_db(get_github_id, self.engine, user_id)
        except Exception:
            logger.warning("No GitHub account found for user %s", user_id, exc_info=True)
            return ""
        if github_id is None:
            return ""
        return await self.github.fetch_username(github_id)

    async def resolve(self, user_id: int) -> Identity:
        """Full profile for *user_id*; unknown defaults if not a member."""
        member = await self.fetch_member(user_id)
        if member is None:
            return Identity.unknown(user_id)

        user = member.get("user") or {}
        staff = await self._member_is_staff(user_id, member)
        return Identity(
            id=user_id,
            discord_username=user.get("username") or UNKNOWN_USER,
            is_staff=staff,
            github_username=await self.github_username(user_id) if staff else "",
            avatar_url=avatar_url(user_id, user.get("avatar")),
        )

    # -------------------------------------------------------------------
    # Guild
    # -------------------------------------------------------------------
    async def fetch_help_channels(self) -> list[str]:
        """Names of the guild's text channels that are help channels."""
        try:
            channels = await self._get(f"/guilds/{self.cfg.guild_id}/channels")
        except httpx.HTTPError as exc:
            logger.error("Error fetching guild channels %s: %s", self.cfg.guild_id, exc)
            return []
        return [
            ch["name"] for ch in channels
            if ch.get("type") == GUILD_TEXT_CHANNEL and is_help_channel(ch.get("name"), self.cfg)
        ]

    async def fetch_guild_preview(self) -> dict:
        try:
            return await self._get(f"/guilds/{self.cfg.guild_id}/preview")
        except httpx.HTTPError as exc:
            logger.warning("Guild preview %s unavailable: %s", self.cfg.guild_id, exc)
            return {}
