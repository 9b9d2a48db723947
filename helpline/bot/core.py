"""
helpline.bot.core — Bot Instance & Cog Loader
==============================================

Defines :class:`HelplineBot`, a ``commands.Bot`` subclass that:

1. Stores the shared config (``bot.cfg``) and DB engine (``bot.engine``)
   so every Cog can reach them via ``self.bot.cfg`` / ``self.bot.engine``.
2. Loads every Cog listed in :data:`EXTENSIONS`.
3. Syncs the slash-command tree on startup (guild-scoped for dev, global
   for production — controlled by the ``DEV_GUILD_ID`` env var).
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands
from sqlalchemy import Engine

from helpline.config import HelplineConfig

logger = logging.getLogger(__name__)

EXTENSIONS: list[str] = [
    "helpline.bot.cogs.questions",
    "helpline.bot.cogs.admin",
]


class HelplineBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`HelplineConfig` from ``config.yaml``.
    engine:
        A SQLAlchemy :class:`Engine` connected to PostgreSQL.
    """

    def __init__(self, cfg: HelplineConfig, engine: Engine) -> None:
        intents = discord.Intents.default()
        intents.message_content = True    # Privileged: answer content is stored
        intents.members = True            # Privileged: role lookups for staff checks
        intents.presences = False

        super().__init__(
            command_prefix=cfg.bot_prefix,
            intents=intents,
            description=f"{cfg.community_name} help desk",
        )

        self.cfg = cfg
        self.engine = engine

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all Cog extensions; one broken Cog shouldn't stop the bot."""
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

        dev_guild_id = os.getenv("DEV_GUILD_ID")
        if dev_guild_id:
            guild = discord.Object(id=int(dev_guild_id))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
        else:
            synced = await self.tree.sync()
            logger.info("Synced %d commands globally", len(synced))
