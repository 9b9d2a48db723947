"""
helpline.bot.cogs.admin — Admin Slash Commands
===============================================

- /admin thread-create — copy the current help thread to GitHub
  Discussions in one of the configured repositories.

Only members with the configured admin_role_id may use it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from helpline.bot.cogs.questions import in_help_thread
from helpline.config import HelplineConfig
from helpline.services.github_service import GitHubClient
from helpline.services.identity_service import has_admin_role

if TYPE_CHECKING:
    from helpline.bot.core import HelplineBot

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


def _notice(text: str) -> discord.Embed:
    return discord.Embed(description=text, color=discord.Color.orange())


def thread_create_rejection(
    channel: object, user: object, repository: str, cfg: HelplineConfig
) -> discord.Embed | None:
    """Why /admin thread-create can't run here, or ``None`` if it can."""
    if not in_help_thread(channel, cfg):
        return _notice("This command only works in public threads within help channels.")
    if not has_admin_role((r.id for r in getattr(user, "roles", [])), cfg):
        return _notice("This command can only be used by admins.")
    if repository not in cfg.discussion_repositories:
        return _notice(f"`{repository}` is not a configured discussion repository.")
    return None


def discussion_body(thread: discord.Thread, messages: list[discord.Message]) -> str:
    """Markdown transcript of a help thread, oldest message first."""
    parts = [f"_Posted from the [Discord thread]({thread.jump_url}) in #{thread.parent.name}._"]
    for message in messages:
        if message.author.bot or not message.content:
            continue
        parts.append(f"**{message.author.display_name}**: {message.content}")
    return "\n\n".join(parts)


async def post_thread_discussion(
    thread: discord.Thread, repository: str, cfg: HelplineConfig, github: GitHubClient
) -> discord.Embed:
    messages = [m async for m in thread.history(limit=HISTORY_LIMIT, oldest_first=True)]
    url = await github.create_discussion(
        repository, thread.name, discussion_body(thread, messages), cfg.discussion_category
    )
    if url is None:
        return discord.Embed(
            description=f"Couldn't create a discussion in `{repository}`. Please try again later.",
            color=discord.Color.red(),
        )
    logger.info("Thread %s posted to %s as %s", thread.id, repository, url)
    return discord.Embed(
        title="✅ Discussion created",
        description=f"[View on GitHub]({url})",
        color=discord.Color.green(),
    )


class Admin(commands.GroupCog, group_name="admin", group_description="Admin commands"):
    """Admin-only commands."""

    def __init__(self, bot: HelplineBot, github: GitHubClient | None = None) -> None:
        self.bot = bot
        self.github = github or GitHubClient()

    async def cog_unload(self) -> None:
        await self.github.aclose()

    # -------------------------------------------------------------------
    # /admin thread-create
    # -------------------------------------------------------------------
    @app_commands.command(name="thread-create", description="Post a thread to GitHub Discussions")
    @app_commands.describe(repository="The GitHub repository to post to")
    async def thread_create(self, interaction: discord.Interaction, repository: str) -> None:
        rejection = thread_create_rejection(
            interaction.channel, interaction.user, repository, self.bot.cfg
        )
        if rejection is not None:
            await interaction.response.send_message(embed=rejection, ephemeral=True)
            return

        await interaction.response.defer(thinking=True)
        embed = await post_thread_discussion(
            interaction.channel, repository, self.bot.cfg, self.github
        )
        await interaction.followup.send(embed=embed)

    @thread_create.autocomplete("repository")
    async def _repository_autocomplete(
        self, interaction: discord.Interaction, current: str,
    ) -> list[app_commands.Choice[str]]:
        choices = [
            app_commands.Choice(name=r, value=r)
            for r in self.bot.cfg.discussion_repositories
            if current.lower() in r.lower()
        ]
        return choices[:25]  # Discord caps at 25


async def setup(bot: HelplineBot) -> None:
    await bot.add_cog(Admin(bot))
