"""
helpline.bot.cogs.questions — Help Thread Tracking
===================================================

- Every new thread in a help channel is recorded as a question.
- "Mark as Answer" (message context menu) selects a reply as the thread's
  answer.  Only the thread owner or staff may use it.
- /top-helpers shows the contributor leaderboard.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from helpline.config import HelplineConfig
from helpline.constants import RANK_BADGES
from helpline.database.engine import run_db
from helpline.engine.contributors import (
    Identity,
    build_profiles,
    group_by_answerer,
    rank_top_contributors,
)
from helpline.services.identity_service import has_staff_role, is_help_channel
from helpline.services.question_service import (
    QuestionNotFound,
    list_questions,
    mark_answered,
    record_question,
)

if TYPE_CHECKING:
    from helpline.bot.core import HelplineBot

logger = logging.getLogger(__name__)


def in_help_thread(channel: object, cfg: HelplineConfig) -> bool:
    if not isinstance(channel, discord.Thread) or channel.parent is None:
        return False
    return is_help_channel(channel.parent.name, cfg)


def can_mark_answer(user: discord.abc.User, thread: discord.Thread, cfg: HelplineConfig) -> bool:
    """Thread owners and staff may select an answer."""
    if user.id == thread.owner_id:
        return True
    roles = getattr(user, "roles", [])
    return has_staff_role((r.id for r in roles), cfg)


def identities_from_guild(
    guild: discord.Guild | None, user_ids: Iterable[int], cfg: HelplineConfig
) -> dict[int, Identity]:
    """Resolve answerers from the gateway member cache.

    Members who left (or aren't cached) get unknown defaults.
    """
    identities: dict[int, Identity] = {}
    for user_id in user_ids:
        member = guild.get_member(user_id) if guild else None
        if member is None:
            identities[user_id] = Identity.unknown(user_id)
            continue
        identities[user_id] = Identity(
            id=user_id,
            discord_username=member.name,
            is_staff=has_staff_role((r.id for r in member.roles), cfg),
            avatar_url=member.display_avatar.url,
        )
    return identities


class Questions(commands.Cog, name="Questions"):
    """Tracks help threads and their answers."""

    def __init__(self, bot: HelplineBot) -> None:
        self.bot = bot
        self.mark_answer_menu = app_commands.ContextMenu(
            name="Mark as Answer",
            callback=self.mark_answer,
        )
        self.bot.tree.add_command(self.mark_answer_menu)

    async def cog_unload(self) -> None:
        self.bot.tree.remove_command(
            self.mark_answer_menu.name, type=self.mark_answer_menu.type
        )

    # -------------------------------------------------------------------
    # Thread creation
    # -------------------------------------------------------------------
    @commands.Cog.listener()
    async def on_thread_create(self, thread: discord.Thread) -> None:
        try:
            await self._handle_thread_create(thread)
        except Exception:
            logger.exception("Error recording help thread %s", thread.id)

    async def _handle_thread_create(self, thread: discord.Thread) -> None:
        if thread.guild is None or not in_help_thread(thread, self.bot.cfg):
            return
        if thread.owner is not None and thread.owner.bot:
            return
        await self._record(thread)

    async def _record(self, thread: discord.Thread) -> bool:
        owner = thread.owner
        return await run_db(
            record_question,
            self.bot.engine,
            thread_id=thread.id,
            guild_id=thread.guild.id,
            owner_id=thread.owner_id,
            owner_name=owner.display_name if owner else str(thread.owner_id),
            channel_name=thread.parent.name,
            title=thread.name,
            url=thread.jump_url,
            created_at=thread.created_at,
        )

    # -------------------------------------------------------------------
    # Mark as Answer
    # -------------------------------------------------------------------
    async def mark_answer(self, interaction: discord.Interaction, message: discord.Message) -> None:
        thread = interaction.channel
        if not in_help_thread(thread, self.bot.cfg):
            embed = discord.Embed(
                description="This command only works in threads within help channels.",
                color=discord.Color.orange(),
            )
            await interaction.response.send_message(embed=embed, ephemeral=True)
            return

        if not can_mark_answer(interaction.user, thread, self.bot.cfg):
            embed = discord.Embed(
                description="Only the question author or staff can select an answer.",
                color=discord.Color.orange(),
            )
            await interaction.response.send_message(embed=embed, ephemeral=True)
            return

        answer = dict(
            question_id=thread.id,
            message_id=message.id,
            owner_id=message.author.id,
            owner_name=message.author.display_name,
            content=message.content,
            selected_by=interaction.user.id,
            created_at=message.created_at,
        )
        try:
            await self._save_answer(thread, answer)
        except Exception:
            logger.exception("Error saving message %s as the answer in thread %s", message.id, thread.id)
            embed = discord.Embed(
                description="Something went wrong saving that answer. Please try again.",
                color=discord.Color.red(),
            )
            await interaction.response.send_message(embed=embed, ephemeral=True)
            return

        embed = discord.Embed(
            title="✅ Answer selected",
            description=f"[Jump to the answer]({message.jump_url}) from {message.author.mention}",
            color=discord.Color.green(),
        )
        await interaction.response.send_message(embed=embed)

    async def _save_answer(self, thread: discord.Thread, answer: dict) -> None:
        try:
            await run_db(mark_answered, self.bot.engine, **answer)
        except QuestionNotFound:
            # Thread predates the bot; track it now.
            await self._record(thread)
            await run_db(mark_answered, self.bot.engine, **answer)

    # -------------------------------------------------------------------
    # /top-helpers
    # -------------------------------------------------------------------
    @commands.hybrid_command(  # type: ignore[arg-type]
        name="top-helpers",
        description="Members who answered the most help questions.",
    )
    @app_commands.describe(staff_only="Only rank staff members")
    async def top_helpers(self, ctx: commands.Context, staff_only: bool = False) -> None:
        questions = await run_db(list_questions, self.bot.engine, self.bot.cfg.guild_id)
        grouped = group_by_answerer(questions)
        profiles = build_profiles(
            grouped, identities_from_guild(ctx.guild, grouped, self.bot.cfg)
        )
        entries = rank_top_contributors(profiles, staff_only=staff_only)

        if not entries:
            await ctx.send("No answered questions yet.", ephemeral=True)
            return

        lines = []
        for i, entry in enumerate(entries):
            badge = RANK_BADGES[i] if i < len(RANK_BADGES) else f"**{i + 1}.**"
            noun = "answer" if entry.answer_count == 1 else "answers"
            lines.append(f"{badge} {entry.name} — {entry.answer_count} {noun}")

        embed = discord.Embed(
            title="\U0001f64c Top Staff Helpers" if staff_only else "\U0001f64c Top Helpers",
            description="\n".join(lines),
            color=discord.Color.blurple(),
        )
        embed.set_footer(text=self.bot.cfg.community_name)
        await ctx.send(embed=embed)


async def setup(bot: HelplineBot) -> None:
    await bot.add_cog(Questions(bot))
