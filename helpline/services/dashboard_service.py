"""
helpline.services.dashboard_service — Dashboard snapshot
=========================================================

Loads every tracked question, resolves each distinct answerer once, and
produces the categorized questions and contributor map the dashboard
routes filter per request.  External failures (Discord, GitHub) degrade
to partial data; the snapshot is always built.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field

from sqlalchemy import Engine

from helpline.database.engine import run_db
from helpline.engine.categories import CategoryPartition, partition_by_category
from helpline.engine.contributors import AnswererProfile
from helpline.engine.records import QuestionRecord
from helpline.services.contributor_service import resolve_contributors, resolve_identities
from helpline.services.identity_service import IdentityResolver
from helpline.services.question_service import list_questions

logger = logging.getLogger(__name__)


@dataclass
class DashboardSnapshot:
    """Everything the dashboard endpoints slice and count."""

    guild_name: str | None = None
    member_count: int | None = None
    presence_count: int | None = None
    channels: list[str] = field(default_factory=list)
    questions: CategoryPartition = field(default_factory=CategoryPartition)
    contributors: dict[int, AnswererProfile] = field(default_factory=dict)


def answered_questions(questions: list[QuestionRecord]) -> list[QuestionRecord]:
    """Questions that are solved *and* have an answer owner."""
    return [q for q in questions if q.answerer_id is not None]


async def build_snapshot(engine: Engine, resolver: IdentityResolver) -> DashboardSnapshot:
    started = time.perf_counter()
    questions, channels, preview = await asyncio.gather(
        run_db(list_questions, engine, resolver.cfg.guild_id),
        resolver.fetch_help_channels(),
        resolver.fetch_guild_preview(),
    )

    answered = answered_questions(questions)
    identities = await resolve_identities(
        (q.answerer_id for q in answered), resolver
    )
    staff_lookup = {user_id: identity.is_staff for user_id, identity in identities.items()}

    snapshot = DashboardSnapshot(
        guild_name=preview.get("name"),
        member_count=preview.get("approximate_member_count"),
        presence_count=preview.get("approximate_presence_count"),
        channels=channels,
        questions=partition_by_category(questions, staff_lookup),
        contributors=await resolve_contributors(answered, resolver, identities=identities),
    )
    logger.info(
        "Dashboard snapshot: %d questions, %d contributors, %d help channels (%.2fs)",
        len(questions), len(snapshot.contributors), len(channels),
        time.perf_counter() - started,
    )
    return snapshot
