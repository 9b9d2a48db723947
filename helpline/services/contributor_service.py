"""
helpline.services.contributor_service — Contributor resolution
===============================================================

Two stages:

1. :func:`~helpline.engine.contributors.group_by_answerer` — a pure fold
   over answered questions.
2. Resolve each distinct answerer exactly once, a few at a time.  A lookup
   that raises degrades that answerer to unknown defaults; the rest of the
   pass carries on.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Protocol

from helpline.engine.contributors import (
    AnswererProfile,
    Identity,
    build_profiles,
    group_by_answerer,
)
from helpline.engine.records import QuestionRecord

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5


class Resolver(Protocol):
    async def resolve(self, user_id: int) -> Identity: ...


async def resolve_identities(
    user_ids: Iterable[int],
    resolver: Resolver,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> dict[int, Identity]:
    """Resolve every id in *user_ids* (once each), keeping their order."""
    semaphore = asyncio.Semaphore(max(concurrency, 1))

    async def _one(user_id: int) -> Identity:
        async with semaphore:
            try:
                return await resolver.resolve(user_id)
            except Exception:
                logger.warning("Could not resolve user %s; using defaults", user_id, exc_info=True)
                return Identity.unknown(user_id)

    ids = list(dict.fromkeys(user_ids))
    resolved = await asyncio.gather(*(_one(user_id) for user_id in ids))
    return dict(zip(ids, resolved))


async def resolve_contributors(
    answered: Iterable[QuestionRecord],
    resolver: Resolver,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    identities: dict[int, Identity] | None = None,
) -> dict[int, AnswererProfile]:
    """Map each answerer to their profile and answered questions.

    Profiles are ordered by the answerer's first appearance in *answered*.
    Pass *identities* to reuse lookups already made; only the missing ids
    are resolved.
    """
    grouped = group_by_answerer(answered)
    known = dict(identities or {})
    missing = [user_id for user_id in grouped if user_id not in known]
    if missing:
        known.update(await resolve_identities(missing, resolver, concurrency=concurrency))
    return build_profiles(grouped, known)
