"""
helpline.engine.filters — Dashboard filter pipeline
====================================================

Entry points the dashboard routes call once the user picks channels, a
date range, and a chart granularity.

    categorized questions → channel filter → buckets → time bucket map
    contributors          → deep copy → channel filter → date filter
"""

from __future__ import annotations

import copy
from collections.abc import Collection, Iterable, Mapping
from datetime import datetime

from helpline.engine.buckets import generate_buckets
from helpline.engine.categories import CategoryPartition, TimeBucketMap, bucket_by_time
from helpline.engine.contributors import AnswererProfile
from helpline.engine.records import QuestionRecord, as_utc

__all__ = ["filter_answers", "filter_by_channel", "filter_questions"]


def filter_by_channel(
    channels: Collection[str], questions: Iterable[QuestionRecord]
) -> list[QuestionRecord]:
    allowed = set(channels)
    return [q for q in questions if q.channel_name in allowed]


def filter_questions(
    channels: Collection[str],
    date_range: tuple[datetime, datetime],
    categorized: CategoryPartition,
    unit: str,
    now: datetime | None = None,
) -> TimeBucketMap:
    """Restrict *categorized* to *channels* and bucket it by *unit*.

    Naive datetimes in *date_range* are taken as UTC.
    """
    allowed = set(channels)
    filtered = categorized.restrict(lambda q: q.channel_name in allowed)
    start, end = (as_utc(d) for d in date_range)
    return bucket_by_time(generate_buckets(unit, start, end), filtered, now=now)


def filter_answers(
    channels: Collection[str],
    date_range: tuple[datetime, datetime],
    contributors: Mapping[int, AnswererProfile],
) -> dict[int, AnswererProfile]:
    """Copy of *contributors* with each question list narrowed.

    Questions are kept when their channel is in *channels* and they were
    created in ``[start, end)``.  Every profile stays in the result, even
    if its list ends up empty.  *contributors* itself is left untouched.
    Naive bounds are taken as UTC.
    """
    start, end = (as_utc(d) for d in date_range)
    filtered = copy.deepcopy(dict(contributors))
    for profile in filtered.values():
        profile.questions = filter_by_channel(channels, profile.questions)
        profile.questions = [q for q in profile.questions if start <= q.created_at < end]
    return filtered
