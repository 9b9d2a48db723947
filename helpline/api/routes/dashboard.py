"""
helpline.api.routes.dashboard — Read-only dashboard endpoints
==============================================================

All endpoints slice the same :class:`DashboardSnapshot`.  Channel filters
default to every help channel and the date range to the last 30 days.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status

from helpline.api.deps import get_snapshot
from helpline.constants import AGGREGATE_KEY, DEFAULT_RANGE_DAYS
from helpline.engine.categories import bucket_counts
from helpline.engine.contributors import AnswererProfile, rank_top_contributors
from helpline.engine.dates import Granularity
from helpline.engine.filters import filter_answers, filter_questions
from helpline.services.dashboard_service import DashboardSnapshot

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

_TICK = timedelta(microseconds=1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _date_range(start: date | None, end: date | None) -> tuple[datetime, datetime]:
    """Resolve query dates to a half-open UTC range ``[start, end)``.

    *end* is inclusive as a date: the returned bound is the following
    midnight, so questions from that whole day are in range.  Without
    *end* the range stops now.
    """
    end_dt = (
        datetime.combine(end, time.min, tzinfo=UTC) + timedelta(days=1)
        if end else datetime.now(UTC)
    )
    start_dt = (
        datetime.combine(start, time.min, tzinfo=UTC)
        if start else end_dt - timedelta(days=DEFAULT_RANGE_DAYS)
    )
    if start_dt > end_dt:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "start must not be after end")
    return start_dt, end_dt


def _entries(profiles: dict[int, AnswererProfile], staff_only: bool = False) -> list[dict]:
    return [
        {"id": str(e.id), "name": e.name, "answer_count": e.answer_count}
        for e in rank_top_contributors(profiles, staff_only=staff_only)
    ]


# ---------------------------------------------------------------------------
# GET /dashboard
# ---------------------------------------------------------------------------
@router.get("")
def get_overview(snapshot: DashboardSnapshot = Depends(get_snapshot)):
    """Guild info, help channels, all-time counts, and leaderboards."""
    return {
        "name": snapshot.guild_name,
        "member_count": snapshot.member_count,
        "presence_count": snapshot.presence_count,
        "channels": snapshot.channels,
        "counts": snapshot.questions.counts(),
        "top_contributors": _entries(snapshot.contributors),
        "top_staff": _entries(snapshot.contributors, staff_only=True),
    }


# ---------------------------------------------------------------------------
# GET /dashboard/questions
# ---------------------------------------------------------------------------
@router.get("/questions")
def get_question_stats(
    unit: str = Query(Granularity.WEEKS.value),
    start: date | None = Query(None),
    end: date | None = Query(None),
    channel: list[str] | None = Query(None),
    snapshot: DashboardSnapshot = Depends(get_snapshot),
):
    """Question counts per category, bucketed by *unit*."""
    if unit not in {g.value for g in Granularity}:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            f"unit must be one of: {', '.join(g.value for g in Granularity)}",
        )
    channels = channel or snapshot.channels
    start_dt, end_dt = _date_range(start, end)
    # Buckets start inside the range; the last one is cut at the range end
    # so the counts match /contributors for the same query.
    buckets = bucket_counts(
        filter_questions(
            channels,
            (start_dt, end_dt - _TICK),
            snapshot.questions,
            unit,
            now=min(end_dt, datetime.now(UTC)),
        )
    )
    return {
        "unit": unit,
        "channels": channels,
        "aggregate": buckets.pop(AGGREGATE_KEY),
        "buckets": [{"start": key, **counts} for key, counts in buckets.items()],
    }


# ---------------------------------------------------------------------------
# GET /dashboard/contributors
# ---------------------------------------------------------------------------
@router.get("/contributors")
def get_contributors(
    start: date | None = Query(None),
    end: date | None = Query(None),
    channel: list[str] | None = Query(None),
    staff_only: bool = Query(False),
    snapshot: DashboardSnapshot = Depends(get_snapshot),
):
    """Leaderboard for questions answered in the chosen channels and range."""
    channels = channel or snapshot.channels
    filtered = filter_answers(channels, _date_range(start, end), snapshot.contributors)
    return {
        "channels": channels,
        "leaderboard": _entries(filtered, staff_only=staff_only),
        "contributors": [
            {
                "id": str(p.id),
                "discord_username": p.discord_username,
                "github_username": p.github_username,
                "is_staff": p.is_staff,
                "avatar_url": p.avatar_url,
                "answer_count": p.answer_count,
            }
            for p in filtered.values()
        ],
    }
