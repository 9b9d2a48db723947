"""
helpline.engine.categories — Category partition & time bucketing
=================================================================

Splits questions into four fixed categories and spreads each category
over chart buckets.

Categories:
  total       every question, regardless of state
  unanswered  not solved yet
  staff       solved by an answer from a staff/admin identity
  community   solved by anyone else (including unresolved identities)

A solved question with no answer link lands only in ``total``.

The result of :func:`bucket_by_time` is a *time bucket map*: an ordered
``dict`` whose first key is ``"aggregate"`` (the whole range) followed by
one entry per bucket, keyed by the bucket start in ISO-8601.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from helpline.constants import AGGREGATE_KEY
from helpline.engine.records import QuestionRecord, as_utc

__all__ = [
    "Category",
    "CategoryPartition",
    "TimeBucketMap",
    "bucket_by_time",
    "bucket_counts",
    "classify_question",
    "partition_by_category",
]


class Category(enum.StrEnum):
    TOTAL = "total"
    UNANSWERED = "unanswered"
    STAFF = "staff"
    COMMUNITY = "community"


# ---------------------------------------------------------------------------
# CategoryPartition — list-valued; counts are derived
# ---------------------------------------------------------------------------
@dataclass
class CategoryPartition:
    """Questions grouped by :class:`Category`."""

    total: list[QuestionRecord] = field(default_factory=list)
    unanswered: list[QuestionRecord] = field(default_factory=list)
    staff: list[QuestionRecord] = field(default_factory=list)
    community: list[QuestionRecord] = field(default_factory=list)

    def get(self, category: str) -> list[QuestionRecord]:
        return getattr(self, Category(category).value)

    def count(self, category: str) -> int:
        return len(self.get(category))

    def counts(self) -> dict[str, int]:
        return {c.value: self.count(c) for c in Category}

    def restrict(self, predicate: Callable[[QuestionRecord], bool]) -> CategoryPartition:
        """New partition keeping only questions that satisfy *predicate*."""
        return CategoryPartition(
            **{c.value: [q for q in self.get(c) if predicate(q)] for c in Category}
        )

    def merged(self, other: CategoryPartition) -> CategoryPartition:
        """New partition with *other*'s questions appended slot by slot."""
        return CategoryPartition(
            **{c.value: self.get(c) + other.get(c) for c in Category}
        )


TimeBucketMap = dict[str, CategoryPartition]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------
def classify_question(
    question: QuestionRecord, staff_lookup: Mapping[int, bool]
) -> Category | None:
    """Category for a single question, besides ``total``.

    *staff_lookup* maps answerer ids to the result of the external
    staff-membership check.  Missing ids count as community.  Returns
    ``None`` for a solved question without an answer owner.
    """
    if not question.is_solved:
        return Category.UNANSWERED
    answerer = question.answerer_id
    if answerer is None:
        return None
    return Category.STAFF if staff_lookup.get(answerer, False) else Category.COMMUNITY


def partition_by_category(
    questions: Iterable[QuestionRecord], staff_lookup: Mapping[int, bool]
) -> CategoryPartition:
    partition = CategoryPartition()
    for question in questions:
        partition.total.append(question)
        category = classify_question(question, staff_lookup)
        if category is not None:
            partition.get(category).append(question)
    return partition


# ---------------------------------------------------------------------------
# Time bucketing
# ---------------------------------------------------------------------------
def _between(lower: datetime, upper: datetime) -> Callable[[QuestionRecord], bool]:
    return lambda q: lower <= q.created_at < upper


def bucket_by_time(
    buckets: Sequence[datetime],
    partition: CategoryPartition,
    now: datetime | None = None,
) -> TimeBucketMap:
    """Spread *partition* over the half-open intervals between *buckets*.

    Bucket ``i`` covers ``[buckets[i], buckets[i + 1])``; the last bucket
    runs up to *now* (wall clock when omitted).  The ``"aggregate"`` entry
    is folded from the per-bucket results, so it holds exactly the
    questions that fell into some bucket.

    Naive bucket starts and *now* are taken as UTC, like question times.
    """
    now = as_utc(now) if now is not None else datetime.now(UTC)
    starts = [as_utc(b) for b in buckets]

    bounds = list(zip(starts, [*starts[1:], now]))
    aggregate = CategoryPartition()
    per_bucket: list[tuple[str, CategoryPartition]] = []
    for lower, upper in bounds:
        sliced = partition.restrict(_between(lower, upper))
        per_bucket.append((lower.isoformat(), sliced))
        aggregate = aggregate.merged(sliced)

    return {AGGREGATE_KEY: aggregate, **dict(per_bucket)}


def bucket_counts(bucket_map: Mapping[str, CategoryPartition]) -> dict[str, dict[str, int]]:
    """Count view of a time bucket map, for charting."""
    return {key: partition.counts() for key, partition in bucket_map.items()}
