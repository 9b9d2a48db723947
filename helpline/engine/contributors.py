"""
helpline.engine.contributors — Answerer grouping & leaderboard
===============================================================

Pure half of contributor attribution.  Grouping answered questions by
answerer and ranking the result need no I/O; resolving who each answerer
*is* lives in :mod:`helpline.services.contributor_service`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from helpline.constants import LEADERBOARD_SIZE, UNKNOWN_USER, avatar_url
from helpline.engine.records import QuestionRecord

__all__ = [
    "AnswererProfile",
    "Identity",
    "LeaderboardEntry",
    "build_profiles",
    "group_by_answerer",
    "rank_top_contributors",
]


@dataclass(frozen=True, slots=True)
class Identity:
    """Resolved profile fields for one Discord user."""

    id: int
    discord_username: str = UNKNOWN_USER
    is_staff: bool = False
    github_username: str = ""
    avatar_url: str = ""

    @classmethod
    def unknown(cls, user_id: int) -> Identity:
        """Safe defaults used when resolution fails."""
        return cls(id=user_id, avatar_url=avatar_url(user_id))


@dataclass
class AnswererProfile:
    """A contributor and the questions they answered."""

    id: int
    discord_username: str
    github_username: str
    is_staff: bool
    avatar_url: str = ""
    questions: list[QuestionRecord] = field(default_factory=list)

    @property
    def answer_count(self) -> int:
        return len(self.questions)

    @classmethod
    def from_identity(
        cls, identity: Identity, questions: Iterable[QuestionRecord] = ()
    ) -> AnswererProfile:
        return cls(
            id=identity.id,
            discord_username=identity.discord_username,
            github_username=identity.github_username,
            is_staff=identity.is_staff,
            avatar_url=identity.avatar_url,
            questions=list(questions),
        )


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    id: int
    name: str
    answer_count: int


def group_by_answerer(answered: Iterable[QuestionRecord]) -> dict[int, list[QuestionRecord]]:
    """Group questions by answer owner.

    Keys follow first appearance; each list keeps input order.  Questions
    without an answer owner are skipped.
    """
    grouped: dict[int, list[QuestionRecord]] = {}
    for question in answered:
        owner = question.answerer_id
        if owner is None:
            continue
        grouped.setdefault(owner, []).append(question)
    return grouped


def build_profiles(
    grouped: Mapping[int, list[QuestionRecord]],
    identities: Mapping[int, Identity],
) -> dict[int, AnswererProfile]:
    """Attach resolved identities to grouped questions.

    An answerer missing from *identities* gets :meth:`Identity.unknown`.
    """
    return {
        user_id: AnswererProfile.from_identity(
            identities.get(user_id) or Identity.unknown(user_id), questions
        )
        for user_id, questions in grouped.items()
    }


def rank_top_contributors(
    profiles: Mapping[int, AnswererProfile],
    staff_only: bool = False,
    limit: int = LEADERBOARD_SIZE,
) -> list[LeaderboardEntry]:
    """Top answerers by answer count, most first.

    ``sorted`` is stable, so ties keep the profiles' insertion order.
    """
    candidates = [p for p in profiles.values() if p.is_staff or not staff_only]
    ranked = sorted(candidates, key=lambda p: p.answer_count, reverse=True)
    return [
        LeaderboardEntry(id=p.id, name=p.discord_username, answer_count=p.answer_count)
        for p in ranked[:limit]
    ]
