"""
tests/test_contributors.py — Contributor grouping, resolution & ranking
========================================================================
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from conftest import make_question, run_async
from helpline.constants import LEADERBOARD_SIZE, UNKNOWN_USER
from helpline.engine.contributors import (
    AnswererProfile,
    Identity,
    build_profiles,
    group_by_answerer,
    rank_top_contributors,
)
from helpline.services.contributor_service import resolve_contributors, resolve_identities


class StubResolver:
    """Deterministic resolver that records every lookup."""

    def __init__(self, staff: set[int] = frozenset(), failing: set[int] = frozenset()):
        self.staff = staff
        self.failing = failing
        self.calls: list[int] = []

    async def resolve(self, user_id: int) -> Identity:
        self.calls.append(user_id)
        if user_id in self.failing:
            raise RuntimeError(f"lookup for {user_id} exploded")
        staff = user_id in self.staff
        return Identity(
            id=user_id,
            discord_username=f"user{user_id}",
            is_staff=staff,
            github_username=f"gh{user_id}" if staff else "",
            avatar_url=f"https://cdn.example/{user_id}.png",
        )


def _profile(user_id: int, answers: int, staff: bool = False) -> AnswererProfile:
    return AnswererProfile(
        id=user_id,
        discord_username=f"user{user_id}",
        github_username="",
        is_staff=staff,
        questions=[make_question(user_id * 100 + i, solved=True, answerer=user_id) for i in range(answers)],
    )


# ---------------------------------------------------------------------------
# group_by_answerer / build_profiles
# ---------------------------------------------------------------------------
class TestGrouping:
    def test_groups_in_first_appearance_order(self):
        qs = [
            make_question(1, solved=True, answerer=20),
            make_question(2, solved=True, answerer=10),
            make_question(3, solved=True, answerer=20),
        ]
        grouped = group_by_answerer(qs)
        assert list(grouped) == [20, 10]
        assert grouped[20] == [qs[0], qs[2]]

    def test_skips_questions_without_answer_owner(self):
        qs = [make_question(1, solved=True), make_question(2, solved=False, answerer=7)]
        assert group_by_answerer(qs) == {}

    def test_missing_identity_gets_defaults(self):
        grouped = {5: [make_question(1, solved=True, answerer=5)]}
        profile = build_profiles(grouped, {})[5]
        assert profile.discord_username == UNKNOWN_USER
        assert profile.is_staff is False
        assert profile.github_username == ""
        assert profile.answer_count == 1


# ---------------------------------------------------------------------------
# resolve_contributors
# ---------------------------------------------------------------------------
class TestResolveContributors:
    def test_same_answerer_twice_gives_one_profile(self):
        qs = [
            make_question(1, solved=True, answerer=42),
            make_question(2, solved=True, answerer=42),
        ]
        profiles = run_async(resolve_contributors(qs, StubResolver()))
        assert list(profiles) == [42]
        assert profiles[42].questions == qs

    def test_each_identity_resolved_once(self):
        qs = [make_question(i, solved=True, answerer=i % 3) for i in range(1, 10)]
        resolver = StubResolver()
        run_async(resolve_contributors(qs, resolver))
        assert sorted(resolver.calls) == [0, 1, 2]

    def test_order_follows_first_appearance(self):
        qs = [
            make_question(1, solved=True, answerer=3),
            make_question(2, solved=True, answerer=1),
            make_question(3, solved=True, answerer=2),
            make_question(4, solved=True, answerer=1),
        ]
        profiles = run_async(resolve_contributors(qs, StubResolver()))
        assert list(profiles) == [3, 1, 2]

    def test_failed_lookup_degrades_and_continues(self):
        qs = [
            make_question(1, solved=True, answerer=1),
            make_question(2, solved=True, answerer=2),
        ]
        profiles = run_async(resolve_contributors(qs, StubResolver(staff={2}, failing={1})))
        assert profiles[1].discord_username == UNKNOWN_USER
        assert profiles[1].is_staff is False
        assert profiles[1].github_username == ""
        assert profiles[2].discord_username == "user2"
        assert profiles[2].github_username == "gh2"

    def test_deterministic(self):
        qs = [make_question(i, solved=True, answerer=i % 4) for i in range(1, 20)]
        first = run_async(resolve_contributors(qs, StubResolver(staff={1})))
        second = run_async(resolve_contributors(qs, StubResolver(staff={1})))
        assert first == second

    def test_known_identities_are_not_looked_up_again(self):
        qs = [
            make_question(1, solved=True, answerer=1),
            make_question(2, solved=True, answerer=2),
        ]
        resolver = StubResolver()
        known = {1: Identity(id=1, discord_username="cached")}
        profiles = run_async(resolve_contributors(qs, resolver, identities=known))
        assert resolver.calls == [2]
        assert profiles[1].discord_username == "cached"

    def test_resolve_identities_deduplicates(self):
        resolver = AsyncMock()
        resolver.resolve.side_effect = lambda uid: Identity(id=uid)
        result = run_async(resolve_identities([5, 5, 6], resolver, concurrency=1))
        assert list(result) == [5, 6]
        assert resolver.resolve.await_count == 2


# ---------------------------------------------------------------------------
# rank_top_contributors
# ---------------------------------------------------------------------------
class TestRanking:
    def test_sorted_by_answer_count(self):
        profiles = {p.id: p for p in [_profile(1, 2), _profile(2, 5), _profile(3, 3)]}
        ranked = rank_top_contributors(profiles)
        assert [e.id for e in ranked] == [2, 3, 1]
        assert [e.answer_count for e in ranked] == [5, 3, 2]
        assert ranked[0].name == "user2"

    def test_ties_keep_insertion_order(self):
        profiles = {p.id: p for p in [_profile(7, 1), _profile(3, 2), _profile(5, 1)]}
        assert [e.id for e in rank_top_contributors(profiles)] == [3, 7, 5]

    def test_at_most_nine(self):
        profiles = {i: _profile(i, i) for i in range(1, 15)}
        ranked = rank_top_contributors(profiles)
        assert len(ranked) == LEADERBOARD_SIZE == 9
        assert ranked[0].id == 14

    def test_staff_only(self):
        profiles = {p.id: p for p in [_profile(1, 9), _profile(2, 1, staff=True)]}
        assert [e.id for e in rank_top_contributors(profiles, staff_only=True)] == [2]

    @pytest.mark.parametrize("staff_only", [False, True])
    def test_empty(self, staff_only):
        assert rank_top_contributors({}, staff_only=staff_only) == []
