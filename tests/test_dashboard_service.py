"""
tests/test_dashboard_service.py — Snapshot assembly
====================================================
"""

from __future__ import annotations

from conftest import GUILD_ID, run_async, utc
from helpline.constants import UNKNOWN_USER
from helpline.engine.contributors import Identity
from helpline.services.dashboard_service import answered_questions, build_snapshot
from helpline.services.question_service import list_questions, mark_answered, record_question

STAFF_USER = 10
COMMUNITY_USER = 20
BROKEN_USER = 30


class FakeResolver:
    def __init__(self, cfg, channels=None, preview=None):
        self.cfg = cfg
        self.channels = channels if channels is not None else ["cli-help"]
        self.preview = preview if preview is not None else {
            "name": "Test Community",
            "approximate_member_count": 50,
            "approximate_presence_count": 5,
        }
        self.calls: list[int] = []

    async def fetch_help_channels(self):
        return self.channels

    async def fetch_guild_preview(self):
        return self.preview

    async def resolve(self, user_id: int) -> Identity:
        self.calls.append(user_id)
        if user_id == BROKEN_USER:
            raise ConnectionError("discord unreachable")
        return Identity(
            id=user_id,
            discord_username=f"user{user_id}",
            is_staff=user_id == STAFF_USER,
        )


def _seed(engine):
    rows = [
        (1, None),
        (2, STAFF_USER),
        (3, COMMUNITY_USER),
        (4, STAFF_USER),
        (5, BROKEN_USER),
    ]
    for thread_id, answerer in rows:
        record_question(
            engine, thread_id=thread_id, guild_id=GUILD_ID, owner_id=99,
            owner_name="asker", channel_name="cli-help", title=f"q{thread_id}",
            created_at=utc(2022, 1, thread_id),
        )
        if answerer is not None:
            mark_answered(
                engine, question_id=thread_id, message_id=thread_id * 10,
                owner_id=answerer, owner_name=f"user{answerer}", content="answer",
                selected_by=99,
            )


class TestBuildSnapshot:
    def test_counts_and_contributors(self, cfg, db_engine):
        _seed(db_engine)
        resolver = FakeResolver(cfg)
        snapshot = run_async(build_snapshot(db_engine, resolver))

        assert snapshot.guild_name == "Test Community"
        assert snapshot.member_count == 50
        assert snapshot.channels == ["cli-help"]
        assert snapshot.questions.counts() == {
            "total": 5, "unanswered": 1, "staff": 2, "community": 2,
        }
        assert list(snapshot.contributors) == [STAFF_USER, COMMUNITY_USER, BROKEN_USER]
        assert snapshot.contributors[STAFF_USER].answer_count == 2

    def test_each_answerer_resolved_once(self, cfg, db_engine):
        _seed(db_engine)
        resolver = FakeResolver(cfg)
        run_async(build_snapshot(db_engine, resolver))
        assert sorted(resolver.calls) == [STAFF_USER, COMMUNITY_USER, BROKEN_USER]

    def test_failed_lookup_counts_as_community(self, cfg, db_engine):
        _seed(db_engine)
        snapshot = run_async(build_snapshot(db_engine, FakeResolver(cfg)))
        broken = snapshot.contributors[BROKEN_USER]
        assert broken.discord_username == UNKNOWN_USER
        assert broken.is_staff is False
        assert [q.id for q in snapshot.questions.community] == [3, 5]

    def test_empty_database_and_guild_outage(self, cfg, db_engine):
        snapshot = run_async(build_snapshot(db_engine, FakeResolver(cfg, channels=[], preview={})))
        assert snapshot.guild_name is None
        assert snapshot.channels == []
        assert snapshot.contributors == {}
        assert snapshot.questions.count("total") == 0


def test_answered_questions_skips_unsolved(db_engine):
    _seed(db_engine)
    assert [q.id for q in answered_questions(list_questions(db_engine))] == [2, 3, 4, 5]
