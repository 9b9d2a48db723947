"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================

The dashboard snapshot dependency is overridden with a fixed in-memory
snapshot, so no database, Discord, or GitHub access happens.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import make_question, utc
from helpline.api.deps import get_snapshot
from helpline.api.main import app
from helpline.engine.categories import partition_by_category
from helpline.engine.contributors import AnswererProfile
from helpline.services.dashboard_service import DashboardSnapshot

STAFF_ID = 1
COMMUNITY_ID = 2


def _snapshot() -> DashboardSnapshot:
    questions = [
        make_question(1, channel="cli-help", created=utc(2022, 1, 1)),
        make_question(2, channel="cli-help", created=utc(2022, 1, 2), solved=True, answerer=STAFF_ID),
        make_question(3, channel="hosting-help", created=utc(2022, 2, 1), solved=True, answerer=COMMUNITY_ID),
        make_question(4, channel="hosting-help", created=utc(2022, 2, 3), solved=True, answerer=COMMUNITY_ID),
    ]
    return DashboardSnapshot(
        guild_name="Test Community",
        member_count=1200,
        presence_count=300,
        channels=["cli-help", "hosting-help"],
        questions=partition_by_category(questions, {STAFF_ID: True, COMMUNITY_ID: False}),
        contributors={
            STAFF_ID: AnswererProfile(
                id=STAFF_ID, discord_username="staffer", github_username="octocat",
                is_staff=True, questions=[questions[1]],
            ),
            COMMUNITY_ID: AnswererProfile(
                id=COMMUNITY_ID, discord_username="helper", github_username="",
                is_staff=False, questions=questions[2:],
            ),
        },
    )


@pytest.fixture
def client():
    """TestClient with the snapshot dependency stubbed out."""
    app.dependency_overrides[get_snapshot] = _snapshot
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# ===========================================================================
# Health endpoint
# ===========================================================================
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ===========================================================================
# GET /api/dashboard
# ===========================================================================
class TestOverview:
    def test_structure(self, client):
        data = client.get("/api/dashboard").json()
        assert data["name"] == "Test Community"
        assert data["member_count"] == 1200
        assert data["channels"] == ["cli-help", "hosting-help"]
        assert data["counts"] == {"total": 4, "unanswered": 1, "staff": 1, "community": 2}

    def test_leaderboards(self, client):
        data = client.get("/api/dashboard").json()
        assert data["top_contributors"] == [
            {"id": str(COMMUNITY_ID), "name": "helper", "answer_count": 2},
            {"id": str(STAFF_ID), "name": "staffer", "answer_count": 1},
        ]
        assert [e["id"] for e in data["top_staff"]] == [str(STAFF_ID)]


# ===========================================================================
# GET /api/dashboard/questions
# ===========================================================================
class TestQuestionStats:
    def test_monthly_buckets(self, client):
        resp = client.get(
            "/api/dashboard/questions",
            params={"unit": "months", "start": "2022-01-01", "end": "2022-02-15"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["unit"] == "months"
        assert data["aggregate"] == {"total": 4, "unanswered": 1, "staff": 1, "community": 2}
        assert [b["start"] for b in data["buckets"]] == [
            utc(2022, 1, 1).isoformat(), utc(2022, 2, 1).isoformat(),
        ]
        assert data["buckets"][0]["total"] == 2
        assert data["buckets"][1]["community"] == 2

    def test_channel_filter(self, client):
        data = client.get(
            "/api/dashboard/questions",
            params={"unit": "years", "start": "2022-01-01", "end": "2022-12-31", "channel": "cli-help"},
        ).json()
        assert data["channels"] == ["cli-help"]
        assert data["aggregate"] == {"total": 2, "unanswered": 1, "staff": 1, "community": 0}

    def test_default_unit_is_weeks(self, client):
        data = client.get(
            "/api/dashboard/questions", params={"start": "2022-01-01", "end": "2022-01-31"},
        ).json()
        assert data["unit"] == "weeks"
        assert data["buckets"][0]["start"] == utc(2022, 1, 3).isoformat()

    def test_unsupported_unit(self, client):
        resp = client.get("/api/dashboard/questions", params={"unit": "fortnights"})
        assert resp.status_code == 400

    def test_inverted_range(self, client):
        resp = client.get(
            "/api/dashboard/questions",
            params={"start": "2022-03-01", "end": "2022-01-01"},
        )
        assert resp.status_code == 400

    def test_malformed_date(self, client):
        resp = client.get("/api/dashboard/questions", params={"start": "yesterday"})
        assert resp.status_code == 422


# ===========================================================================
# GET /api/dashboard/contributors
# ===========================================================================
class TestContributors:
    def test_date_range_narrows_leaderboard(self, client):
        data = client.get(
            "/api/dashboard/contributors",
            params={"start": "2022-01-01", "end": "2022-01-31"},
        ).json()
        assert data["leaderboard"] == [
            {"id": str(STAFF_ID), "name": "staffer", "answer_count": 1},
            {"id": str(COMMUNITY_ID), "name": "helper", "answer_count": 0},
        ]

    def test_end_date_is_inclusive(self, client):
        data = client.get(
            "/api/dashboard/contributors",
            params={"start": "2022-01-01", "end": "2022-02-01"},
        ).json()
        by_id = {c["id"]: c for c in data["contributors"]}
        assert by_id[str(COMMUNITY_ID)]["answer_count"] == 1

    def test_profiles_survive_empty_filters(self, client):
        data = client.get(
            "/api/dashboard/contributors",
            params={"start": "2022-01-01", "end": "2022-12-31", "channel": "cli-help"},
        ).json()
        by_id = {c["id"]: c for c in data["contributors"]}
        assert by_id[str(COMMUNITY_ID)]["answer_count"] == 0
        assert by_id[str(STAFF_ID)]["github_username"] == "octocat"

    def test_staff_only(self, client):
        data = client.get(
            "/api/dashboard/contributors",
            params={"start": "2022-01-01", "end": "2022-12-31", "staff_only": "true"},
        ).json()
        assert [e["id"] for e in data["leaderboard"]] == [str(STAFF_ID)]


# ===========================================================================
# Both views count the same questions for the same range
# ===========================================================================
class TestRangeConsistency:
    @pytest.fixture
    def late_answer_client(self):
        answered = make_question(
            9, channel="cli-help", created=utc(2022, 2, 1, 12), solved=True, answerer=COMMUNITY_ID,
        )
        snapshot = DashboardSnapshot(
            channels=["cli-help"],
            questions=partition_by_category([answered], {COMMUNITY_ID: False}),
            contributors={
                COMMUNITY_ID: AnswererProfile(
                    id=COMMUNITY_ID, discord_username="helper", github_username="",
                    is_staff=False, questions=[answered],
                ),
            },
        )
        app.dependency_overrides[get_snapshot] = lambda: snapshot
        yield TestClient(app, raise_server_exceptions=False)
        app.dependency_overrides.clear()

    # Buckets start on a unit boundary inside the range; a yearly bucket
    # can't start between Jan 30 and Feb 1, so that chart is empty.
    @pytest.mark.parametrize(
        ("unit", "charted"), [("days", 1), ("weeks", 1), ("months", 1), ("years", 0)],
    )
    def test_end_day_counted_by_both_endpoints(self, late_answer_client, unit, charted):
        params = {"start": "2022-01-30", "end": "2022-02-01"}
        questions = late_answer_client.get(
            "/api/dashboard/questions", params={**params, "unit": unit},
        ).json()
        contributors = late_answer_client.get("/api/dashboard/contributors", params=params).json()

        assert contributors["contributors"][0]["answer_count"] == 1
        assert questions["aggregate"]["community"] == charted

    def test_days_buckets_match_contributors(self, late_answer_client):
        params = {"start": "2022-01-30", "end": "2022-02-01"}
        questions = late_answer_client.get(
            "/api/dashboard/questions", params={**params, "unit": "days"},
        ).json()
        contributors = late_answer_client.get("/api/dashboard/contributors", params=params).json()

        assert [b["start"] for b in questions["buckets"]] == [
            utc(2022, 1, d).isoformat() for d in (30, 31)
        ] + [utc(2022, 2, 1).isoformat()]
        assert questions["aggregate"]["community"] == contributors["leaderboard"][0]["answer_count"] == 1

    def test_questions_after_end_day_excluded(self, late_answer_client):
        params = {"start": "2022-01-01", "end": "2022-01-31", "unit": "days"}
        questions = late_answer_client.get("/api/dashboard/questions", params=params).json()
        contributors = late_answer_client.get(
            "/api/dashboard/contributors", params={"start": "2022-01-01", "end": "2022-01-31"},
        ).json()
        assert questions["aggregate"]["total"] == 0
        assert contributors["leaderboard"][0]["answer_count"] == 0
