"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from helpline.config import HelplineConfig
from helpline.database.models import Base
from helpline.engine.records import AnswerRecord, QuestionRecord

GUILD_ID = 976838371383083068
ADMIN_ROLE_ID = 500
STAFF_ROLE_ID = 501


def run_async(coro):
    """Run a coroutine to completion without pytest-asyncio."""
    return asyncio.run(coro)


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=UTC)


def make_question(
    qid: int,
    *,
    channel: str = "help-a",
    created: datetime | None = None,
    solved: bool = False,
    answerer: int | None = None,
) -> QuestionRecord:
    """Build a QuestionRecord; ``answerer`` attaches an answer link."""
    answer = AnswerRecord(id=qid * 10, owner_id=answerer) if answerer is not None else None
    return QuestionRecord(
        id=qid,
        channel_name=channel,
        created_at=created or utc(2022, 1, 1),
        is_solved=solved,
        answer=answer,
        title=f"Question {qid}",
    )


@pytest.fixture
def cfg() -> HelplineConfig:
    return HelplineConfig(
        community_name="Test Community",
        bot_prefix="!",
        guild_id=GUILD_ID,
        dashboard_port=8000,
        admin_role_id=ADMIN_ROLE_ID,
        staff_role_ids=(STAFF_ROLE_ID,),
        discussion_repositories=("aws-amplify/amplify-cli",),
    )


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all Helpline tables.

    Uses StaticPool so every thread (``asyncio.to_thread`` in ``run_db``)
    shares the same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()
