"""
helpline.services.question_service — Question persistence
==========================================================

Synchronous DB functions for help threads and their answers.  Call them
from async code through :func:`helpline.database.engine.run_db`.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from helpline.database.engine import get_session
from helpline.database.models import Answer, Question, User
from helpline.engine.records import QuestionRecord

logger = logging.getLogger(__name__)


class QuestionNotFound(LookupError):
    """Raised when an answer targets a thread that isn't tracked."""

    def __init__(self, question_id: int) -> None:
        super().__init__(f"No tracked question for thread {question_id}")
        self.question_id = question_id


def upsert_user(session: Session, user_id: int, display_name: str) -> User:
    """Create the user row or refresh its display name."""
    user = session.get(User, user_id)
    if user is None:
        user = User(id=user_id, discord_name=display_name)
        session.add(user)
    else:
        user.discord_name = display_name
    return user


def record_question(
    engine: Engine,
    *,
    thread_id: int,
    guild_id: int,
    owner_id: int,
    owner_name: str,
    channel_name: str,
    title: str,
    url: str | None = None,
    created_at: datetime | None = None,
) -> bool:
    """Track a new help thread.  Returns ``False`` if it was already tracked."""
    with get_session(engine) as session:
        if session.get(Question, thread_id) is not None:
            return False
        upsert_user(session, owner_id, owner_name)
        session.add(Question(
            id=thread_id,
            guild_id=guild_id,
            owner_id=owner_id,
            channel_name=channel_name,
            title=title[:200],
            url=url,
            is_solved=False,
            created_at=created_at or datetime.now(UTC),
        ))
    logger.info("Tracking question %d in #%s", thread_id, channel_name)
    return True


def mark_answered(
    engine: Engine,
    *,
    question_id: int,
    message_id: int,
    owner_id: int,
    owner_name: str,
    content: str,
    selected_by: int,
    created_at: datetime | None = None,
) -> None:
    """Select *message_id* as the answer for *question_id*.

    Replaces any previously selected answer.

    Raises
    ------
    QuestionNotFound
        If *question_id* isn't a tracked thread.
    """
    with get_session(engine) as session:
        question = session.get(Question, question_id)
        if question is None:
            raise QuestionNotFound(question_id)

        upsert_user(session, owner_id, owner_name)
        if question.answer is not None:
            # delete-orphan removes the old row; flush before the unique
            # question_id is reused.
            question.answer = None
            session.flush()

        question.answer = Answer(
            id=message_id,
            owner_id=owner_id,
            content=content,
            selected_by=selected_by,
            selected_at=datetime.now(UTC),
            created_at=created_at or datetime.now(UTC),
        )
        question.is_solved = True
    logger.info("Question %d answered by %d (message %d)", question_id, owner_id, message_id)


def list_questions(engine: Engine, guild_id: int | None = None) -> list[QuestionRecord]:
    """All tracked questions (oldest first) with their answers loaded."""
    query = (
        select(Question)
        .options(selectinload(Question.answer))
        .order_by(Question.created_at, Question.id)
    )
    if guild_id is not None:
        query = query.where(Question.guild_id == guild_id)
    with Session(engine) as session:
        return [QuestionRecord.from_model(q) for q in session.scalars(query).all()]


def get_github_id(engine: Engine, user_id: int) -> int | None:
    """GitHub account id linked to a Discord user, if any."""
    with Session(engine) as session:
        user = session.get(User, user_id)
        return user.github_id if user else None
