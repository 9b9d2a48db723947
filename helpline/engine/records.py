"""
helpline.engine.records — Question and Answer value objects
============================================================

Every question is normalized into a :class:`QuestionRecord` before the
aggregation pipeline touches it, so the engine never holds a live ORM
session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from helpline.database.models import Answer, Question

__all__ = ["AnswerRecord", "QuestionRecord", "as_utc"]


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite returns them naive)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


@dataclass(frozen=True, slots=True)
class AnswerRecord:
    """The accepted response to a question."""

    id: int
    owner_id: int | None
    content: str = ""
    created_at: datetime | None = None
    selected_at: datetime | None = None
    selected_by: int | None = None

    @classmethod
    def from_model(cls, answer: Answer) -> AnswerRecord:
        return cls(
            id=answer.id,
            owner_id=answer.owner_id,
            content=answer.content or "",
            created_at=as_utc(answer.created_at),
            selected_at=as_utc(answer.selected_at),
            selected_by=answer.selected_by,
        )


@dataclass(frozen=True, slots=True)
class QuestionRecord:
    """One help request, as seen by the aggregation pipeline."""

    id: int
    channel_name: str
    created_at: datetime
    is_solved: bool = False
    answer: AnswerRecord | None = None
    title: str = ""
    owner_id: int | None = None
    url: str | None = None

    @property
    def answerer_id(self) -> int | None:
        """Owner of the accepted answer, or ``None`` if there isn't one.

        A solved question whose answer link is missing also yields ``None``.
        """
        if not self.is_solved or self.answer is None:
            return None
        return self.answer.owner_id

    @classmethod
    def from_model(cls, question: Question) -> QuestionRecord:
        answer = question.answer
        return cls(
            id=question.id,
            channel_name=question.channel_name,
            created_at=as_utc(question.created_at),
            is_solved=bool(question.is_solved),
            answer=AnswerRecord.from_model(answer) if answer is not None else None,
            title=question.title or "",
            owner_id=question.owner_id,
            url=question.url,
        )
