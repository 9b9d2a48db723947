"""
helpline.database.models — SQLAlchemy 2.0 Data Models
======================================================

Tables:
- users      — Discord members seen answering or asking (snowflake PK)
- questions  — One row per help thread
- answers    — The message selected as a thread's answer (one per question)
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Helpline ORM models."""


# ---------------------------------------------------------------------------
# Users — one row per Discord member
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    discord_name: Mapped[str] = mapped_column(String(100), nullable=False)
    github_id: Mapped[int | None] = mapped_column(BigInteger, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} name={self.discord_name!r}>"


# ---------------------------------------------------------------------------
# Questions — one row per help thread
# ---------------------------------------------------------------------------
class Question(Base):
    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)  # thread snowflake
    guild_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    owner_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    channel_name: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    url: Mapped[str | None] = mapped_column(String(300), default=None)
    is_solved: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    answer: Mapped[Answer | None] = relationship(
        back_populates="question", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_questions_guild_created", "guild_id", "created_at"),
        Index("ix_questions_channel", "channel_name"),
    )

    def __repr__(self) -> str:
        return f"<Question id={self.id} channel={self.channel_name!r} solved={self.is_solved}>"


# ---------------------------------------------------------------------------
# Answers — the selected reply for a question
# ---------------------------------------------------------------------------
class Answer(Base):
    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)  # message snowflake
    question_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("questions.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    owner_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    selected_by: Mapped[int | None] = mapped_column(BigInteger, default=None)
    selected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    question: Mapped[Question] = relationship(back_populates="answer")

    __table_args__ = (
        Index("ix_answers_owner", "owner_id"),
    )

    def __repr__(self) -> str:
        return f"<Answer id={self.id} question={self.question_id} owner={self.owner_id}>"
