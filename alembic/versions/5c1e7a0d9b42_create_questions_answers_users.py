"""Create users, questions, and answers tables

Revision ID: 5c1e7a0d9b42
Revises:
Create Date: 2026-10-19 10:12:31.418207

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '5c1e7a0d9b42'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger, primary_key=True),
        sa.Column("discord_name", sa.String(100), nullable=False),
        sa.Column("github_id", sa.BigInteger, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "questions",
        sa.Column("id", sa.BigInteger, primary_key=True),
        sa.Column("guild_id", sa.BigInteger, nullable=False),
        sa.Column("owner_id", sa.BigInteger, nullable=False),
        sa.Column("channel_name", sa.String(100), nullable=False),
        sa.Column("title", sa.String(200), nullable=False, server_default=""),
        sa.Column("url", sa.String(300), nullable=True),
        sa.Column("is_solved", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_questions_guild_created", "questions", ["guild_id", "created_at"])
    op.create_index("ix_questions_channel", "questions", ["channel_name"])

    op.create_table(
        "answers",
        sa.Column("id", sa.BigInteger, primary_key=True),
        sa.Column(
            "question_id",
            sa.BigInteger,
            sa.ForeignKey("questions.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("owner_id", sa.BigInteger, nullable=False),
        sa.Column("content", sa.Text, nullable=False, server_default=""),
        sa.Column("selected_by", sa.BigInteger, nullable=True),
        sa.Column(
            "selected_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_answers_owner", "answers", ["owner_id"])


def downgrade() -> None:
    op.drop_index("ix_answers_owner", table_name="answers")
    op.drop_table("answers")
    op.drop_index("ix_questions_channel", table_name="questions")
    op.drop_index("ix_questions_guild_created", table_name="questions")
    op.drop_table("questions")
    op.drop_table("users")
