"""
helpline.database.seed — Demo Question Seeder
==============================================

Fills a local database with solved demo questions so the dashboard has
something to chart.  The generator is seeded (:data:`DEMO_SEED` by default),
so rerunning with the same seed inserts nothing new.

Run with::

    python -m helpline.database.seed
"""

from __future__ import annotations

import logging
import random
from datetime import UTC, datetime, timedelta

from dotenv import load_dotenv
from sqlalchemy import Engine

from helpline.database.engine import get_session
from helpline.database.models import Answer, Question, User

logger = logging.getLogger(__name__)

DEMO_OWNER_ID = 143912968529117185
DEMO_SEED = 20220101
_WORDS = (
    "amplify auth deploy build error hosting function storage api graphql "
    "schema datastore sync login cognito bucket lambda cli push pull env"
).split()


def _words(rng: random.Random, count: int) -> str:
    return " ".join(rng.choice(_WORDS) for _ in range(count))


def _snowflake(rng: random.Random) -> int:
    return int(f"999770{rng.randint(0, 10**12 - 1):012d}")


def _recent(rng: random.Random, days: int) -> datetime:
    return datetime.now(UTC) - timedelta(seconds=rng.randint(0, days * 86400))


def seed_demo_questions(
    engine: Engine,
    guild_id: int,
    count: int = 57,
    channel_name: str = "cli-help",
    seed: int | None = DEMO_SEED,
) -> int:
    """Insert *count* solved demo questions.  Returns the number inserted."""
    rng = random.Random(seed)
    inserted = 0
    with get_session(engine) as session:
        if session.get(User, DEMO_OWNER_ID) is None:
            session.add(User(id=DEMO_OWNER_ID, discord_name="demo-helper"))

        for _ in range(count):
            # Draw every value up front so a given seed replays the same rows.
            thread_id = _snowflake(rng)
            answer_id = _snowflake(rng)
            created_at = _recent(rng, 100)
            title, content = _words(rng, 15), _words(rng, 15)
            if session.get(Question, thread_id) is not None:
                continue
            session.add(Question(
                id=thread_id,
                guild_id=guild_id,
                owner_id=DEMO_OWNER_ID,
                channel_name=channel_name,
                title=title,
                url=f"https://discord.com/channels/{guild_id}/{thread_id}",
                is_solved=True,
                created_at=created_at,
                answer=Answer(
                    id=answer_id,
                    owner_id=DEMO_OWNER_ID,
                    content=content,
                    selected_by=DEMO_OWNER_ID,
                    selected_at=created_at,
                    created_at=created_at,
                ),
            ))
            inserted += 1

    logger.info("Seeded %d demo questions into #%s", inserted, channel_name)
    return inserted


if __name__ == "__main__":
    from helpline.config import load_config
    from helpline.database.engine import create_db_engine, init_db

    logging.basicConfig(level=logging.INFO)
    load_dotenv()
    engine = create_db_engine()
    init_db(engine)
    seed_demo_questions(engine, load_config().guild_id)
