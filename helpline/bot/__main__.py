"""
helpline.bot.__main__ — Entry point for ``python -m helpline.bot``
==================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Create the HelplineBot and hand it config + engine.
5. Start the bot (blocking — runs the asyncio event loop).
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from helpline.bot.core import HelplineBot
from helpline.config import load_config
from helpline.database.engine import create_db_engine, init_db

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("helpline")


def main() -> None:
    """Bootstrap and run the Helpline bot."""
    load_dotenv()

    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    cfg = load_config()
    logger.info("Config loaded — Community: %s", cfg.community_name)

    engine = create_db_engine()
    init_db(engine)

    bot = HelplineBot(cfg=cfg, engine=engine)

    logger.info("Starting Helpline bot…")
    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
