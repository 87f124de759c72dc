"""
starledger.bot.__main__ — Entry point for ``python -m starledger.bot``
======================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Create the StarLedgerBot and hand it config + engine.
5. Start the bot (blocking — runs the asyncio event loop).
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from starledger.bot.core import StarLedgerBot
from starledger.config import load_config
from starledger.database.engine import create_db_engine, init_db

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("starledger")


def main() -> None:
    """Bootstrap and run the StarLedger bot."""

    # 1. Environment variables (secrets).
    load_dotenv()

    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    # 2. Soft configuration.
    cfg = load_config(os.getenv("STARLEDGER_CONFIG", "config.yaml"))
    logger.info("Config loaded — prefix %r, %d channel(s)", cfg.command_prefix, len(cfg.channels))

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)

    # 4. Bot.
    bot = StarLedgerBot(cfg=cfg, engine=engine)

    # 5. Run (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting StarLedger bot…")
    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
