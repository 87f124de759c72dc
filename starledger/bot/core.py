"""
starledger.bot.core — Bot Instance & Cog Loader
================================================

Defines :class:`StarLedgerBot`, a ``commands.Bot`` subclass that carries the
process-wide state every Cog needs:

1. ``bot.cfg`` — parsed ``config.yaml``.
2. ``bot.engine`` — SQLAlchemy engine for the star ledger.
3. ``bot.activity_log`` — who has spoken in each channel this session.
4. ``bot.tracker`` — presence snapshots + name resolution.
5. ``bot.dispatcher`` — command routing.

Star commands are parsed by the ``stars`` Cog from raw message text, so the
built-in prefix command system only answers to mentions.
"""

from __future__ import annotations

import logging

import discord
from discord.ext import commands
from sqlalchemy import Engine

from starledger.config import StarLedgerConfig
from starledger.engine.dispatcher import CommandDispatcher
from starledger.services.activity_log import ActivityLog
from starledger.services.membership_service import MembershipTracker

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "starledger.bot.cogs.stars",
    "starledger.bot.cogs.tasks",
]


class StarLedgerBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`StarLedgerConfig` from ``config.yaml``.
    engine:
        A SQLAlchemy :class:`Engine` for the star ledger.
    """

    def __init__(self, cfg: StarLedgerConfig, engine: Engine) -> None:
        intents = discord.Intents.default()
        intents.message_content = True    # Privileged: commands are plain text

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            description="Gold, brown, green and silver stars for chat",
        )

        self.cfg = cfg
        self.engine = engine
        self.activity_log = ActivityLog(cfg.channels)
        self.tracker = MembershipTracker(
            engine,
            self.activity_log,
            cfg.membership_url_for,
            timeout=cfg.fetch_timeout_seconds,
        )
        self.dispatcher = CommandDispatcher(engine, self.tracker)

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all Cog extensions; one broken Cog is logged, not fatal."""
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)
        logger.info("Tracking channels: %s", ", ".join(self.cfg.channels) or "(none)")

    async def close(self) -> None:
        logger.info("Bot shutting down…")
        await super().close()
