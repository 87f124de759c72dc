"""
starledger.bot.cogs.tasks — Periodic Presence Refresh
======================================================

Polls the chatters endpoint for every tracked channel: once as soon as the
Cog loads, then every ``refresh_interval_seconds`` (60 by default).
Channels are refreshed one after another; a failing channel keeps its last
good snapshot and does not stop the others.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from discord.ext import commands, tasks

from starledger.constants import FETCH_INTERVAL_SECONDS

if TYPE_CHECKING:
    from starledger.bot.core import StarLedgerBot

logger = logging.getLogger(__name__)


class PeriodicTasks(commands.Cog):
    """Cog for the presence polling loop."""

    def __init__(self, bot: StarLedgerBot) -> None:
        self.bot = bot

    async def cog_load(self) -> None:
        self.presence_loop.change_interval(seconds=self.bot.cfg.refresh_interval_seconds)
        self.presence_loop.start()

    async def cog_unload(self) -> None:
        self.presence_loop.cancel()

    @tasks.loop(seconds=FETCH_INTERVAL_SECONDS)
    async def presence_loop(self):
        """Refresh presence snapshots for all tracked channels."""
        channels = self.bot.cfg.channels
        try:
            refreshed = await self.bot.tracker.refresh_all(channels)
            logger.debug("Presence refresh: %d/%d channels updated", refreshed, len(channels))
        except Exception:
            logger.exception("Presence refresh failed", extra={"task": "presence"})


async def setup(bot: StarLedgerBot) -> None:
    await bot.add_cog(PeriodicTasks(bot))
