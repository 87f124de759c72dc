"""
starledger.bot.cogs.stars — Chat Listener & Star Commands
==========================================================

Every guild message in a tracked channel:

1. Records the author in the activity log (commands or not).
2. Parses a prefixed star command from the message text.
3. Runs it through the dispatcher.
4. Renders the result and replies, or stays quiet when there is none.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from starledger.config import normalize_channel
from starledger.constants import BROADCASTER_BADGE
from starledger.engine.commands import ChatUser, parse_command
from starledger.services.responses import render

if TYPE_CHECKING:
    from starledger.bot.core import StarLedgerBot

logger = logging.getLogger(__name__)


def chat_user_from(message: discord.Message) -> ChatUser:
    """Describe the message author in transport-neutral terms.

    Moderator = can manage messages in the channel; the guild owner wears
    the broadcaster badge.
    """
    author = message.author
    is_moderator = False
    if isinstance(author, discord.Member):
        is_moderator = message.channel.permissions_for(author).manage_messages

    badges: frozenset[str] = frozenset()
    if message.guild is not None and author.id == message.guild.owner_id:
        badges = frozenset({BROADCASTER_BADGE})

    return ChatUser(name=author.name, is_moderator=is_moderator, badges=badges)


class Stars(commands.Cog, name="Stars"):
    """Gives, lists, resets and sets stars from chat commands."""

    def __init__(self, bot: StarLedgerBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        try:
            await self._handle_message(message)
        except Exception:
            logger.exception(
                "Error processing message %s from %s",
                message.id,
                message.author.name,
                extra={"event_type": "message", "user": message.author.name},
            )

    async def _handle_message(self, message: discord.Message) -> None:
        """Inner message handler (separated for error isolation)."""
        if message.author.bot or message.guild is None:
            return

        channel = normalize_channel(getattr(message.channel, "name", ""))
        if channel not in self.bot.cfg.channels:
            return

        self.bot.activity_log.record_activity(channel, message.author.name)

        parsed = parse_command(message.content, self.bot.cfg.command_prefix)
        if parsed is None:
            return
        command, params = parsed

        result = await self.bot.dispatcher.handle(
            command, params, chat_user_from(message), channel,
        )
        if result is None:
            logger.debug("No reply for %r from %s", command, message.author.name)
            return

        await message.channel.send(render(result))


async def setup(bot: StarLedgerBot) -> None:
    await bot.add_cog(Stars(bot))
