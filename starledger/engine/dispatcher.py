"""
starledger.engine.dispatcher — Command Routing
===============================================

Turns one chat command into a ledger operation and a :class:`StarResult`.

Commands::

    goldstar|greenstar|brownstar <user> [amount]   (moderators)
    stars [user]
    reset <user> [colour]                          (moderators)
    set <user> <colour> <amount>                   (moderators)

Returning None means "say nothing".  Apart from the no-target give-star
hint, non-moderators trying a privileged command get no reply at all, so
chat cannot tell "denied" apart from "not a command".
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from starledger.constants import ALL_CATEGORIES, GIVE_STAR_COMMANDS, GRANTABLE_COLORS
from starledger.database.engine import run_db
from starledger.engine.commands import ChatUser, has_permission
from starledger.engine.results import StarResult, TemplateKey
from starledger.services import ledger_service

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from starledger.services.membership_service import MembershipTracker

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"\W")
_WHOLE_NUMBER = re.compile(r"-?[0-9]+")


def _parse_int(text: str | None) -> int | None:
    """Parse a plain ASCII whole number; None if absent or anything else.

    ``int()`` alone would also take ``"1_000"`` and non-ASCII digits.
    """
    if text is None or not _WHOLE_NUMBER.fullmatch(text):
        return None
    return int(text)


class CommandDispatcher:
    """Routes commands to the ledger, resolving names through the tracker."""

    def __init__(self, engine: Engine, tracker: MembershipTracker) -> None:
        self.engine = engine
        self.tracker = tracker

    async def handle(
        self,
        command: str,
        params: list[str],
        user: ChatUser,
        channel: str,
    ) -> StarResult | None:
        """Run *command* for *user* in *channel*; None means no reply."""
        params = list(params)
        if params:
            params[0] = _NON_WORD.sub("", params[0])
        user = ChatUser(
            name=user.name.lower(),
            is_moderator=user.is_moderator,
            badges=user.badges,
        )
        target = params[0] if params else ""

        if command in GIVE_STAR_COMMANDS:
            if not target:
                return StarResult(template=TemplateKey.NO_STAR)
            if not has_permission(user):
                return None
            raw_amount = params[1] if len(params) > 1 else None
            amount = _parse_int(raw_amount)
            if amount is not None and amount < 0:
                return None
            return await self.give_star(
                target, channel, GIVE_STAR_COMMANDS[command], amount or 1,
            )

        if command == "stars":
            return await self.list_stars(target or user.name, channel)

        if command == "reset":
            if not (has_permission(user) and target):
                return None
            color = params[1] if len(params) > 1 else None
            if color is not None and color not in GRANTABLE_COLORS:
                return None
            return await self.reset(target, channel, color)

        if command == "set":
            if not has_permission(user):
                return None
            color = params[1] if len(params) > 1 else None
            amount = _parse_int(params[2] if len(params) > 2 else None)
            if not target or color not in GRANTABLE_COLORS or amount is None or amount < 0:
                return StarResult(template=TemplateKey.SET_SYNTAX)
            return await self.set_stars(target, channel, color, amount)

        return None

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    async def give_star(
        self, target: str, channel: str, color: str, amount: int = 1,
    ) -> StarResult | None:
        """Give *amount* stars of *color* to whoever *target* best names."""
        resolved = self.tracker.resolve(channel, target, fuzzy=True)
        try:
            if resolved is None and await run_db(
                ledger_service.user_exists, self.engine, target, channel,
            ):
                # Known to the ledger even though nobody sees them right now
                resolved = target.lower()
            if resolved is None:
                return StarResult(template=TemplateKey.ABSENT_USER, user=target)

            record = await run_db(
                ledger_service.increment, self.engine, resolved, channel, color, amount,
            )
        except SQLAlchemyError:
            logger.exception("Giving %s star to %s in %s failed", color, target, channel)
            return None

        logger.info("%s +%d %s star(s) in %s", resolved, amount, color, channel)
        return StarResult(
            template=TemplateKey.GIVE_STAR,
            user=resolved,
            stars=record.stars,
            active=color,
            amount=amount,
        )

    async def list_stars(self, target: str, channel: str) -> StarResult:
        """Report *target*'s star totals."""
        name = self.tracker.resolve(channel, target, fuzzy=True) or target
        try:
            record = await run_db(ledger_service.get_record, self.engine, name, channel)
        except SQLAlchemyError:
            logger.exception("Looking up stars for %s in %s failed", name, channel)
            record = None

        if record is None:
            return StarResult(template=TemplateKey.NO_USER)
        return StarResult(template=TemplateKey.LIST_STARS, user=name, stars=record.stars)

    async def reset(self, target: str, channel: str, color: str | None = None) -> StarResult:
        """Zero one colour (or everything) for *target*."""
        try:
            changed = await run_db(
                ledger_service.reset_category,
                self.engine, target, channel, color or ALL_CATEGORIES,
            )
        except SQLAlchemyError:
            logger.exception("Resetting stars for %s in %s failed", target, channel)
            changed = False

        template = TemplateKey.RESET_SUCCESS if changed else TemplateKey.RESET_FAIL
        return StarResult(template=template, user=target, active=color)

    async def set_stars(self, target: str, channel: str, color: str, amount: int) -> StarResult:
        """Set *target*'s *color* total to exactly *amount*."""
        try:
            changed = await run_db(
                ledger_service.set_absolute, self.engine, target, channel, color, amount,
            )
        except SQLAlchemyError:
            logger.exception("Setting %s stars for %s in %s failed", color, target, channel)
            changed = False

        if not changed:
            return StarResult(template=TemplateKey.SET_SYNTAX)
        return StarResult(
            template=TemplateKey.SET_STARS,
            user=target,
            active=color,
            stars={color: amount},
        )
