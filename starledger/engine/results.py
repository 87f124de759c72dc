"""
starledger.engine.results — StarResult and TemplateKey
=======================================================

The dispatcher never produces chat text.  It returns a :class:`StarResult`
naming a template and carrying the fields that template needs; rendering
happens in :mod:`starledger.services.responses`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

__all__ = ["StarResult", "TemplateKey"]


class TemplateKey(enum.StrEnum):
    """Every reply the bot knows how to phrase."""
    GIVE_STAR = "giveStar"
    LIST_STARS = "listStars"
    ABSENT_USER = "absentUser"
    NO_STAR = "noStar"
    NO_USER = "noUser"
    SET_STARS = "setStars"
    RESET_SUCCESS = "resetSuccess"
    RESET_FAIL = "resetFail"
    SET_SYNTAX = "setSyntax"


@dataclass(frozen=True, slots=True)
class StarResult:
    """Outcome of one command, ready for the templater.

    ``stars`` maps category → count; ``active`` is the colour the command
    acted on (None for "all"); ``amount`` is how many stars were granted.
    """

    template: TemplateKey
    user: str | None = None
    stars: dict[str, int] | None = None
    active: str | None = None
    amount: int | None = None
