"""
starledger.services.responses — Chat Reply Templates
=====================================================

Pure rendering: a :class:`StarResult` goes in, one line of chat text comes
out.  Templates use ``{placeholder}`` fields; anything the result cannot
fill renders as an empty string.
"""

from __future__ import annotations

import re

from starledger.constants import STAR_CATEGORIES
from starledger.engine.results import StarResult, TemplateKey

TEMPLATES: dict[str, str] = {
    TemplateKey.LIST_STARS: (
        "{user} has {gold} gold stars, {brown} brown stars, "
        "{green} green stars, and {silver} silver stars"
    ),
    TemplateKey.GIVE_STAR: (
        "{user} received {ngiven} {color} star{ngplural}! {colormsg} "
        "They have {total} {color} stars in total"
    ),
    TemplateKey.ABSENT_USER: (
        "It seems like {user} isn't here right now. "
        "Try giving them some stars later!"
    ),
    TemplateKey.NO_STAR: "You can't give a star to nobody!",
    TemplateKey.NO_USER: "It looks like this person has not gotten any stars yet",
    TemplateKey.SET_STARS: "Set {user}'s {color} star total to {total}!",
    TemplateKey.RESET_SUCCESS: "{user}'s {color} stars have been reset!",
    TemplateKey.RESET_FAIL: "{user} has no {color} stars to reset",
    TemplateKey.SET_SYNTAX: (
        "Usage: set [user] [star color] [number greater than or equal to 0]"
    ),
}

ERROR_TEMPLATE = "Something went wrong putting that reply together."

COLOR_FLAVOR: dict[str, str] = {
    "green": "Gross.",
    "gold": "You will now have happy time and good life!",
    "brown": "Now go and think about what you've done.",
    "silver": "The stars look upon you favorably.",
}

_PLACEHOLDER = re.compile(r"\{([a-zA-Z]+)\}")
_SPACES = re.compile(r" {2,}")


def _fields(result: StarResult) -> dict[str, str]:
    stars = result.stars or {}
    fields = {c: str(stars[c]) for c in STAR_CATEGORIES if c in stars}
    fields["user"] = result.user or ""
    fields["colormsg"] = COLOR_FLAVOR.get(result.active or "", "")
    fields["color"] = result.active or ""

    if result.active and result.active in stars:
        fields["total"] = str(stars[result.active])

    amount = result.amount or 1
    fields["ngiven"] = "a" if amount == 1 else str(amount)
    fields["ngplural"] = "s" if amount > 1 else ""
    return fields


def render(result: StarResult) -> str:
    """Render *result* as chat text."""
    template = TEMPLATES.get(result.template)
    if template is None:
        return ERROR_TEMPLATE
    fields = _fields(result)
    text = _PLACEHOLDER.sub(lambda m: fields.get(m.group(1), ""), template)
    # Empty fields leave doubled spaces behind ("bob's  stars")
    return _SPACES.sub(" ", text).strip()
