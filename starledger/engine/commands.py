"""
starledger.engine.commands — Chat Users & Command Parsing
==========================================================

Transport-neutral helpers: the Discord Cog builds a :class:`ChatUser` from
the message author and hands the raw text to :func:`parse_command`.
"""

from __future__ import annotations

from dataclasses import dataclass

from starledger.constants import BROADCASTER_BADGE, ENABLED_COMMANDS


@dataclass(frozen=True, slots=True)
class ChatUser:
    """The person who sent a command, as reported by the chat transport."""

    name: str
    is_moderator: bool = False
    badges: frozenset[str] = frozenset()


def has_permission(user: ChatUser) -> bool:
    """Moderators and the broadcaster may change other people's stars."""
    return user.is_moderator or BROADCASTER_BADGE in user.badges


def parse_command(text: str, prefix: str) -> tuple[str, list[str]] | None:
    """Split ``"#goldstar bob 5"`` into ``("goldstar", ["bob", "5"])``.

    Returns None when the message is not an enabled, prefixed command.
    """
    if not prefix:
        return None
    tokens = text.split()
    if not tokens or not tokens[0].startswith(prefix):
        return None
    command = tokens[0][len(prefix):]
    if command not in ENABLED_COMMANDS:
        return None
    return command, tokens[1:]
