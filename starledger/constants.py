"""
starledger.constants — Shared Constants
========================================

Single source of truth for star colours, command names and the tuning
numbers used by name resolution and presence polling.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Star categories
# ---------------------------------------------------------------------------
STAR_CATEGORIES: tuple[str, ...] = ("gold", "brown", "green", "silver")

# Colours that chat commands may give, reset or set.  Silver is tracked but
# only ever changes through the database.
GRANTABLE_COLORS: tuple[str, ...] = ("green", "gold", "brown")

ALL_CATEGORIES = "all"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
GIVE_STAR_COMMANDS: dict[str, str] = {
    "goldstar": "gold",
    "greenstar": "green",
    "brownstar": "brown",
}

ENABLED_COMMANDS: tuple[str, ...] = (*GIVE_STAR_COMMANDS, "stars", "reset", "set")

BROADCASTER_BADGE = "broadcaster"


# ---------------------------------------------------------------------------
# Name resolution & presence polling
# ---------------------------------------------------------------------------
MIN_SIMILARITY = 0.7

FETCH_INTERVAL_SECONDS = 60
DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0
