"""
starledger.services.activity_log — Who Has Spoken Where
========================================================

A process-local record of every name seen talking in each channel since the
bot started.  It only ever grows and is never persisted; a restart starts
from scratch.  Name resolution falls back on it when the presence snapshot
is stale or misses someone who typed once and went back to lurking.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ActivityLog:
    """Per-channel, insertion-ordered set of lowercase usernames."""

    def __init__(self, channels: list[str] | tuple[str, ...] = ()) -> None:
        # dict keys double as an ordered set
        self._seen: dict[str, dict[str, None]] = {c: {} for c in channels}

    def record_activity(self, channel: str, username: str) -> None:
        """Remember that *username* spoke in *channel* (case-insensitive, idempotent)."""
        name = username.lower()
        seen = self._seen.setdefault(channel, {})
        if name not in seen:
            seen[name] = None
            logger.debug("First message from %s in %s", name, channel)

    def list_activity(self, channel: str) -> tuple[str, ...]:
        """Names seen in *channel*, oldest first.  Empty for unknown channels."""
        return tuple(self._seen.get(channel, ()))
