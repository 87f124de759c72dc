"""
starledger.services.membership_service — Channel Presence & Name Resolution
============================================================================

Keeps a best-effort view of who is in each channel and maps names typed in
chat onto that view.

Three sources feed resolution:

1. The **presence snapshot** polled from the external chatters endpoint,
   split into superusers (broadcaster + moderators) and chatters.
2. The **activity log** of everyone seen talking since startup.
3. The **ledger** itself, which callers consult separately as a fallback.

Snapshots are immutable and swapped in with a single assignment, so a
resolution running between two awaits sees either the old snapshot or the
new one, never a mix.  A failed poll keeps the previous snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from starledger.constants import DEFAULT_FETCH_TIMEOUT_SECONDS, MIN_SIMILARITY
from starledger.database.engine import run_db
from starledger.engine.similarity import best_match
from starledger.services import ledger_service

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from sqlalchemy import Engine

    from starledger.services.activity_log import ActivityLog

logger = logging.getLogger(__name__)

# Role lists in the chatters payload, grouped by trust tier
SUPERUSER_ROLES: tuple[str, ...] = ("broadcaster", "moderators")
CHATTER_ROLES: tuple[str, ...] = ("viewers", "staff", "admins", "vips")


class MembershipFetchError(Exception):
    """The presence endpoint could not be reached or returned garbage."""


@dataclass(frozen=True, slots=True)
class ChannelMembership:
    """One presence snapshot for a channel."""

    superusers: tuple[str, ...] = ()
    chatters: tuple[str, ...] = ()

    @property
    def everyone(self) -> tuple[str, ...]:
        return (*self.superusers, *self.chatters)


EMPTY_MEMBERSHIP = ChannelMembership()


def parse_chatters(payload: Any) -> ChannelMembership:
    """Turn a chatters JSON payload into a :class:`ChannelMembership`.

    Raises :class:`MembershipFetchError` if a role list is missing or holds
    anything other than strings.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("chatters"), dict):
        raise MembershipFetchError("payload has no 'chatters' object")
    chatters = payload["chatters"]

    def _names(roles: tuple[str, ...]) -> tuple[str, ...]:
        names: list[str] = []
        for role in roles:
            entries = chatters.get(role)
            if not isinstance(entries, list) or not all(isinstance(e, str) for e in entries):
                raise MembershipFetchError(f"role list {role!r} is missing or malformed")
            names.extend(e.lower() for e in entries)
        return tuple(names)

    return ChannelMembership(
        superusers=_names(SUPERUSER_ROLES),
        chatters=_names(CHATTER_ROLES),
    )


class MembershipTracker:
    """Per-channel presence snapshots plus the fuzzy username resolver.

    Parameters
    ----------
    engine:
        SQLAlchemy engine; every refreshed name gets a star record.
    activity_log:
        Read-only view of who has spoken, merged into every resolution.
    url_for:
        Maps a channel name to its chatters endpoint URL.
    timeout:
        Seconds before a presence poll is abandoned.
    transport:
        Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        engine: Engine,
        activity_log: ActivityLog,
        url_for: Callable[[str], str],
        *,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.engine = engine
        self.activity_log = activity_log
        self._url_for = url_for
        self._timeout = timeout
        self._transport = transport
        self._memberships: dict[str, ChannelMembership] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    # -------------------------------------------------------------------
    # Snapshot polling
    # -------------------------------------------------------------------
    async def fetch(self, channel: str) -> ChannelMembership:
        """GET and parse the presence snapshot for *channel*."""
        transport = self._transport or httpx.AsyncHTTPTransport(retries=1)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=transport) as client:
                resp = await client.get(self._url_for(channel))
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPError as exc:
            raise MembershipFetchError(f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:  # invalid JSON body
            raise MembershipFetchError(f"invalid JSON: {exc}") from exc
        return parse_chatters(payload)

    async def refresh(self, channel: str) -> bool:
        """Replace *channel*'s snapshot with a fresh one.

        Returns False (and keeps the old snapshot) when the poll fails.
        """
        lock = self._locks.setdefault(channel, asyncio.Lock())
        async with lock:
            try:
                membership = await self.fetch(channel)
            except MembershipFetchError as exc:
                logger.warning("Presence refresh failed for %s: %s", channel, exc)
                return False

            self._memberships[channel] = membership
            logger.debug(
                "Presence for %s: %d superusers, %d chatters",
                channel, len(membership.superusers), len(membership.chatters),
            )

        await self._ensure_records(channel, membership.everyone)
        return True

    async def refresh_all(self, channels: Iterable[str]) -> int:
        """Refresh each channel in turn.  Returns how many succeeded."""
        refreshed = 0
        for channel in channels:
            if await self.refresh(channel):
                refreshed += 1
        return refreshed

    async def _ensure_records(self, channel: str, names: tuple[str, ...]) -> None:
        # Anyone seen in the channel gets a ledger entry
        if not names:
            return
        try:
            await run_db(ledger_service.ensure_records, self.engine, names, channel)
        except Exception:
            logger.exception("Seeding star records failed for %s", channel)

    # -------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------
    def get_membership(self, channel: str) -> ChannelMembership:
        return self._memberships.get(channel, EMPTY_MEMBERSHIP)

    def resolution_universe(self, channel: str) -> list[str]:
        """Chatters, then superusers, then everyone seen talking."""
        membership = self.get_membership(channel)
        return [
            *membership.chatters,
            *membership.superusers,
            *self.activity_log.list_activity(channel),
        ]

    def resolve(self, channel: str, candidate: str, fuzzy: bool) -> str | None:
        """Map *candidate* to a known name in *channel*, or None.

        Exact mode expects an already-lowercased candidate.  Fuzzy mode
        returns the closest name if it scores at least ``MIN_SIMILARITY``;
        ties go to whichever name comes first in the universe.
        """
        universe = self.resolution_universe(channel)
        if not universe:
            return None

        if not fuzzy:
            return candidate if candidate in universe else None

        match, score = best_match(universe, candidate.lower(), score_cutoff=MIN_SIMILARITY)
        if match is None:
            logger.debug("No match for %r in %s", candidate, channel)
            return None
        logger.debug("Resolved %r to %r in %s (%.2f)", candidate, match, channel, score)
        return match
