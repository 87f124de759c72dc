"""
starledger.config — YAML Configuration Loader
==============================================

Reads ``config.yaml`` for the bot's soft settings: the command prefix, the
channels it listens in, and where to poll channel presence from.  Secrets
(``DISCORD_TOKEN``, ``DATABASE_URL``) stay in ``.env``.

Usage::

    from starledger.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.command_prefix)    # "#"
    print(cfg.channels)          # ("somestreamer",)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from starledger.constants import DEFAULT_FETCH_TIMEOUT_SECONDS, FETCH_INTERVAL_SECONDS

_NON_WORD = re.compile(r"\W")


def normalize_channel(name: str) -> str:
    """Lowercase *name* and drop every non-word character (``#Foo`` → ``foo``)."""
    return _NON_WORD.sub("", name).lower()


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class StarLedgerConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Chat
    command_prefix: str
    channels: tuple[str, ...]

    # Presence polling
    membership_url: str  # Must contain a ``{channel}`` placeholder
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    refresh_interval_seconds: int = FETCH_INTERVAL_SECONDS

    def membership_url_for(self, channel: str) -> str:
        return self.membership_url.format(channel=channel)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> StarLedgerConfig:
    """Read *path* and return a :class:`StarLedgerConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ValueError
        If ``membership_url`` has no ``{channel}`` placeholder.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    membership_url = str(raw["membership_url"])
    if "{channel}" not in membership_url:
        raise ValueError("membership_url must contain a {channel} placeholder")

    # Keep the configured order but drop duplicates after normalizing
    channels = tuple(dict.fromkeys(normalize_channel(c) for c in raw["channels"]))

    return StarLedgerConfig(
        command_prefix=str(raw.get("command_prefix", "#")),
        channels=channels,
        membership_url=membership_url,
        fetch_timeout_seconds=float(
            raw.get("fetch_timeout_seconds", DEFAULT_FETCH_TIMEOUT_SECONDS)
        ),
        refresh_interval_seconds=int(
            raw.get("refresh_interval_seconds", FETCH_INTERVAL_SECONDS)
        ),
    )
