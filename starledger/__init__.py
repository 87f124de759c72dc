"""
StarLedger — A Star-Counting Chat Bot
======================================
Awards, lists, resets and sets coloured "stars" for the people in a live
chat channel.  Names typed in chat are resolved against who is actually
around (an external presence list plus everyone seen talking) before the
ledger is touched.

Package layout::

    starledger/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Star colours, command names, thresholds
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # StarRecord ORM model
    ├── engine/
    │   ├── commands.py    # ChatUser, permission check, prefix parsing
    │   ├── dispatcher.py  # Command routing → StarResult
    │   ├── results.py     # StarResult + TemplateKey
    │   └── similarity.py  # Normalized Levenshtein score
    ├── services/
    │   ├── ledger_service.py      # Star counter reads / writes
    │   ├── activity_log.py        # Who has spoken in each channel
    │   ├── membership_service.py  # Presence snapshots + name resolution
    │   └── responses.py           # StarResult → chat text
    └── bot/
        ├── core.py        # Bot subclass, cog loader
        └── cogs/
            ├── stars.py   # on_message → dispatcher → reply
            └── tasks.py   # Periodic membership refresh
"""

__version__ = "0.1.0"
