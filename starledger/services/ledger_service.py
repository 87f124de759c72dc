"""
starledger.services.ledger_service — Star Counter Reads & Writes
=================================================================

Synchronous functions over a SQLAlchemy :class:`Engine`; async callers go
through :func:`starledger.database.engine.run_db`.

Names and channels are lowercased on every access, so ``"Bob"`` and
``"bob"`` always address the same record.  Mutations are last-writer-wins
per record.  Increments use an atomic ``col = col + n`` update so two
concurrent grants never lose one another.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import InstrumentedAttribute, Session

from starledger.constants import ALL_CATEGORIES, STAR_CATEGORIES
from starledger.database.engine import get_session
from starledger.database.models import StarRecord

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def _column(category: str) -> InstrumentedAttribute[int]:
    if category not in STAR_CATEGORIES:
        raise ValueError(f"Unknown star category: {category!r}")
    return getattr(StarRecord, category)


def _key(name: str, channel: str):
    return (
        StarRecord.name == name.lower(),
        StarRecord.channel == channel.lower(),
    )


def _find(session: Session, name: str, channel: str) -> StarRecord | None:
    return session.scalar(select(StarRecord).where(*_key(name, channel)))


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def user_exists(engine: Engine, name: str, channel: str) -> bool:
    """Return True if *name* has a record in *channel*."""
    with Session(engine) as session:
        return _find(session, name, channel) is not None


def get_record(engine: Engine, name: str, channel: str) -> StarRecord | None:
    """Fetch a record without creating one.  Returns a detached instance."""
    with Session(engine, expire_on_commit=False) as session:
        record = _find(session, name, channel)
        if record is not None:
            session.expunge(record)
        return record


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------
def _insert_record(session: Session, name: str, channel: str) -> tuple[StarRecord, bool]:
    """Insert a zeroed record for *name* in *channel* inside a SAVEPOINT.

    Returns ``(record, True)`` when this call inserted the row.  If another
    writer created the same key first, the unique constraint rejects ours and
    ``(winner, False)`` is returned instead.
    """
    record = StarRecord(
        name=name.lower(),
        channel=channel.lower(),
        gold=0,
        brown=0,
        green=0,
        silver=0,
    )
    try:
        with session.begin_nested():   # SAVEPOINT
            session.add(record)
            session.flush()
    except IntegrityError:
        # Lost the race; the SAVEPOINT was rolled back, the outer txn is alive.
        logger.debug("Record %s/%s created concurrently, re-fetching", name, channel)
        existing = _find(session, name, channel)
        if existing is None:
            raise
        return existing, False
    return record, True


def get_or_create_record(session: Session, name: str, channel: str) -> StarRecord:
    """Fetch or insert the record for *name* in *channel* (all counters zero)."""
    record = _find(session, name, channel)
    if record is not None:
        return record
    record, _ = _insert_record(session, name, channel)
    return record


def get_or_create(engine: Engine, name: str, channel: str) -> StarRecord:
    """Return the existing record or create a zeroed one.  Detached instance."""
    with Session(engine, expire_on_commit=False) as session:
        record = get_or_create_record(session, name, channel)
        session.commit()
        session.expunge(record)
        return record


def ensure_records(engine: Engine, names: Iterable[str], channel: str) -> int:
    """Make sure every name in *names* has a record in *channel*.

    Each name is handled in its own session: one failure is logged and the
    rest still get their records.  Returns the number of rows this call
    inserted; names another writer created first are not counted.
    """
    created = 0
    for name in dict.fromkeys(n.lower() for n in names):
        try:
            with get_session(engine) as session:
                if _find(session, name, channel) is not None:
                    continue
                _, inserted = _insert_record(session, name, channel)
            if inserted:
                created += 1
        except SQLAlchemyError:
            logger.exception(
                "Failed to create star record for %s in %s", name, channel,
            )
    if created:
        logger.info("Created %d new star records in %s", created, channel)
    return created


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def increment(
    engine: Engine,
    name: str,
    channel: str,
    category: str,
    amount: int = 1,
) -> StarRecord:
    """Add *amount* stars of *category*, creating the record first if needed.

    *amount* is not checked for sign; callers keep counters non-negative.
    Returns the updated, detached record.
    """
    column = _column(category)
    with Session(engine, expire_on_commit=False) as session:
        record = get_or_create_record(session, name, channel)
        session.execute(
            update(StarRecord)
            .where(StarRecord.id == record.id)
            .values({column: column + amount})
            .execution_options(synchronize_session=False)
        )
        session.commit()
        session.refresh(record)
        session.expunge(record)
        return record


def set_absolute(
    engine: Engine,
    name: str,
    channel: str,
    category: str,
    amount: int,
) -> bool:
    """Set *category* to exactly *amount* on an existing record.

    Never creates a record.  Returns True only if a row actually changed
    (False for an unknown user or when the value was already *amount*).
    """
    column = _column(category)
    with Session(engine) as session:
        result = session.execute(
            update(StarRecord)
            .where(*_key(name, channel), column != amount)
            .values({column: amount})
            .execution_options(synchronize_session=False)
        )
        session.commit()
        return result.rowcount > 0


def reset_category(
    engine: Engine,
    name: str,
    channel: str,
    category: str | None = ALL_CATEGORIES,
) -> bool:
    """Zero one category (or every category for ``"all"`` / ``None``).

    Returns True only if a row actually changed: False for an unknown user
    or when the targeted counters were already zero.
    """
    if category is None or category == ALL_CATEGORIES:
        columns = [_column(c) for c in STAR_CATEGORIES]
    else:
        columns = [_column(category)]

    with Session(engine) as session:
        result = session.execute(
            update(StarRecord)
            .where(*_key(name, channel), or_(*(col != 0 for col in columns)))
            .values({col: 0 for col in columns})
            .execution_options(synchronize_session=False)
        )
        session.commit()
        return result.rowcount > 0
