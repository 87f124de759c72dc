"""
starledger.database.models — SQLAlchemy 2.0 Data Models
========================================================

Tables:
- star_records — one row per (name, channel) with four star counters

A missing row means "never interacted"; a row with every counter at zero
means "interacted, currently empty".  Rows are never deleted.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    DateTime,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from starledger.constants import STAR_CATEGORIES


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all StarLedger ORM models."""


# ---------------------------------------------------------------------------
# Star records, per user per channel
# ---------------------------------------------------------------------------
class StarRecord(Base):
    __tablename__ = "star_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    channel: Mapped[str] = mapped_column(String(64), nullable=False)
    gold: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    brown: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    green: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    silver: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("name", "channel", name="uq_star_records_name_channel"),
    )

    @property
    def stars(self) -> dict[str, int]:
        """Counters keyed by category, in canonical category order."""
        return {category: getattr(self, category) for category in STAR_CATEGORIES}

    def __repr__(self) -> str:
        return f"<StarRecord name={self.name!r} channel={self.channel!r} stars={self.stars}>"
