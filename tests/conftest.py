"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from starledger.database.models import Base


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all StarLedger tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` inside ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine
