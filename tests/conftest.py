"""Pytest configuration and shared fixtures for FundTrack tests.

Provides an isolated SQLite database per test, a session factory matching
the repositories' ``Callable[[], ContextManager[Session]]`` contract, and
small data factories.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from fundtrack.infra.database import create_session_factory
from fundtrack.infra.repositories import SQLModelAccountRepository, SQLModelPositionRepository
from fundtrack.models import Account, Position

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory producing commit-or-rollback scopes."""
    return create_session_factory(db_engine)


@pytest.fixture
def position_repo(session_factory):
    return SQLModelPositionRepository(session_factory)


@pytest.fixture
def account_repo(session_factory):
    return SQLModelAccountRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def position_factory(position_repo):
    """Factory for persisted positions.

    Returns:
        Callable: Function that creates and persists Position instances
    """

    def _create_position(
        code: str = "000001",
        platform: str = "Default",
        holding_shares: float = 100.0,
        cost_price: float = 1.0,
        current_nav: float = 1.0,
        day_change_pct: float = 0.0,
        day_change_val: float = 0.0,
        name: str = "Test Fund",
    ) -> Position:
        return position_repo.create(
            Position(
                code=code,
                name=name,
                platform=platform,
                holding_shares=holding_shares,
                cost_price=cost_price,
                current_nav=current_nav,
                day_change_pct=day_change_pct,
                day_change_val=day_change_val,
                last_update="2024-01-05",
            )
        )

    return _create_position


@pytest.fixture
def account_factory(account_repo):
    """Factory for persisted accounts."""

    def _create_account(name: str = "Test Account", is_default: bool = False) -> Account:
        return account_repo.create(Account(name=name, is_default=is_default))

    return _create_account
