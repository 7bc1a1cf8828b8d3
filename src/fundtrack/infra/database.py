"""Database infrastructure for the holdings store.

One engine per process; repositories never touch it directly. They receive a
``SessionFactory`` and open one :func:`session_scope` per operation, so every
repository call is its own transaction unless a caller passes a session in
explicitly (see ``SQLModelAccountRepository.rename``).
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from typing import Callable, ContextManager, Iterator, Tuple

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[], ContextManager[Session]]


def create_db_engine(config: BaseConfig) -> Engine:
    """Build the engine for ``config.DATABASE_URL`` (SQLite gets cross-thread access)."""
    return create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())


def init_database(engine: Engine) -> list[str]:
    """Create the account and position tables when missing; returns their names."""
    from ..models import Account, Position

    tables = [Account.__table__, Position.__table__]
    SQLModel.metadata.create_all(engine, tables=tables)
    return [table.name for table in tables]


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Yield a session that commits on a clean exit and rolls back on error.

    Instances stay loaded after commit (``expire_on_commit=False``) because
    repositories hand positions and accounts back to the services detached.
    """
    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
            session.commit()
        except Exception as exc:
            session.rollback()
            logger.warning(
                "Transaction rolled back",
                extra={"database": engine.url.database, "error": type(exc).__name__},
            )
            raise


def create_session_factory(engine: Engine) -> SessionFactory:
    """Bind :func:`session_scope` to ``engine`` as a zero-argument factory."""
    return partial(session_scope, engine)


def bootstrap_database(config: BaseConfig | None = None) -> Tuple[Engine, SessionFactory]:
    """Create the engine and schema; returns ``(engine, session_factory)``."""

    cfg = config or BaseConfig()
    engine = create_db_engine(cfg)
    tables = init_database(engine)
    logger.info("Database ready", extra={"url": str(engine.url), "tables": tables})
    return engine, create_session_factory(engine)
