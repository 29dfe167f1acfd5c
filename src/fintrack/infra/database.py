"""Database infrastructure: engine, schema and session scopes."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, Mapping, Tuple

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger

logger = get_logger("database")

SessionFactory = Callable[[], Session]


def _install_sqlite_pragmas(engine: Engine, pragmas: Mapping[str, str]) -> None:
    """Apply PRAGMAs to every new SQLite connection.

    ``foreign_keys`` must be on for the cascade and set-null rules on
    transactions to fire.
    """

    @event.listens_for(engine, "connect")
    def _set_pragmas(dbapi_connection, connection_record) -> None:  # noqa: ARG001
        cursor = dbapi_connection.cursor()
        try:
            for key, value in pragmas.items():
                cursor.execute(f"PRAGMA {key}={value}")
        finally:
            cursor.close()


def create_db_engine(config: BaseConfig) -> Engine:
    """Create SQLModel engine from configuration."""

    engine = create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())
    if engine.dialect.name == "sqlite":
        pragmas = dict(config.SQLITE_PRAGMAS)
        if ":memory:" in config.DATABASE_URL or config.DATABASE_URL in ("sqlite://", "sqlite:///"):
            # WAL is meaningless for in-memory databases
            pragmas.pop("journal_mode", None)
        _install_sqlite_pragmas(engine, pragmas)
    logger.debug("Engine created", extra={"dialect": engine.dialect.name})
    return engine


def init_database(engine: Engine) -> None:
    """Create all tables known to SQLModel metadata."""
    # Import all models to ensure they're registered
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Provide a transactional scope around operations."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_session_factory(engine: Engine) -> SessionFactory:
    """Return a callable producing commit-or-rollback session scopes.

    Repositories use ``with self.session_factory() as session:``; everything done
    inside one ``with`` block is a single database transaction.
    """

    def factory():
        return session_scope(engine)

    return factory  # type: ignore[return-value]


def bootstrap_database(config: BaseConfig | None = None) -> Tuple[Engine, SessionFactory]:
    """Convenience bootstrap for engine + session_factory with schema init.

    Returns (engine, session_factory).
    """

    cfg = config or BaseConfig()
    engine = create_db_engine(cfg)
    init_database(engine)
    return engine, create_session_factory(engine)
