"""SQLite key/value store standing in for the browser's local storage.

Holds what must survive a restart: the credential token and the signed-in
identity. The engine is built on first use from ``PORTFOLIO_CMS_DB_URL``
(default ``~/.portfolio_cms/store.db``) and creates its tables then.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

STORE_DIR_NAME = ".portfolio_cms"
STORE_FILE_NAME = "store.db"


class Base(DeclarativeBase):
    """Declarative base of the local store tables."""


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_database_url() -> str:
    """Return ``PORTFOLIO_CMS_DB_URL`` or the per-user SQLite file."""
    configured = os.getenv("PORTFOLIO_CMS_DB_URL")
    if configured:
        return configured

    store_dir = Path.home() / STORE_DIR_NAME
    store_dir.mkdir(parents=True, exist_ok=True)
    return URL.create("sqlite", database=str(store_dir / STORE_FILE_NAME)).render_as_string(
        hide_password=False
    )


def _create_tables(engine: Engine) -> None:
    # Registers StoredValue on Base.metadata.
    from portfolio_cms.data.models import stored_value  # noqa: F401

    Base.metadata.create_all(bind=engine)


def _engine_or_create() -> Engine:
    global _engine
    if _engine is None:
        engine = create_engine(get_database_url(), future=True)
        _create_tables(engine)
        _engine = engine
    return _engine


def _sessions() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=_engine_or_create(), autoflush=False, expire_on_commit=False
        )
    return _session_factory


def init_db() -> None:
    """Open the store now instead of on the first read or write."""
    _engine_or_create()


def reset_engine() -> None:
    """Dispose the engine so the next access re-reads the configured URL."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a session committed on success and rolled back on error."""
    session = _sessions()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
