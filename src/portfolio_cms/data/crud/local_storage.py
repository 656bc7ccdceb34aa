"""``localStorage``-style accessors over the StoredValue table."""

from __future__ import annotations

from portfolio_cms.data.db import get_session
from portfolio_cms.data.models import StoredValue

AUTH_TOKEN_KEY = "auth_token"
USER_KEY = "user"


def get_item(key: str) -> str | None:
    """Return the stored value for ``key``, or None when absent."""
    with get_session() as session:
        record = session.get(StoredValue, key)
        return record.value if record is not None else None


def set_item(key: str, value: str) -> None:
    """Insert or overwrite the value stored under ``key``."""
    with get_session() as session:
        record = session.get(StoredValue, key)
        if record is None:
            session.add(StoredValue(key=key, value=value))
        else:
            record.value = value


def remove_item(key: str) -> None:
    """Delete ``key`` if present. Removing a missing key is a no-op."""
    with get_session() as session:
        record = session.get(StoredValue, key)
        if record is not None:
            session.delete(record)
