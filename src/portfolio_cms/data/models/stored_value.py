"""Key/value model backing the client's durable storage.

A row per key, mirroring what a browser keeps in ``localStorage``:
the credential token and the JSON-encoded signed-in identity.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from portfolio_cms.data.db import Base


class StoredValue(Base):
    """A single persisted client value.

    Attributes:
        key: Unique storage key (e.g. ``auth_token``, ``user``).
        value: Raw string value.
        updated_at: UTC timestamp of the last write.
    """

    __tablename__ = "stored_values"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
