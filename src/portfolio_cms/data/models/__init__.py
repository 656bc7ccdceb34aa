"""ORM models package for the local durable store.

- StoredValue: persisted client key/value pairs (token, identity)

All models inherit from the shared Base declarative class defined in data.db.
"""

from portfolio_cms.data.db import Base
from portfolio_cms.data.models.stored_value import StoredValue

__all__ = ["Base", "StoredValue"]
