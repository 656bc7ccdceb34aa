"""Plain data models shared across the client."""

from portfolio_cms.models.files import ImageFile

__all__ = ["ImageFile"]
