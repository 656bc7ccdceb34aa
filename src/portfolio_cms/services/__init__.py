"""Services"""

from portfolio_cms.services.image_compression import (
    compress_image,
    compress_images,
    to_data_url,
)
from portfolio_cms.services.session_store import SessionState, SessionStore

__all__ = [
    "SessionState",
    "SessionStore",
    "compress_image",
    "compress_images",
    "to_data_url",
]
