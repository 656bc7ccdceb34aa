"""In-memory file values passed between forms, compression and uploads."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ImageFile:
    """An image selected by the user, ready to be compressed or uploaded.

    Attributes:
        filename: Name sent as the multipart filename.
        content: Raw image bytes.
        content_type: MIME type sent with the upload.
    """

    filename: str
    content: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Path | str) -> ImageFile:
        """Read an image file from disk, guessing its MIME type from the suffix."""
        path = Path(path).expanduser()
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )
