"""Local image buffers for single-image fields and multi-image galleries.

A gallery is one ordered list of tagged entries, either an image already
stored on the server (``Persisted``) or a file picked in this session and
not yet uploaded (``Pending``). Previews, pending uploads and kept
references are all views of that one list, so removing an entry by index
can never leave a preview paired with the wrong file.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from portfolio_cms.models import ImageFile
from portfolio_cms.services.image_compression import to_data_url


@dataclass(frozen=True, slots=True)
class Persisted:
    """An image the server already stores, identified by its reference."""

    ref: str

    @property
    def preview(self) -> str:
        return self.ref


@dataclass(frozen=True, slots=True)
class Pending:
    """A newly selected image waiting to be uploaded."""

    file: ImageFile

    @property
    def preview(self) -> str:
        return to_data_url(self.file)


GalleryEntry = Persisted | Pending


class ImageSlot:
    """State of a single-image field (skill icon, cover image, profile photo)."""

    def __init__(self, ref: str | None = None) -> None:
        self.original_ref = ref or None
        self.ref = self.original_ref
        self.pending: ImageFile | None = None

    def select(self, image: ImageFile) -> None:
        """Replace the current image with a newly picked file."""
        self.pending = image

    def clear(self) -> None:
        """Drop both the picked file and the stored reference."""
        self.pending = None
        self.ref = None

    @property
    def removed(self) -> bool:
        """True when a stored image was explicitly removed and nothing replaced it."""
        return self.original_ref is not None and self.ref is None and self.pending is None

    @property
    def has_image(self) -> bool:
        return self.pending is not None or self.ref is not None

    @property
    def preview(self) -> str | None:
        if self.pending is not None:
            return to_data_url(self.pending)
        return self.ref


class ImageGallery:
    """Ordered multi-image field (project content images)."""

    def __init__(self, refs: Iterable[str] = ()) -> None:
        self._entries: list[GalleryEntry] = [Persisted(ref) for ref in refs if ref]
        self.original_count = len(self._entries)

    @property
    def entries(self) -> tuple[GalleryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, images: Iterable[ImageFile]) -> None:
        """Append newly picked files after the existing entries."""
        self._entries.extend(Pending(image) for image in images)

    def remove(self, index: int) -> GalleryEntry:
        """Remove and return the entry shown at ``index``.

        Raises:
            IndexError: ``index`` is outside the gallery.
        """
        if index < 0 or index >= len(self._entries):
            raise IndexError(f"No image at position {index}")
        return self._entries.pop(index)

    @property
    def previews(self) -> list[str]:
        return [entry.preview for entry in self._entries]

    @property
    def persisted_refs(self) -> list[str]:
        """References of stored images still kept, in display order."""
        return [entry.ref for entry in self._entries if isinstance(entry, Persisted)]

    @property
    def persisted_count(self) -> int:
        return len(self.persisted_refs)

    @property
    def pending_files(self) -> list[ImageFile]:
        """Files still waiting to be uploaded, in display order."""
        return [entry.file for entry in self._entries if isinstance(entry, Pending)]
