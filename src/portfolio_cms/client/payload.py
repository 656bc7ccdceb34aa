"""Request bodies built by the workflows and sent by the resource clients."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from portfolio_cms.models import ImageFile


@dataclass(frozen=True, slots=True)
class Payload:
    """Either a JSON body or a form body with optional file parts.

    Form fields are kept as ``(name, value)`` pairs so repeated keys such as
    ``skillIds[]`` or ``socialMedias`` survive in order.
    """

    json: dict[str, Any] | None = None
    fields: tuple[tuple[str, str], ...] = ()
    files: tuple[tuple[str, ImageFile], ...] = field(default=(), repr=False)

    @classmethod
    def json_body(cls, body: dict[str, Any]) -> Payload:
        return cls(json=dict(body))

    @classmethod
    def multipart(
        cls,
        fields: Iterable[tuple[str, str]] = (),
        files: Iterable[tuple[str, ImageFile]] = (),
    ) -> Payload:
        return cls(fields=tuple(fields), files=tuple(files))

    @property
    def is_multipart(self) -> bool:
        return self.json is None

    def field_values(self, name: str) -> list[str]:
        """Return every value sent under form field ``name``."""
        return [value for key, value in self.fields if key == name]

    def field_value(self, name: str) -> str | None:
        values = self.field_values(name)
        return values[0] if values else None

    def file_values(self, name: str) -> list[ImageFile]:
        """Return every file attached under ``name``."""
        return [image for key, image in self.files if key == name]

    def request_kwargs(self) -> dict[str, Any]:
        """Return the httpx keyword arguments carrying this body."""
        if self.json is not None:
            return {"json": self.json}

        data: dict[str, list[str]] = {}
        for key, value in self.fields:
            data.setdefault(key, []).append(value)

        kwargs: dict[str, Any] = {"data": data}
        if self.files:
            kwargs["files"] = [
                (key, (image.filename, image.content, image.content_type))
                for key, image in self.files
            ]
        return kwargs
