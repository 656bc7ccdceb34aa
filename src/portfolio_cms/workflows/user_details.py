"""Workflow for the singleton user details screen."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from portfolio_cms.client.payload import Payload
from portfolio_cms.client.resources import UserDetailsClient
from portfolio_cms.errors import ApiError, ValidationError
from portfolio_cms.models import ImageFile
from portfolio_cms.schemas import UserDetails, UserDetailsForm, format_social_media
from portfolio_cms.schemas.validation import validate_form
from portfolio_cms.services.image_compression import compress_image
from portfolio_cms.workflows.controller import InvalidTransition, Phase
from portfolio_cms.workflows.descriptors import Compressor, attach_image
from portfolio_cms.workflows.images import ImageSlot
from portfolio_cms.workflows.notifications import Notifier, RecordingNotifier, Severity

logger = logging.getLogger(__name__)


def _empty_form() -> dict[str, Any]:
    return {"name": "", "role": "", "description": ""}


class UserDetailsController:
    """Loads, edits and saves the signed-in user's public profile.

    There is no list and no delete: the form is always open once loaded,
    and submitting creates the details the first time and updates them
    afterwards.
    """

    def __init__(
        self,
        client: UserDetailsClient,
        *,
        notifier: Notifier | None = None,
        compress: Compressor = compress_image,
    ) -> None:
        self.client = client
        self.notifier: Notifier = notifier if notifier is not None else RecordingNotifier()
        self.compress = compress

        self.phase = Phase.LOADING
        self.details: UserDetails | None = None
        self.form: dict[str, Any] = _empty_form()
        self.social_medias: list[str] = []
        self.photo = ImageSlot()
        self.field_errors: dict[str, str] = {}

    @property
    def exists(self) -> bool:
        return self.details is not None

    def _populate(self, details: UserDetails | None) -> None:
        self.details = details
        self.field_errors = {}
        if details is None:
            self.form = _empty_form()
            self.social_medias = []
            self.photo = ImageSlot()
            return
        self.form = {
            "name": details.name,
            "role": details.role,
            "description": details.description or "",
        }
        self.social_medias = list(details.social_medias)
        self.photo = ImageSlot(details.profile_photo)

    async def load(self) -> None:
        """Fetch the stored details and pre-populate the form."""
        try:
            details = await self.client.get()
        except ApiError as exc:
            logger.warning("Loading user details failed: %s", exc.message)
            self.notifier.notify("Failed to load user details", Severity.ERROR)
        else:
            self._populate(details)
        finally:
            if self.phase is Phase.LOADING:
                self.phase = Phase.IDLE

    def set_field(self, name: str, value: Any) -> None:
        self.form[name] = value
        self.field_errors.pop(name, None)

    def add_social_media(self, icon: str, url: str) -> bool:
        """Append an ``icon|url`` link; blank halves are ignored.

        Returns:
            True when the link was added.
        """
        icon, url = icon.strip(), url.strip()
        if not icon or not url:
            return False
        self.social_medias.append(format_social_media(icon, url))
        self.field_errors.pop("social_medias", None)
        return True

    def remove_social_media(self, index: int) -> None:
        """Remove the link at ``index``.

        Raises:
            IndexError: No link at ``index``.
        """
        del self.social_medias[index]

    def select_photo(self, image: ImageFile) -> None:
        self.photo.select(image)

    def clear_photo(self) -> None:
        self.photo.clear()

    def _build_payload(self, form: UserDetailsForm) -> Payload:
        fields: list[tuple[str, str]] = [("name", form.name), ("role", form.role)]
        if form.description is not None:
            fields.append(("description", form.description))
        fields.extend(("socialMedias", entry) for entry in form.social_medias)
        files: list[tuple[str, ImageFile]] = []
        attach_image("profilePhoto", self.photo, self.compress, fields, files)
        return Payload.multipart(fields, files)

    async def submit(self) -> bool:
        """Create or update the details, then reload them.

        Returns:
            True on success; False when validation failed or the server
            refused the request.
        """
        if self.phase is not Phase.IDLE:
            raise InvalidTransition(f"Cannot submit while {self.phase.value}")
        try:
            form = validate_form(
                UserDetailsForm, {**self.form, "social_medias": self.social_medias}
            )
        except ValidationError as exc:
            self.field_errors = exc.field_errors
            return False

        creating = self.details is None
        self.phase = Phase.SUBMITTING
        try:
            payload = await asyncio.to_thread(self._build_payload, form)
            if creating:
                await self.client.create(payload)
            else:
                await self.client.update(payload)
        except ApiError as exc:
            logger.warning("Saving user details failed: %s", exc.message)
            self.notifier.notify(exc.message, Severity.ERROR)
            return False
        finally:
            self.phase = Phase.IDLE

        verb = "created" if creating else "updated"
        self.notifier.notify(f"User details {verb} successfully")
        await self.load()
        return True
