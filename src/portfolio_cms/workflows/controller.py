"""Generic list/create/edit/delete workflow shared by every entity section.

One ``WorkflowController`` drives one section (skills, experience, ...). It
holds the loaded collection, the open form and the pending delete target,
and turns every client failure into a single notification so a failed call
always leaves the section usable (``IDLE`` or still ``MODAL_OPEN``).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from portfolio_cms.client.api import PortfolioApi
from portfolio_cms.client.resources import ResourceClient
from portfolio_cms.errors import ApiError, PortfolioCMSError, ValidationError
from portfolio_cms.models import ImageFile
from portfolio_cms.schemas import Skill, slugify
from portfolio_cms.schemas.validation import validate_form
from portfolio_cms.services.image_compression import compress_image
from portfolio_cms.workflows.descriptors import (
    Compressor,
    EntityDescriptor,
    SubmitContext,
    get_descriptor,
)
from portfolio_cms.workflows.images import ImageGallery, ImageSlot
from portfolio_cms.workflows.notifications import Notifier, RecordingNotifier, Severity

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)

Listener = Callable[[], None]


class Phase(StrEnum):
    LOADING = "loading"
    IDLE = "idle"
    MODAL_OPEN = "modal_open"
    SUBMITTING = "submitting"


class Mode(StrEnum):
    CREATE = "create"
    EDIT = "edit"


class InvalidTransition(PortfolioCMSError):
    """Raised when an operation is called from a state that does not allow it."""


class WorkflowController(Generic[E]):
    """State machine for one entity section.

    Args:
        descriptor: Static configuration of the entity kind.
        client: Resource client for the entity.
        skills_client: Client used to load the skill choices, for entities
            that associate skills.
        notifier: Receives success and error notifications.
        compress: Image transform applied to every new upload.
    """

    def __init__(
        self,
        descriptor: EntityDescriptor[E],
        client: ResourceClient[E],
        *,
        skills_client: ResourceClient[Skill] | None = None,
        notifier: Notifier | None = None,
        compress: Compressor = compress_image,
    ) -> None:
        self.descriptor = descriptor
        self.client = client
        self.skills_client = skills_client
        self.notifier: Notifier = notifier if notifier is not None else RecordingNotifier()
        self.compress = compress

        self.phase = Phase.LOADING
        self.mode: Mode | None = None
        self.editing: E | None = None
        self.items: list[E] = []
        self.skills: list[Skill] = []
        self.form: dict[str, Any] = {}
        self.field_errors: dict[str, str] = {}
        self.images: dict[str, ImageSlot] = {}
        self.galleries: dict[str, ImageGallery] = {}
        self.confirming_delete: str | None = None
        self.search_query = ""
        self._slug_overridden = False
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every state change; returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _notify(self, message: str, severity: Severity = Severity.INFORMATION) -> None:
        self.notifier.notify(message, severity)

    def _require(self, *phases: Phase) -> None:
        if self.phase not in phases:
            allowed = ", ".join(phase.value for phase in phases)
            raise InvalidTransition(f"Not allowed while {self.phase.value} (needs {allowed})")

    @property
    def visible_items(self) -> list[E]:
        """Loaded items matching the search query, in load order."""
        return [item for item in self.items if self.descriptor.matches(item, self.search_query)]

    def set_search(self, query: str) -> None:
        self.search_query = query
        self._changed()

    def find(self, key: str) -> E | None:
        """Return the loaded entity whose key is ``key``."""
        for item in self.items:
            if self.descriptor.entity_key(item) == key:
                return item
        return None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Fetch the collection (and the skill choices) and settle in ``IDLE``.

        The two lists are requested concurrently and both are awaited. On
        failure one error notification is shown and the previously loaded
        collection is kept (empty on first load).
        """
        try:
            if self.descriptor.uses_skills and self.skills_client is not None:
                items, skills = await asyncio.gather(
                    self.client.list(), self.skills_client.list()
                )
                self.skills = skills
            else:
                items = await self.client.list()
            self.items = items
        except ApiError as exc:
            logger.warning("Loading %s failed: %s", self.descriptor.key, exc.message)
            self._notify(self.descriptor.load_failure, Severity.ERROR)
        finally:
            if self.phase is Phase.LOADING:
                self.phase = Phase.IDLE
            self._changed()

    # ------------------------------------------------------------------
    # Form modal
    # ------------------------------------------------------------------

    def _open(self, mode: Mode, entity: E | None) -> None:
        self._require(Phase.IDLE)
        if self.confirming_delete is not None:
            raise InvalidTransition("A delete confirmation is already open")
        descriptor = self.descriptor
        self.mode = mode
        self.editing = entity
        self.form = descriptor.to_form(entity) if entity is not None else descriptor.defaults()
        self.field_errors = {}
        self.images = {name: ImageSlot(ref) for name, ref in descriptor.image_refs(entity).items()}
        self.galleries = {
            name: ImageGallery(refs) for name, refs in descriptor.gallery_refs(entity).items()
        }
        self._slug_overridden = False
        self.phase = Phase.MODAL_OPEN
        self._changed()

    def open_create(self) -> None:
        """Open an empty form for a new entity."""
        self._open(Mode.CREATE, None)

    def open_edit(self, entity: E) -> None:
        """Open the form pre-populated from ``entity``."""
        self._open(Mode.EDIT, entity)

    def set_field(self, name: str, value: Any) -> None:
        """Update one raw form value.

        While creating, a title change re-derives the slug unless the user
        typed a slug of their own.
        """
        self._require(Phase.MODAL_OPEN)
        self.form[name] = value
        self.field_errors.pop(name, None)
        if self.mode is Mode.CREATE and "slug" in self.form:
            if name == "title" and not self._slug_overridden:
                self.form["slug"] = slugify(str(value or ""))
                self.field_errors.pop("slug", None)
            elif name == "slug":
                self._slug_overridden = value != slugify(str(self.form.get("title") or ""))
        self._changed()

    def toggle_skill(self, skill_id: str) -> None:
        """Add or remove ``skill_id`` from the form's skill selection."""
        self._require(Phase.MODAL_OPEN)
        selected = list(self.form.get("skill_ids") or [])
        if skill_id in selected:
            selected.remove(skill_id)
        else:
            selected.append(skill_id)
        self.form["skill_ids"] = selected
        self._changed()

    def select_image(self, name: str, image: ImageFile) -> None:
        self._require(Phase.MODAL_OPEN)
        self.images.setdefault(name, ImageSlot()).select(image)
        self.field_errors.pop(name, None)
        self._changed()

    def clear_image(self, name: str) -> None:
        self._require(Phase.MODAL_OPEN)
        if name in self.images:
            self.images[name].clear()
        self._changed()

    def add_gallery_images(self, name: str, images: list[ImageFile]) -> None:
        self._require(Phase.MODAL_OPEN)
        self.galleries.setdefault(name, ImageGallery()).add(images)
        self._changed()

    def remove_gallery_image(self, name: str, index: int) -> None:
        """Remove the image shown at ``index`` in gallery ``name``.

        Raises:
            IndexError: Nothing is shown at ``index``.
        """
        self._require(Phase.MODAL_OPEN)
        self.galleries[name].remove(index)
        self._changed()

    def _close(self) -> None:
        self.phase = Phase.IDLE
        self.mode = None
        self.editing = None
        self.form = {}
        self.field_errors = {}
        self.images = {}
        self.galleries = {}
        self._slug_overridden = False

    def cancel(self) -> None:
        """Discard the open form and its image previews."""
        self._require(Phase.MODAL_OPEN)
        self._close()
        self._changed()

    async def submit(self) -> bool:
        """Validate the form and create or update the entity.

        Returns:
            True once the mutation succeeded, the list was refetched and the
            form closed. False when validation blocked the request (errors in
            ``field_errors``) or the server refused it (form stays open).
        """
        self._require(Phase.MODAL_OPEN)
        descriptor = self.descriptor
        try:
            form = validate_form(descriptor.form_model, self.form)
        except ValidationError as exc:
            self.field_errors = exc.field_errors
            self._changed()
            return False

        context = SubmitContext(
            editing=self.editing,
            images=self.images,
            galleries=self.galleries,
            compress=self.compress,
        )
        image_errors = descriptor.check_images(context)
        if image_errors:
            self.field_errors = image_errors
            self._notify(next(iter(image_errors.values())), Severity.ERROR)
            self._changed()
            return False

        self.phase = Phase.SUBMITTING
        self._changed()
        try:
            # Compression is CPU bound; keep it off the event loop.
            payload = await asyncio.to_thread(descriptor.payload_for, form, context)
            if self.editing is not None:
                await self.client.update(descriptor.entity_key(self.editing), payload)
                message = f"{descriptor.singular} updated successfully"
            else:
                await self.client.create(payload)
                message = f"{descriptor.singular} created successfully"
        except ApiError as exc:
            logger.warning("Saving %s failed: %s", descriptor.singular.lower(), exc.message)
            self.phase = Phase.MODAL_OPEN
            self._notify(exc.message, Severity.ERROR)
            self._changed()
            return False
        except Exception:
            self.phase = Phase.MODAL_OPEN
            self._changed()
            raise

        self._notify(message)
        await self.load()
        self._close()
        self._changed()
        return True

    # ------------------------------------------------------------------
    # Delete confirmation
    # ------------------------------------------------------------------

    def request_delete(self, key: str) -> None:
        """Ask for confirmation before deleting the entity with ``key``."""
        self._require(Phase.IDLE)
        if self.confirming_delete is not None:
            raise InvalidTransition("A delete confirmation is already open")
        self.confirming_delete = key
        self._changed()

    def dismiss_delete(self) -> None:
        """Close the confirmation without any request."""
        self.confirming_delete = None
        self._changed()

    async def confirm_delete(self) -> bool:
        """Delete the entity awaiting confirmation, then refetch the list.

        Returns:
            True on success. On failure the confirmation stays open so the
            user can retry or dismiss it.
        """
        key = self.confirming_delete
        if key is None:
            raise InvalidTransition("No delete is awaiting confirmation")
        descriptor = self.descriptor
        try:
            await self.client.delete(key)
        except ApiError as exc:
            logger.warning("Deleting %s %s failed: %s", descriptor.singular.lower(), key, exc)
            self._notify(f"Failed to delete {descriptor.singular.lower()}", Severity.ERROR)
            self._changed()
            return False

        self._notify(f"{descriptor.singular} deleted successfully")
        await self.load()
        self.confirming_delete = None
        self._changed()
        return True


def controller_for(
    key: str,
    api: PortfolioApi,
    *,
    notifier: Notifier | None = None,
    compress: Compressor = compress_image,
) -> WorkflowController[Any]:
    """Build the controller for section ``key`` ("skills", "projects", ...)."""
    descriptor = get_descriptor(key)
    return WorkflowController(
        descriptor,
        getattr(api, descriptor.key),
        skills_client=api.skills if descriptor.uses_skills else None,
        notifier=notifier,
        compress=compress,
    )
