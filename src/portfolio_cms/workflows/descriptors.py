"""Static per-entity configuration consumed by the generic workflow controller.

Each ``EntityDescriptor`` says which form schema validates the entity, how
an existing entity pre-populates the form, which fields are searched, which
image fields it carries and how a validated form becomes a request payload.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from portfolio_cms.client.payload import Payload
from portfolio_cms.models import ImageFile
from portfolio_cms.schemas import (
    Certification,
    CertificationForm,
    Education,
    EducationForm,
    Experience,
    ExperienceForm,
    Project,
    ProjectForm,
    Skill,
    SkillForm,
)
from portfolio_cms.schemas.common import FormModel
from portfolio_cms.workflows.images import ImageGallery, ImageSlot

E = TypeVar("E", bound=BaseModel)

Compressor = Callable[[ImageFile], ImageFile]

ICON_REQUIRED_MESSAGE = "Icon is required for new skills"


class FieldKind(StrEnum):
    TEXT = "text"
    TEXTAREA = "textarea"
    RICH_TEXT = "rich_text"
    YEAR = "year"
    CHECKBOX = "checkbox"
    SKILLS = "skills"
    IMAGE = "image"
    GALLERY = "gallery"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One input shown in an entity form."""

    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    placeholder: str = ""
    required: bool = False


@dataclass(slots=True)
class SubmitContext(Generic[E]):
    """Everything besides the validated form that a payload builder needs."""

    editing: E | None
    images: Mapping[str, ImageSlot]
    galleries: Mapping[str, ImageGallery]
    compress: Compressor


@dataclass(frozen=True)
class EntityDescriptor(Generic[E]):
    """Static description of one editable entity kind.

    Attributes:
        key: Section key, also the name used on the command line ("skills").
        singular: Label used in notifications ("Skill").
        plural: Section title ("Skills").
        form_model: Pydantic form schema validating the raw form values.
        fields: Inputs shown in the form, in display order.
        defaults: Returns the form values for a new entity.
        to_form: Returns the form values pre-populated from an entity.
        build_payload: Turns a validated form into a request payload.
        search_fields: Returns the texts matched by the search box.
        uses_skills: Whether the form associates skills (loads the skill list).
        multipart: Whether the payload is sent as a multipart form.
        image_refs: Returns the stored reference of each single-image field.
        gallery_refs: Returns the stored references of each multi-image field.
        check_images: Returns field errors for missing images, before any request.
        load_failure: Notification shown when loading the list fails.
    """

    key: str
    singular: str
    plural: str
    form_model: type[FormModel]
    fields: tuple[FieldSpec, ...]
    defaults: Callable[[], dict[str, Any]]
    to_form: Callable[[E], dict[str, Any]]
    build_payload: Callable[[Any, SubmitContext[E]], Payload]
    search_fields: Callable[[E], Iterable[str | None]]
    uses_skills: bool = False
    multipart: bool = False
    image_refs: Callable[[E | None], dict[str, str | None]] = field(default=lambda _: {})
    gallery_refs: Callable[[E | None], dict[str, list[str]]] = field(default=lambda _: {})
    check_images: Callable[[SubmitContext[E]], dict[str, str]] = field(default=lambda _: {})
    load_failure: str = "Failed to load data"

    def entity_key(self, entity: E) -> str:
        """Return the identifier used for update and delete calls."""
        return str(entity.id)

    def payload_for(self, form: Any, context: SubmitContext[E]) -> Payload:
        """Build the request body and check it has the declared kind.

        Raises:
            TypeError: The builder returned JSON for a multipart entity, or the
                reverse.
        """
        payload = self.build_payload(form, context)
        if payload.is_multipart != self.multipart:
            expected = "multipart" if self.multipart else "JSON"
            raise TypeError(f"{self.key} payload must be a {expected} body")
        return payload

    def matches(self, entity: E, query: str) -> bool:
        """Case-insensitive substring match of ``query`` over the search fields."""
        needle = query.casefold()
        if not needle:
            return True
        return any(needle in (text or "").casefold() for text in self.search_fields(entity))


# ----------------------------------------------------------------------
# Payload helpers
# ----------------------------------------------------------------------


def attach_image(
    name: str,
    slot: ImageSlot | None,
    compress: Compressor,
    fields: list[tuple[str, str]],
    files: list[tuple[str, ImageFile]],
) -> None:
    """Add one single-image field to a multipart body.

    A newly picked file is compressed and uploaded. A kept stored image is
    re-sent as its reference; an explicitly removed one is sent empty.
    """
    if slot is None:
        return
    if slot.pending is not None:
        files.append((name, compress(slot.pending)))
    elif slot.ref is not None:
        fields.append((name, slot.ref))
    elif slot.removed:
        fields.append((name, ""))


def _current_year() -> int:
    return date.today().year


# ----------------------------------------------------------------------
# Skills
# ----------------------------------------------------------------------


def _skill_payload(form: SkillForm, ctx: SubmitContext[Skill]) -> Payload:
    fields: list[tuple[str, str]] = [("name", form.name)]
    files: list[tuple[str, ImageFile]] = []
    attach_image("icon", ctx.images.get("icon"), ctx.compress, fields, files)
    return Payload.multipart(fields, files)


def _skill_icon_check(ctx: SubmitContext[Skill]) -> dict[str, str]:
    slot = ctx.images.get("icon")
    if ctx.editing is None and (slot is None or slot.pending is None):
        return {"icon": ICON_REQUIRED_MESSAGE}
    return {}


SKILLS: EntityDescriptor[Skill] = EntityDescriptor(
    key="skills",
    singular="Skill",
    plural="Skills",
    form_model=SkillForm,
    fields=(
        FieldSpec("name", "Skill Name", placeholder="e.g., React, Python", required=True),
        FieldSpec("icon", "Icon", FieldKind.IMAGE),
    ),
    defaults=lambda: {"name": ""},
    to_form=lambda skill: {"name": skill.name},
    build_payload=_skill_payload,
    search_fields=lambda skill: (skill.name,),
    multipart=True,
    image_refs=lambda skill: {"icon": skill.icon if skill else None},
    check_images=_skill_icon_check,
    load_failure="Failed to load skills",
)


# ----------------------------------------------------------------------
# Experience
# ----------------------------------------------------------------------


def _experience_payload(form: ExperienceForm, ctx: SubmitContext[Experience]) -> Payload:
    body: dict[str, Any] = {
        "startYear": form.start_year,
        "endYear": None if form.is_current_job else form.end_year,
        "companyName": form.company_name,
        "location": form.location,
        "skillIds": form.skill_ids,
    }
    if form.description is not None:
        body["description"] = form.description
    return Payload.json_body(body)


def _experience_form(entry: Experience) -> dict[str, Any]:
    return {
        "start_year": entry.start_year,
        "end_year": entry.end_year,
        "is_current_job": entry.is_current,
        "company_name": entry.company_name,
        "description": entry.description or "",
        "location": entry.location,
        "skill_ids": entry.skill_ids,
    }


EXPERIENCE: EntityDescriptor[Experience] = EntityDescriptor(
    key="experience",
    singular="Experience",
    plural="Experience",
    form_model=ExperienceForm,
    fields=(
        FieldSpec("company_name", "Company Name", placeholder="e.g., Google", required=True),
        FieldSpec("location", "Location", placeholder="e.g., Remote", required=True),
        FieldSpec("start_year", "Start Year", FieldKind.YEAR, required=True),
        FieldSpec("is_current_job", "I currently work here", FieldKind.CHECKBOX),
        FieldSpec("end_year", "End Year", FieldKind.YEAR),
        FieldSpec("description", "Description", FieldKind.TEXTAREA),
        FieldSpec("skill_ids", "Skills", FieldKind.SKILLS),
    ),
    defaults=lambda: {
        "start_year": _current_year(),
        "end_year": None,
        "is_current_job": False,
        "company_name": "",
        "description": "",
        "location": "",
        "skill_ids": [],
    },
    to_form=_experience_form,
    build_payload=_experience_payload,
    search_fields=lambda entry: (entry.company_name, entry.location, entry.description),
    uses_skills=True,
)


# ----------------------------------------------------------------------
# Education
# ----------------------------------------------------------------------


def _education_payload(form: EducationForm, ctx: SubmitContext[Education]) -> Payload:
    body: dict[str, Any] = {"year": form.year, "institutionName": form.institution_name}
    if form.description is not None:
        body["description"] = form.description
    return Payload.json_body(body)


EDUCATION: EntityDescriptor[Education] = EntityDescriptor(
    key="education",
    singular="Education",
    plural="Education",
    form_model=EducationForm,
    fields=(
        FieldSpec("institution_name", "Institution Name", required=True),
        FieldSpec("year", "Year", placeholder="e.g., 2020 - 2024", required=True),
        FieldSpec("description", "Description", FieldKind.TEXTAREA),
    ),
    defaults=lambda: {"year": "", "institution_name": "", "description": ""},
    to_form=lambda entry: {
        "year": entry.year,
        "institution_name": entry.institution_name,
        "description": entry.description or "",
    },
    build_payload=_education_payload,
    search_fields=lambda entry: (entry.institution_name, entry.description),
)


# ----------------------------------------------------------------------
# Certifications
# ----------------------------------------------------------------------


def _certification_payload(
    form: CertificationForm, ctx: SubmitContext[Certification]
) -> Payload:
    body: dict[str, Any] = {
        "name": form.name,
        "issuingOrganization": form.issuing_organization,
        "year": form.year,
        "skillIds": form.skill_ids,
    }
    if form.description is not None:
        body["description"] = form.description
    if form.certificate_link:
        body["certificateLink"] = form.certificate_link
    return Payload.json_body(body)


CERTIFICATIONS: EntityDescriptor[Certification] = EntityDescriptor(
    key="certifications",
    singular="Certification",
    plural="Certifications",
    form_model=CertificationForm,
    fields=(
        FieldSpec("name", "Certification Name", required=True),
        FieldSpec("issuing_organization", "Issuing Organization", required=True),
        FieldSpec("year", "Year", FieldKind.YEAR, required=True),
        FieldSpec("certificate_link", "Certificate Link", placeholder="https://..."),
        FieldSpec("description", "Description", FieldKind.TEXTAREA),
        FieldSpec("skill_ids", "Skills", FieldKind.SKILLS),
    ),
    defaults=lambda: {
        "name": "",
        "issuing_organization": "",
        "year": _current_year(),
        "description": "",
        "certificate_link": "",
        "skill_ids": [],
    },
    to_form=lambda cert: {
        "name": cert.name,
        "issuing_organization": cert.issuing_organization,
        "year": cert.year,
        "description": cert.description or "",
        "certificate_link": cert.certificate_link or "",
        "skill_ids": cert.skill_ids,
    },
    build_payload=_certification_payload,
    search_fields=lambda cert: (cert.name, cert.issuing_organization, cert.description),
    uses_skills=True,
)


# ----------------------------------------------------------------------
# Projects
# ----------------------------------------------------------------------


def _published_at(editing: Project | None) -> str:
    if editing is not None and editing.published_at is not None:
        return editing.published_at.isoformat()
    return datetime.now(UTC).isoformat()


def _project_payload(form: ProjectForm, ctx: SubmitContext[Project]) -> Payload:
    fields: list[tuple[str, str]] = [
        ("title", form.title),
        ("slug", form.slug),
        ("description", form.description),
        ("content", form.content),
        ("published", "true" if form.published else "false"),
    ]
    if form.published:
        fields.append(("publishedAt", _published_at(ctx.editing)))
    fields.extend(("skillIds[]", skill_id) for skill_id in form.skill_ids)

    files: list[tuple[str, ImageFile]] = []
    attach_image("coverImage", ctx.images.get("cover_image"), ctx.compress, fields, files)

    gallery = ctx.galleries.get("content_images")
    if gallery is not None:
        files.extend(("contentImages", ctx.compress(image)) for image in gallery.pending_files)
        if ctx.editing is not None:
            fields.append(("existingContentImages", json.dumps(gallery.persisted_refs)))
    return Payload.multipart(fields, files)


PROJECTS: EntityDescriptor[Project] = EntityDescriptor(
    key="projects",
    singular="Project",
    plural="Projects",
    form_model=ProjectForm,
    fields=(
        FieldSpec("title", "Title", required=True),
        FieldSpec("slug", "Slug", placeholder="my-project", required=True),
        FieldSpec("description", "Description", FieldKind.TEXTAREA, required=True),
        FieldSpec("content", "Content", FieldKind.RICH_TEXT, required=True),
        FieldSpec("published", "Published", FieldKind.CHECKBOX),
        FieldSpec("cover_image", "Cover Image", FieldKind.IMAGE),
        FieldSpec("content_images", "Content Images", FieldKind.GALLERY),
        FieldSpec("skill_ids", "Skills", FieldKind.SKILLS),
    ),
    defaults=lambda: {
        "title": "",
        "slug": "",
        "description": "",
        "content": "",
        "published": False,
        "skill_ids": [],
    },
    to_form=lambda project: {
        "title": project.title,
        "slug": project.slug,
        "description": project.description,
        "content": project.content,
        "published": project.is_published,
        "skill_ids": project.skill_ids,
    },
    build_payload=_project_payload,
    search_fields=lambda project: (project.title, project.description, *project.skill_names),
    uses_skills=True,
    multipart=True,
    image_refs=lambda project: {"cover_image": project.cover_image if project else None},
    gallery_refs=lambda project: {
        "content_images": list(project.content_images) if project else []
    },
)


DESCRIPTORS: dict[str, EntityDescriptor[Any]] = {
    descriptor.key: descriptor
    for descriptor in (SKILLS, EXPERIENCE, EDUCATION, CERTIFICATIONS, PROJECTS)
}


def get_descriptor(key: str) -> EntityDescriptor[Any]:
    """Return the descriptor registered under ``key``.

    Raises:
        KeyError: ``key`` names no editable section.
    """
    try:
        return DESCRIPTORS[key]
    except KeyError:
        raise KeyError(f"Unknown section {key!r}; choose one of {', '.join(DESCRIPTORS)}") from None
