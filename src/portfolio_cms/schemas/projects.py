"""Pydantic schemas for portfolio projects."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import Field, field_validator
from pydantic_core import PydanticCustomError

from portfolio_cms.schemas.common import ApiModel, FormModel, SkillLink, require_text, skill_id_list

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")
_HTML_TAG = re.compile(r"<[^>]+>")


def slugify(title: str) -> str:
    """Derive a URL-safe slug from a project title.

    Lowercases, collapses every run of characters outside ``[a-z0-9]`` into a
    single hyphen and strips leading/trailing hyphens, so
    ``"My Cool Project!"`` becomes ``"my-cool-project"``.
    """
    return _SLUG_SEPARATORS.sub("-", title.lower()).strip("-")


class Project(ApiModel):
    """A portfolio project with rich-text content and images."""

    id: str
    user_id: str | None = None
    title: str
    slug: str
    description: str
    content: str = ""
    cover_image: str | None = None
    content_images: list[str] = Field(default_factory=list)
    published_at: datetime | None = None
    published: bool = False
    highlighted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    project_skills: list[SkillLink] = Field(default_factory=list)

    @field_validator("content_images", mode="before")
    @classmethod
    def _null_images(cls, value: object) -> object:
        return value or []

    @property
    def skill_ids(self) -> list[str]:
        return [link.skill.id for link in self.project_skills]

    @property
    def skill_names(self) -> list[str]:
        return [link.skill.name for link in self.project_skills]

    @property
    def is_published(self) -> bool:
        return self.published or self.published_at is not None


class ProjectForm(FormModel):
    """Editable project fields. Cover and content images travel separately."""

    title: str
    slug: str
    description: str
    content: str
    published: bool = False
    skill_ids: list[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value: object) -> str:
        return require_text(value, "Title is required")

    @field_validator("slug", mode="before")
    @classmethod
    def _check_slug(cls, value: object) -> str:
        slug = require_text(value, "Slug is required")
        if not SLUG_PATTERN.match(slug):
            raise PydanticCustomError("slug", "Slug must be lowercase with hyphens only")
        return slug

    @field_validator("description", mode="before")
    @classmethod
    def _check_description(cls, value: object) -> str:
        return require_text(value, "Description is required")

    @field_validator("content", mode="before")
    @classmethod
    def _check_content(cls, value: object) -> str:
        content = "" if value is None else str(value)
        # An emptied rich-text editor still leaves markup such as "<p></p>".
        require_text(_HTML_TAG.sub("", content), "Content is required")
        return content

    @field_validator("skill_ids", mode="before")
    @classmethod
    def _normalize_skill_ids(cls, value: object) -> list[str]:
        return skill_id_list(value)
