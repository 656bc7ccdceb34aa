"""Pydantic schemas for certifications."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, HttpUrl, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from portfolio_cms.schemas.common import (
    ApiModel,
    FormModel,
    SkillLink,
    check_year_bounds,
    coerce_year,
    optional_text,
    require_text,
    skill_id_list,
)

_URL_ADAPTER = TypeAdapter(HttpUrl)


class Certification(ApiModel):
    """A certification, optionally linked to a public certificate URL."""

    id: str
    user_id: str | None = None
    name: str
    issuing_organization: str
    year: int
    description: str | None = None
    certificate_link: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    certification_skills: list[SkillLink] = Field(default_factory=list)

    @property
    def skill_ids(self) -> list[str]:
        return [link.skill.id for link in self.certification_skills]

    @property
    def skill_names(self) -> list[str]:
        return [link.skill.name for link in self.certification_skills]


class CertificationForm(FormModel):
    """Editable certification fields. An empty link means "no link"."""

    name: str
    issuing_organization: str
    year: int
    description: str | None = None
    certificate_link: str | None = None
    skill_ids: list[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: object) -> str:
        return require_text(value, "Name is required")

    @field_validator("issuing_organization", mode="before")
    @classmethod
    def _check_organization(cls, value: object) -> str:
        return require_text(value, "Issuing organization is required")

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: object) -> int:
        year = coerce_year(value)
        if year is None:
            raise PydanticCustomError("required", "Year is required")
        return year

    @field_validator("year")
    @classmethod
    def _check_year(cls, value: int) -> int:
        return check_year_bounds(value)

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value: object) -> str | None:
        return optional_text(value)

    @field_validator("certificate_link", mode="before")
    @classmethod
    def _check_link(cls, value: object) -> str | None:
        link = optional_text(value)
        if link is None:
            return None
        try:
            _URL_ADAPTER.validate_python(link)
        except PydanticValidationError:
            raise PydanticCustomError("url", "Invalid URL") from None
        return link

    @field_validator("skill_ids", mode="before")
    @classmethod
    def _normalize_skill_ids(cls, value: object) -> list[str]:
        return skill_id_list(value)
