"""Pydantic schemas for work experience entries."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, ValidationInfo, field_validator
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


class Experience(ApiModel):
    """A work experience entry. ``end_year`` of None means the job is current."""

    id: str
    user_id: str | None = None
    start_year: int
    end_year: int | None = None
    company_name: str
    description: str | None = None
    location: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    experience_skills: list[SkillLink] = Field(default_factory=list)

    @property
    def skill_ids(self) -> list[str]:
        return [link.skill.id for link in self.experience_skills]

    @property
    def skill_names(self) -> list[str]:
        return [link.skill.name for link in self.experience_skills]

    @property
    def is_current(self) -> bool:
        return self.end_year is None


class ExperienceForm(FormModel):
    """Editable experience fields.

    ``is_current_job`` is declared before ``end_year`` so the end-year
    validators can see it: when set, the end year is forced to None
    whatever the raw field holds.
    """

    start_year: int
    is_current_job: bool = False
    end_year: int | None = None
    company_name: str
    description: str | None = None
    location: str
    skill_ids: list[str] = Field(default_factory=list)

    @field_validator("start_year", mode="before")
    @classmethod
    def _coerce_start_year(cls, value: object) -> int:
        year = coerce_year(value)
        if year is None:
            raise PydanticCustomError("required", "Start year is required")
        return year

    @field_validator("start_year")
    @classmethod
    def _check_start_year(cls, value: int) -> int:
        return check_year_bounds(value)

    @field_validator("end_year", mode="before")
    @classmethod
    def _coerce_end_year(cls, value: object, info: ValidationInfo) -> int | None:
        if info.data.get("is_current_job"):
            return None
        return coerce_year(value)

    @field_validator("end_year")
    @classmethod
    def _check_end_year(cls, value: int | None, info: ValidationInfo) -> int | None:
        if value is None:
            return None
        check_year_bounds(value)
        start_year = info.data.get("start_year")
        if start_year is not None and value < start_year:
            raise PydanticCustomError("end_before_start", "End year cannot be before start year")
        return value

    @field_validator("company_name", mode="before")
    @classmethod
    def _check_company(cls, value: object) -> str:
        return require_text(value, "Company name is required")

    @field_validator("location", mode="before")
    @classmethod
    def _check_location(cls, value: object) -> str:
        return require_text(value, "Location is required")

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value: object) -> str | None:
        return optional_text(value)

    @field_validator("skill_ids", mode="before")
    @classmethod
    def _normalize_skill_ids(cls, value: object) -> list[str]:
        return skill_id_list(value)
