"""Pydantic schemas for education entries."""

from __future__ import annotations

from datetime import datetime

from pydantic import field_validator

from portfolio_cms.schemas.common import ApiModel, FormModel, optional_text, require_text


class Education(ApiModel):
    """An education entry. ``year`` is free text such as ``"2018 - 2022"``."""

    id: str
    user_id: str | None = None
    year: str
    institution_name: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EducationForm(FormModel):
    """Editable education fields."""

    year: str
    institution_name: str
    description: str | None = None

    @field_validator("year", mode="before")
    @classmethod
    def _check_year(cls, value: object) -> str:
        return require_text(value, "Year is required")

    @field_validator("institution_name", mode="before")
    @classmethod
    def _check_institution(cls, value: object) -> str:
        return require_text(value, "Institution name is required")

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value: object) -> str | None:
        return optional_text(value)
