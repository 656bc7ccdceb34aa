"""Pydantic schemas for skills."""

from __future__ import annotations

from pydantic import field_validator

from portfolio_cms.schemas.common import FormModel, Skill, SkillLink, require_text

__all__ = ["Skill", "SkillForm", "SkillLink"]


class SkillForm(FormModel):
    """Editable skill fields. The icon travels separately as an image upload."""

    name: str

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: object) -> str:
        return require_text(value, "Skill name is required")
