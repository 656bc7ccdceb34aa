"""Shared Pydantic schemas and validation helpers."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

MIN_YEAR = 1900
MAX_YEAR_AHEAD = 10


class ApiModel(BaseModel):
    """Base for models received from the API (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Envelope(BaseModel):
    """Uniform response wrapper returned by every API call."""

    success: bool = False
    data: Any | None = None
    error: str | None = None
    message: str | None = None


class Skill(ApiModel):
    """A skill owned by the signed-in user."""

    id: str
    user_id: str | None = None
    name: str
    icon: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SkillLink(ApiModel):
    """Association record linking an entity to one of the user's skills."""

    skill: Skill


class FormModel(BaseModel):
    """Base for client-side form schemas (snake_case field names)."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


def max_year() -> int:
    """Return the latest accepted year (current year + 10)."""
    return date.today().year + MAX_YEAR_AHEAD


def require_text(value: Any, message: str) -> str:
    """Return ``value`` stripped, raising ``message`` when it is blank."""
    text = "" if value is None else str(value).strip()
    if not text:
        raise PydanticCustomError("required", message)
    return text


def optional_text(value: Any) -> str | None:
    """Normalize a free-text field: blank means absent."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def coerce_year(value: Any, message: str = "Invalid year") -> int | None:
    """Convert raw form input into a year, ``None`` when left blank."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise PydanticCustomError("year", message)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    if not text.isdigit():
        raise PydanticCustomError("year", message)
    return int(text)


def check_year_bounds(value: int) -> int:
    """Ensure ``value`` lies within [1900, current year + 10]."""
    upper = max_year()
    if value < MIN_YEAR or value > upper:
        raise PydanticCustomError(
            "year_range",
            "Year must be between {lower} and {upper}",
            {"lower": MIN_YEAR, "upper": upper},
        )
    return value


def skill_id_list(value: Any) -> list[str]:
    """Normalize a raw selection of skill ids to a de-duplicated list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    seen: list[str] = []
    for item in value:
        text = str(item).strip()
        if text and text not in seen:
            seen.append(text)
    return seen
