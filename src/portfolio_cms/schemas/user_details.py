"""Pydantic schemas for the singleton user details resource."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator
from pydantic_core import PydanticCustomError

from portfolio_cms.schemas.common import ApiModel, FormModel, optional_text, require_text

SOCIAL_MEDIA_SEPARATOR = "|"


def format_social_media(icon: str, url: str) -> str:
    """Encode one social media link as ``"icon|url"``."""
    return f"{icon.strip()}{SOCIAL_MEDIA_SEPARATOR}{url.strip()}"


def parse_social_media(entry: str) -> tuple[str, str]:
    """Split an ``"icon|url"`` entry into ``(icon, url)``.

    Entries without a separator are treated as a bare URL with no icon.
    """
    icon, sep, url = entry.partition(SOCIAL_MEDIA_SEPARATOR)
    if not sep:
        return "", entry
    return icon, url


def is_valid_social_media(entry: str) -> bool:
    """Return True when ``entry`` holds exactly one separator and both halves."""
    if entry.count(SOCIAL_MEDIA_SEPARATOR) != 1:
        return False
    icon, url = parse_social_media(entry)
    return bool(icon.strip()) and bool(url.strip())


class UserDetails(ApiModel):
    """Public profile details shown on the portfolio (one per user)."""

    id: str
    user_id: str | None = None
    name: str
    role: str
    description: str | None = None
    social_medias: list[str] = Field(default_factory=list)
    profile_photo: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("social_medias", mode="before")
    @classmethod
    def _null_socials(cls, value: object) -> object:
        return value or []


class UserDetailsForm(FormModel):
    """Editable user details fields. The profile photo travels separately."""

    name: str
    role: str
    description: str | None = None
    social_medias: list[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: object) -> str:
        return require_text(value, "Name is required")

    @field_validator("role", mode="before")
    @classmethod
    def _check_role(cls, value: object) -> str:
        return require_text(value, "Role is required")

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value: object) -> str | None:
        return optional_text(value)

    @field_validator("social_medias")
    @classmethod
    def _check_social_medias(cls, value: list[str]) -> list[str]:
        for entry in value:
            if not is_valid_social_media(entry):
                raise PydanticCustomError(
                    "social_media", "Social media links must be formatted as icon|url"
                )
        return value
