"""Pydantic schemas for authentication."""

from __future__ import annotations

from pydantic import EmailStr, field_validator

from portfolio_cms.schemas.common import ApiModel, FormModel, require_text

MIN_IDENTIFIER_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


class User(ApiModel):
    """Authenticated identity returned by the auth endpoints."""

    id: str
    email: str
    username: str
    name: str = ""


class AuthResult(ApiModel):
    """Payload of a successful login or registration."""

    user: User
    token: str


class LoginForm(FormModel):
    """Credentials entered on the login surface."""

    identifier: str
    password: str

    @field_validator("identifier", mode="before")
    @classmethod
    def _check_identifier(cls, value: object) -> str:
        text = "" if value is None else str(value).strip()
        if len(text) < MIN_IDENTIFIER_LENGTH:
            raise ValueError(
                f"Username/Email must be at least {MIN_IDENTIFIER_LENGTH} characters"
            )
        return text

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, value: object) -> str:
        text = "" if value is None else str(value)
        if len(text) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return text


class RegisterForm(LoginForm):
    """Account details entered on the registration surface.

    ``identifier`` doubles as the username.
    """

    email: EmailStr
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: object) -> str:
        return require_text(value, "Name is required")
