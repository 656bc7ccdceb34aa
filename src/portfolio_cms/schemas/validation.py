"""Turn Pydantic form errors into field-scoped ``ValidationError``s."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from portfolio_cms.errors import ValidationError

F = TypeVar("F", bound=BaseModel)

_VALUE_ERROR_PREFIX = "Value error, "


def _clean_message(message: str) -> str:
    if message.startswith(_VALUE_ERROR_PREFIX):
        return message[len(_VALUE_ERROR_PREFIX) :]
    return message


def validate_form(form_cls: type[F], values: Mapping[str, Any]) -> F:
    """Validate raw form ``values`` against ``form_cls``.

    Returns:
        The validated form model.

    Raises:
        ValidationError: Mapping each failing field to its first message.
    """
    try:
        return form_cls.model_validate(dict(values))
    except PydanticValidationError as exc:
        field_errors: dict[str, str] = {}
        for error in exc.errors():
            loc = error.get("loc") or ("__root__",)
            field = str(loc[0])
            if error.get("type") == "missing":
                message = f"{field.replace('_', ' ').capitalize()} is required"
            else:
                message = _clean_message(error.get("msg", "Invalid value"))
            field_errors.setdefault(field, message)
        raise ValidationError(field_errors) from None
