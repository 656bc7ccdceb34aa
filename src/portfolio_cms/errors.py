"""Exception hierarchy shared by the client, session store and workflows."""

from __future__ import annotations

DEFAULT_FAILURE_MESSAGE = "Operation failed"


class PortfolioCMSError(Exception):
    """Base class for all portfolio-cms errors."""


class ValidationError(PortfolioCMSError):
    """Raised when a form fails local validation.

    Attributes:
        field_errors: Mapping of form field name to its first error message.
    """

    def __init__(self, field_errors: dict[str, str]) -> None:
        self.field_errors = dict(field_errors)
        summary = "; ".join(f"{name}: {message}" for name, message in self.field_errors.items())
        super().__init__(summary or "Invalid form data")

    def first_message(self) -> str:
        """Return the first field message, used for single-line notifications."""
        for message in self.field_errors.values():
            return message
        return "Invalid form data"


class ApiError(PortfolioCMSError):
    """Raised when the API answers with ``success: false`` or a non-2xx status."""

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        self.message = message or DEFAULT_FAILURE_MESSAGE
        self.status = status
        super().__init__(self.message)


class TransportError(ApiError):
    """Raised on network failures and timeouts, where no server message exists."""


class AuthError(ApiError):
    """Raised when login or registration is refused."""
