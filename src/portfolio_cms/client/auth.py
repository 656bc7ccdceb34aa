"""Client for the ``/auth`` endpoints."""

from __future__ import annotations

from portfolio_cms.client.payload import Payload
from portfolio_cms.client.transport import ApiTransport, parse_data
from portfolio_cms.errors import ApiError, AuthError, TransportError
from portfolio_cms.schemas import AuthResult, User


class AuthClient:
    """Login, registration and identity lookup."""

    def __init__(self, transport: ApiTransport) -> None:
        self.transport = transport

    async def _authenticate(self, path: str, body: dict[str, str], failure: str) -> AuthResult:
        try:
            data = await self.transport.request(
                "POST",
                path,
                payload=Payload.json_body(body),
                failure=failure,
                authenticated=False,
            )
        except TransportError:
            raise
        except ApiError as exc:
            raise AuthError(exc.message, exc.status) from None
        return parse_data(AuthResult, data or None, failure, error=AuthError)

    async def login(self, identifier: str, password: str) -> AuthResult:
        """Exchange credentials for a token.

        Raises:
            AuthError: Credentials refused; carries the server's message.
            TransportError: The server could not be reached.
        """
        return await self._authenticate(
            "/auth/login", {"identifier": identifier, "password": password}, "Login failed"
        )

    async def register(self, *, email: str, username: str, password: str, name: str) -> AuthResult:
        return await self._authenticate(
            "/auth/register",
            {"email": email, "username": username, "password": password, "name": name},
            "Registration failed",
        )

    async def me(self) -> User:
        """Return the identity behind the current token."""
        failure = "Failed to get user"
        data = await self.transport.request("GET", "/auth/me", failure=failure)
        return parse_data(User, data or None, failure)
