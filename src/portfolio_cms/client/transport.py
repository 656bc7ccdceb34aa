"""HTTP transport for the portfolio API.

Wraps a single ``httpx.AsyncClient`` and unwraps the uniform response
envelope ``{success, data?, error?}``. Every failure surfaces as an
``ApiError`` (``TransportError`` when the server could not be reached) so
callers only ever handle one error type. There are no retries.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from portfolio_cms.client.payload import Payload
from portfolio_cms.errors import DEFAULT_FAILURE_MESSAGE, ApiError, TransportError
from portfolio_cms.schemas import Envelope

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT = 30.0

TokenProvider = Callable[[], str | None]

M = TypeVar("M", bound=BaseModel)


def get_api_base_url() -> str:
    """Return the API base URL, allowing overrides via environment variable."""
    return (os.getenv("PORTFOLIO_API_URL") or DEFAULT_API_URL).rstrip("/")


def get_api_timeout() -> float:
    """Return the transport timeout in seconds."""
    raw = os.getenv("PORTFOLIO_API_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid PORTFOLIO_API_TIMEOUT=%r", raw)
        return DEFAULT_TIMEOUT


def parse_data(
    model: type[M], data: Any, failure: str, *, error: type[ApiError] = ApiError
) -> M:
    """Validate an envelope's ``data`` as ``model``.

    Raises:
        ApiError: ``data`` is missing or does not fit ``model``; ``error`` picks
            the subclass raised, with ``failure`` as its message.
    """
    if data is None:
        raise error(failure)
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        logger.warning("Unexpected %s payload: %s", model.__name__, exc)
        raise error(failure) from exc


class ApiTransport:
    """Sends requests to the portfolio API and unwraps its envelope.

    Args:
        base_url: API root; defaults to ``PORTFOLIO_API_URL``.
        token_provider: Returns the current credential token, read on every call.
        timeout: Transport timeout in seconds; defaults to ``PORTFOLIO_API_TIMEOUT``.
        on_unauthorized: Called when an authenticated call answers 401.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        token_provider: TokenProvider | None = None,
        timeout: float | None = None,
        on_unauthorized: Callable[[], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or get_api_base_url()).rstrip("/")
        self.timeout = timeout if timeout is not None else get_api_timeout()
        self._token_provider = token_provider
        self._on_unauthorized = on_unauthorized
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url + "/",
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def set_token_provider(self, provider: TokenProvider | None) -> None:
        self._token_provider = provider

    def set_unauthorized_handler(self, handler: Callable[[], None] | None) -> None:
        self._on_unauthorized = handler

    def _headers(self, authenticated: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._token_provider() if authenticated and self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        payload: Payload | None = None,
        failure: str = DEFAULT_FAILURE_MESSAGE,
        authenticated: bool = True,
    ) -> Any:
        """Perform one API call and return the envelope's ``data``.

        Args:
            method: HTTP method.
            path: Path relative to the API root, e.g. ``/skills``.
            payload: Optional JSON or form body.
            failure: Message used when the server gives none.
            authenticated: Attach the token and honour the 401 hook.

        Raises:
            TransportError: The request never got a response.
            ApiError: Non-2xx status, ``success: false`` or a malformed body.
        """
        kwargs = payload.request_kwargs() if payload is not None else {}
        try:
            response = await self.client.request(
                method,
                path.lstrip("/"),
                headers=self._headers(authenticated),
                **kwargs,
            )
        except httpx.TimeoutException:
            logger.error("Timeout calling %s %s", method, path)
            raise TransportError(failure) from None
        except httpx.RequestError as exc:
            logger.error("Error calling %s %s (%s)", method, path, exc)
            raise TransportError(failure) from None

        if response.status_code == httpx.codes.UNAUTHORIZED and authenticated:
            logger.warning("Credential rejected by %s %s", method, path)
            if self._on_unauthorized is not None:
                self._on_unauthorized()

        envelope = self._parse_envelope(response)
        if envelope is None:
            raise ApiError(failure, response.status_code)

        if not response.is_success or not envelope.success:
            message = envelope.error or envelope.message or failure
            logger.warning("%s %s refused (%s): %s", method, path, response.status_code, message)
            raise ApiError(message, response.status_code)

        return envelope.data

    @staticmethod
    def _parse_envelope(response: httpx.Response) -> Envelope | None:
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            return None
        try:
            return Envelope.model_validate(body)
        except PydanticValidationError:
            return None

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ApiTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
