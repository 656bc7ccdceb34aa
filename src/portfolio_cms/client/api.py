"""One object bundling every client that talks to a given API root."""

from __future__ import annotations

from collections.abc import Callable

import httpx

from portfolio_cms.client.auth import AuthClient
from portfolio_cms.client.resources import (
    UserDetailsClient,
    certifications_client,
    education_client,
    experience_client,
    projects_client,
    skills_client,
)
from portfolio_cms.client.transport import ApiTransport, TokenProvider


class PortfolioApi:
    """Transport plus the auth client and every resource client."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        token_provider: TokenProvider | None = None,
        timeout: float | None = None,
        on_unauthorized: Callable[[], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.transport = ApiTransport(
            base_url,
            token_provider=token_provider,
            timeout=timeout,
            on_unauthorized=on_unauthorized,
            transport=transport,
        )
        self.auth = AuthClient(self.transport)
        self.skills = skills_client(self.transport)
        self.experience = experience_client(self.transport)
        self.education = education_client(self.transport)
        self.certifications = certifications_client(self.transport)
        self.projects = projects_client(self.transport)
        self.user_details = UserDetailsClient(self.transport)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> PortfolioApi:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
