"""Resource clients: one per entity kind, all sharing one transport.

Each client translates typed calls into REST requests and turns the
envelope's ``data`` into Pydantic models. Failure messages follow the
``"Failed to <verb> <noun>"`` wording shown to the user when the server
gives no message of its own.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from portfolio_cms.client.payload import Payload
from portfolio_cms.client.transport import ApiTransport, parse_data
from portfolio_cms.errors import ApiError, TransportError
from portfolio_cms.schemas import (
    Certification,
    Education,
    Experience,
    Project,
    Skill,
    UserDetails,
)

T = TypeVar("T", bound=BaseModel)

__all__ = [
    "ResourceClient",
    "UserDetailsClient",
    "certifications_client",
    "education_client",
    "experience_client",
    "projects_client",
    "skills_client",
]


class ResourceClient(Generic[T]):
    """CRUD client for one collection resource.

    Args:
        transport: Shared API transport.
        path: Collection path, e.g. ``/skills``.
        model: Pydantic model for one entity.
        singular: Noun used in single-entity failure messages ("skill").
        plural: Noun used in list failure messages ("skills").
    """

    def __init__(
        self,
        transport: ApiTransport,
        path: str,
        model: type[T],
        *,
        singular: str,
        plural: str,
    ) -> None:
        self.transport = transport
        self.path = "/" + path.strip("/")
        self.model = model
        self.singular = singular
        self.plural = plural

    def _item_path(self, key: str) -> str:
        return f"{self.path}/{key}"

    def _parse(self, data: Any, failure: str) -> T:
        return parse_data(self.model, data, failure)

    async def list(self) -> list[T]:
        """Fetch the whole collection."""
        failure = f"Failed to fetch {self.plural}"
        data = await self.transport.request("GET", self.path, failure=failure)
        if not isinstance(data, list):
            raise ApiError(failure)
        return [self._parse(item, failure) for item in data]

    async def get_one(self, key: str) -> T:
        """Fetch one entity by id (or, for projects, by slug)."""
        failure = f"Failed to fetch {self.singular}"
        data = await self.transport.request("GET", self._item_path(key), failure=failure)
        return self._parse(data, failure)

    async def create(self, payload: Payload) -> T:
        failure = f"Failed to create {self.singular}"
        data = await self.transport.request("POST", self.path, payload=payload, failure=failure)
        return self._parse(data, failure)

    async def update(self, key: str, payload: Payload) -> T:
        failure = f"Failed to update {self.singular}"
        data = await self.transport.request(
            "PUT", self._item_path(key), payload=payload, failure=failure
        )
        return self._parse(data, failure)

    async def delete(self, key: str) -> None:
        await self.transport.request(
            "DELETE", self._item_path(key), failure=f"Failed to delete {self.singular}"
        )


class UserDetailsClient:
    """Client for the singleton ``/user`` details resource."""

    path = "/user"

    def __init__(self, transport: ApiTransport) -> None:
        self.transport = transport

    async def get(self) -> UserDetails | None:
        """Return the stored details, or None when none have been created yet.

        A ``success: false`` envelope or a 404 means "not created"; any other
        failure still raises.
        """
        try:
            data = await self.transport.request(
                "GET", self.path, failure="Failed to load user details"
            )
        except TransportError:
            raise
        except ApiError as exc:
            if exc.status is not None and exc.status >= 300 and exc.status != 404:
                raise
            return None
        if data is None:
            return None
        return parse_data(UserDetails, data, "Failed to load user details")

    async def create(self, payload: Payload) -> UserDetails:
        failure = "Failed to create user details"
        data = await self.transport.request("POST", self.path, payload=payload, failure=failure)
        return parse_data(UserDetails, data, failure)

    async def update(self, payload: Payload) -> UserDetails:
        failure = "Failed to update user details"
        data = await self.transport.request("PUT", self.path, payload=payload, failure=failure)
        return parse_data(UserDetails, data, failure)


def skills_client(transport: ApiTransport) -> ResourceClient[Skill]:
    return ResourceClient(transport, "/skills", Skill, singular="skill", plural="skills")


def experience_client(transport: ApiTransport) -> ResourceClient[Experience]:
    return ResourceClient(
        transport, "/experience", Experience, singular="experience", plural="experience"
    )


def education_client(transport: ApiTransport) -> ResourceClient[Education]:
    return ResourceClient(
        transport, "/education", Education, singular="education", plural="education"
    )


def certifications_client(transport: ApiTransport) -> ResourceClient[Certification]:
    return ResourceClient(
        transport,
        "/certifications",
        Certification,
        singular="certification",
        plural="certifications",
    )


def projects_client(transport: ApiTransport) -> ResourceClient[Project]:
    return ResourceClient(transport, "/projects", Project, singular="project", plural="projects")
