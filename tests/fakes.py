"""Test doubles for the remote API."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from urllib.parse import parse_qs

import httpx

from portfolio_cms.client.payload import Payload
from portfolio_cms.errors import ApiError
from portfolio_cms.models import ImageFile

API_URL = "http://api.test/api"
API_PREFIX = "/api"

Responder = Callable[[httpx.Request], httpx.Response]


def ok(data: Any = None, status: int = 200) -> httpx.Response:
    return httpx.Response(status, json={"success": True, "data": data})


def fail(error: str | None = None, status: int = 400, **extra: Any) -> httpx.Response:
    body: dict[str, Any] = {"success": False, **extra}
    if error is not None:
        body["error"] = error
    return httpx.Response(status, json=body)


class FakeServer:
    """Routes requests by (method, path) to canned responses and records them.

    Queued responses are served in order; the last one keeps answering.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[httpx.Response | Responder]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses: httpx.Response | Responder) -> None:
        self.routes[(method.upper(), path)] = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(API_PREFIX)
        queue = self.routes.get((request.method, path))
        if not queue:
            return httpx.Response(404, json={"success": False, "error": "Not found"})
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(response):
            return response(request)
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path.removeprefix(API_PREFIX) == path
        ]


def form_fields(request: httpx.Request) -> dict[str, list[str]]:
    """Decode a url-encoded request body."""
    return parse_qs(request.content.decode(), keep_blank_values=True)


def json_body(request: httpx.Request) -> Any:
    return json.loads(request.content)


def skill_data(skill_id: str, name: str, icon: str | None = None) -> dict[str, Any]:
    return {"id": skill_id, "userId": "u1", "name": name, "icon": icon}


def user_data(**overrides: Any) -> dict[str, Any]:
    data = {"id": "u1", "email": "ada@example.com", "username": "ada", "name": "Ada Lovelace"}
    data.update(overrides)
    return data


def fake_compress(image: ImageFile) -> ImageFile:
    """Stand-in compression that marks its output."""
    return ImageFile(image.filename, b"compressed:" + image.content, "image/jpeg")


class FakeResourceClient:
    """In-memory resource client recording every call.

    Args:
        items: Initial collection.
        make_item: Builds the entity stored by ``create``/``update``.
    """

    def __init__(
        self,
        items: list[Any] | None = None,
        *,
        make_item: Callable[[Payload, str | None], Any] | None = None,
    ) -> None:
        self.items = list(items or [])
        self.make_item = make_item
        self.calls: list[tuple[Any, ...]] = []
        self.errors: dict[str, ApiError] = {}

    def fail(self, operation: str, error: ApiError) -> None:
        self.errors[operation] = error

    def recover(self, operation: str) -> None:
        self.errors.pop(operation, None)

    def _check(self, operation: str) -> None:
        if operation in self.errors:
            raise self.errors[operation]

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def payloads(self, operation: str) -> list[Payload]:
        return [call[-1] for call in self.calls if call[0] == operation]

    async def list(self) -> list[Any]:
        self.calls.append(("list",))
        self._check("list")
        return list(self.items)

    async def get_one(self, key: str) -> Any:
        self.calls.append(("get_one", key))
        self._check("get_one")
        for item in self.items:
            if item.id == key:
                return item
        raise ApiError("Not found", 404)

    async def create(self, payload: Payload) -> Any:
        self.calls.append(("create", payload))
        self._check("create")
        item = self.make_item(payload, None) if self.make_item else None
        if item is not None:
            self.items.append(item)
        return item

    async def update(self, key: str, payload: Payload) -> Any:
        self.calls.append(("update", key, payload))
        self._check("update")
        item = self.make_item(payload, key) if self.make_item else None
        if item is not None:
            self.items = [item if existing.id == key else existing for existing in self.items]
        return item

    async def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        self._check("delete")
        self.items = [item for item in self.items if item.id != key]
