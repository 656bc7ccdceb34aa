"""Tests for the user details workflow against a fake API server."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from fakes import FakeServer, fail, fake_compress, form_fields, ok
from portfolio_cms.client import PortfolioApi
from portfolio_cms.errors import TransportError
from portfolio_cms.models import ImageFile
from portfolio_cms.workflows import InvalidTransition, Phase, RecordingNotifier
from portfolio_cms.workflows.user_details import UserDetailsController


def _details(**overrides: Any) -> dict[str, Any]:
    data = {
        "id": "d1",
        "userId": "u1",
        "name": "Ada Lovelace",
        "role": "Engineer",
        "description": None,
        "socialMedias": ["github|https://github.com/ada"],
        "profilePhoto": "https://cdn/ada.png",
    }
    data.update(overrides)
    return data


def _controller(api: PortfolioApi, notifier: RecordingNotifier) -> UserDetailsController:
    return UserDetailsController(api.user_details, notifier=notifier, compress=fake_compress)


def test_load_pre_populates_form(server: FakeServer, api: PortfolioApi, notifier) -> None:
    server.add("GET", "/user", ok(_details()))
    controller = _controller(api, notifier)

    asyncio.run(controller.load())

    assert controller.phase is Phase.IDLE
    assert controller.exists
    assert controller.form == {"name": "Ada Lovelace", "role": "Engineer", "description": ""}
    assert controller.social_medias == ["github|https://github.com/ada"]
    assert controller.photo.preview == "https://cdn/ada.png"
    assert notifier.notifications == []


@pytest.mark.parametrize(
    "response",
    [fail("User details not found", status=404), ok(None), fail("Not created", status=200)],
)
def test_missing_details_mean_empty_form(
    server: FakeServer, api: PortfolioApi, notifier, response
) -> None:
    server.add("GET", "/user", response)
    controller = _controller(api, notifier)

    asyncio.run(controller.load())

    assert not controller.exists
    assert controller.form == {"name": "", "role": "", "description": ""}
    assert notifier.notifications == []


def test_load_failure_notifies(server: FakeServer, api: PortfolioApi, notifier) -> None:
    server.add("GET", "/user", fail("Internal error", status=500))
    controller = _controller(api, notifier)

    asyncio.run(controller.load())

    assert controller.phase is Phase.IDLE
    assert notifier.errors == ["Failed to load user details"]


def test_malformed_details_notify_instead_of_raising(
    server: FakeServer, api: PortfolioApi, notifier
) -> None:
    server.add("GET", "/user", ok({"id": "d1"}))
    controller = _controller(api, notifier)

    asyncio.run(controller.load())

    assert controller.phase is Phase.IDLE
    assert not controller.exists
    assert notifier.errors == ["Failed to load user details"]


def test_first_submit_creates(server: FakeServer, api: PortfolioApi, notifier) -> None:
    server.add("GET", "/user", ok(None), ok(_details(socialMedias=[], profilePhoto=None)))
    server.add("POST", "/user", ok(_details(), status=201))
    controller = _controller(api, notifier)

    async def scenario() -> bool:
        await controller.load()
        controller.set_field("name", "Ada Lovelace")
        controller.set_field("role", "Engineer")
        assert controller.add_social_media(" linkedin ", " https://linkedin.com/in/ada ")
        return await controller.submit()

    assert asyncio.run(scenario())

    [request] = server.calls("POST", "/user")
    fields = form_fields(request)
    assert fields["name"] == ["Ada Lovelace"]
    assert fields["socialMedias"] == ["linkedin|https://linkedin.com/in/ada"]
    assert "description" not in fields
    assert notifier.messages == ["User details created successfully"]
    assert controller.exists


def test_later_submit_updates_with_new_photo(
    server: FakeServer, api: PortfolioApi, notifier
) -> None:
    server.add("GET", "/user", ok(_details()))
    server.add("PUT", "/user", ok(_details(profilePhoto="https://cdn/new.png")))
    controller = _controller(api, notifier)

    async def scenario() -> bool:
        await controller.load()
        controller.select_photo(ImageFile("me.png", b"photo", "image/png"))
        return await controller.submit()

    assert asyncio.run(scenario())

    [request] = server.calls("PUT", "/user")
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert b'name="profilePhoto"; filename="me.png"' in request.content
    assert b"compressed:photo" in request.content
    assert notifier.messages == ["User details updated successfully"]


def test_removed_photo_is_sent_empty(server: FakeServer, api: PortfolioApi, notifier) -> None:
    server.add("GET", "/user", ok(_details()))
    server.add("PUT", "/user", ok(_details(profilePhoto=None)))
    controller = _controller(api, notifier)

    async def scenario() -> bool:
        await controller.load()
        controller.clear_photo()
        controller.remove_social_media(0)
        return await controller.submit()

    assert asyncio.run(scenario())

    fields = form_fields(server.calls("PUT", "/user")[0])
    assert fields["profilePhoto"] == [""]
    assert "socialMedias" not in fields


def test_validation_blocks_request(server: FakeServer, api: PortfolioApi, notifier) -> None:
    server.add("GET", "/user", ok(None))
    controller = _controller(api, notifier)

    async def scenario() -> bool:
        await controller.load()
        controller.set_field("name", "Ada")
        return await controller.submit()

    assert not asyncio.run(scenario())

    assert controller.field_errors == {"role": "Role is required"}
    assert server.calls("POST", "/user") == []


def test_server_refusal_keeps_edits(server: FakeServer, api: PortfolioApi, notifier) -> None:
    server.add("GET", "/user", ok(_details()))
    server.add("PUT", "/user", fail("Role is too long", status=422))
    controller = _controller(api, notifier)

    async def scenario() -> bool:
        await controller.load()
        controller.set_field("role", "Principal Engineer")
        return await controller.submit()

    assert not asyncio.run(scenario())

    assert controller.phase is Phase.IDLE
    assert controller.form["role"] == "Principal Engineer"
    assert notifier.errors == ["Role is too long"]


def test_blank_social_media_is_ignored(api: PortfolioApi, notifier) -> None:
    controller = _controller(api, notifier)

    assert not controller.add_social_media("github", "  ")
    assert not controller.add_social_media("", "https://github.com/ada")
    assert controller.social_medias == []


def test_unreachable_server_raises_from_get(api: PortfolioApi, server: FakeServer) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    server.add("GET", "/user", refuse)

    with pytest.raises(TransportError):
        asyncio.run(api.user_details.get())


def test_submit_while_loading(api: PortfolioApi, notifier) -> None:
    controller = _controller(api, notifier)

    with pytest.raises(InvalidTransition):
        asyncio.run(controller.submit())
