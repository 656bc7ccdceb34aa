"""Tests for the auth and resource clients against a fake API."""

from __future__ import annotations

import asyncio

import pytest

from fakes import FakeServer, fail, ok, skill_data, user_data
from portfolio_cms.client import PortfolioApi, Payload
from portfolio_cms.errors import ApiError, AuthError
from portfolio_cms.schemas import Project, Skill


def test_list_parses_entities(api: PortfolioApi, server: FakeServer) -> None:
    server.add("GET", "/skills", ok([skill_data("s1", "Python"), skill_data("s2", "Go")]))

    skills = asyncio.run(api.skills.list())

    assert [skill.name for skill in skills] == ["Python", "Go"]
    assert all(isinstance(skill, Skill) for skill in skills)


def test_list_failure_message_names_the_collection(api: PortfolioApi, server: FakeServer) -> None:
    server.add("GET", "/certifications", fail(status=500))

    with pytest.raises(ApiError, match="Failed to fetch certifications"):
        asyncio.run(api.certifications.list())


def test_list_rejects_non_list_data(api: PortfolioApi, server: FakeServer) -> None:
    server.add("GET", "/skills", ok({"id": "s1"}))

    with pytest.raises(ApiError, match="Failed to fetch skills"):
        asyncio.run(api.skills.list())


def test_get_one_by_slug(api: PortfolioApi, server: FakeServer) -> None:
    server.add(
        "GET",
        "/projects/my-site",
        ok(
            {
                "id": "p1",
                "title": "My Site",
                "slug": "my-site",
                "description": "Personal site",
                "content": "<p>Hello</p>",
                "contentImages": None,
                "projectSkills": [{"skill": skill_data("s1", "React")}],
            }
        ),
    )

    project = asyncio.run(api.projects.get_one("my-site"))

    assert isinstance(project, Project)
    assert project.content_images == []
    assert project.skill_ids == ["s1"]
    assert project.skill_names == ["React"]


def test_create_posts_payload_and_returns_entity(api: PortfolioApi, server: FakeServer) -> None:
    server.add("POST", "/skills", ok(skill_data("s9", "Rust"), status=201))

    skill = asyncio.run(api.skills.create(Payload.multipart([("name", "Rust")])))

    assert skill.id == "s9"
    assert len(server.calls("POST", "/skills")) == 1


def test_update_uses_item_path(api: PortfolioApi, server: FakeServer) -> None:
    server.add("PUT", "/education/e1", ok({"id": "e1", "year": "2020", "institutionName": "MIT"}))

    entry = asyncio.run(api.education.update("e1", Payload.json_body({"year": "2020"})))

    assert entry.institution_name == "MIT"


def test_delete_failure_uses_default_message(api: PortfolioApi, server: FakeServer) -> None:
    server.add("DELETE", "/experience/x1", fail(status=500))

    with pytest.raises(ApiError, match="Failed to delete experience"):
        asyncio.run(api.experience.delete("x1"))


def test_malformed_entity_raises_api_error(api: PortfolioApi, server: FakeServer) -> None:
    server.add("GET", "/skills/s1", ok({"id": "s1"}))

    with pytest.raises(ApiError, match="Failed to fetch skill"):
        asyncio.run(api.skills.get_one("s1"))


class TestUserDetailsClient:
    def test_get_returns_details(self, api: PortfolioApi, server: FakeServer) -> None:
        server.add(
            "GET",
            "/user",
            ok({"id": "d1", "name": "Ada", "role": "Engineer", "socialMedias": None}),
        )

        details = asyncio.run(api.user_details.get())

        assert details is not None
        assert details.social_medias == []

    def test_get_not_found_returns_none(self, api: PortfolioApi, server: FakeServer) -> None:
        server.add("GET", "/user", fail("User details not found", status=404))

        assert asyncio.run(api.user_details.get()) is None

    def test_get_success_false_returns_none(self, api: PortfolioApi, server: FakeServer) -> None:
        server.add("GET", "/user", fail(status=200))

        assert asyncio.run(api.user_details.get()) is None

    def test_get_server_error_raises(self, api: PortfolioApi, server: FakeServer) -> None:
        server.add("GET", "/user", fail(status=500))

        with pytest.raises(ApiError, match="Failed to load user details"):
            asyncio.run(api.user_details.get())

    def test_malformed_details_raise_api_error(self, api: PortfolioApi, server: FakeServer) -> None:
        server.add("GET", "/user", ok({"id": "d1"}))

        with pytest.raises(ApiError, match="Failed to load user details"):
            asyncio.run(api.user_details.get())

    def test_malformed_update_result_raises_api_error(
        self, api: PortfolioApi, server: FakeServer
    ) -> None:
        server.add("PUT", "/user", ok({"id": "d1", "name": "Ada"}))

        with pytest.raises(ApiError, match="Failed to update user details"):
            asyncio.run(api.user_details.update(Payload.multipart([("name", "Ada")])))


class TestAuthClient:
    def test_login_returns_user_and_token(self, api: PortfolioApi, server: FakeServer) -> None:
        server.add("POST", "/auth/login", ok({"user": user_data(), "token": "tok"}))

        result = asyncio.run(api.auth.login("ada", "secret1"))

        assert result.token == "tok"
        assert result.user.username == "ada"

    def test_login_refused_raises_auth_error(self, api: PortfolioApi, server: FakeServer) -> None:
        server.add("POST", "/auth/login", fail("Invalid credentials", status=401))

        with pytest.raises(AuthError, match="Invalid credentials"):
            asyncio.run(api.auth.login("ada", "wrong-pass"))

    def test_login_malformed_result_raises_auth_error(
        self, api: PortfolioApi, server: FakeServer
    ) -> None:
        server.add("POST", "/auth/login", ok({"token": "tok"}))

        with pytest.raises(AuthError, match="Login failed"):
            asyncio.run(api.auth.login("ada", "secret1"))

    def test_register_without_message_uses_default(
        self, api: PortfolioApi, server: FakeServer
    ) -> None:
        server.add("POST", "/auth/register", fail(status=400))

        with pytest.raises(AuthError, match="Registration failed"):
            asyncio.run(
                api.auth.register(
                    email="ada@example.com", username="ada", password="secret1", name="Ada"
                )
            )

    def test_me_returns_identity(self, api: PortfolioApi, server: FakeServer) -> None:
        server.add("GET", "/auth/me", ok(user_data(name="Countess")))

        user = asyncio.run(api.auth.me())

        assert user.name == "Countess"

    def test_me_malformed_identity_raises_api_error(
        self, api: PortfolioApi, server: FakeServer
    ) -> None:
        server.add("GET", "/auth/me", ok({"id": "u1"}))

        with pytest.raises(ApiError, match="Failed to get user"):
            asyncio.run(api.auth.me())
