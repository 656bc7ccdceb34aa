"""Tests for per-entity form pre-population, search and payload building."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import UTC, datetime

import pytest

from fakes import fake_compress, skill_data
from portfolio_cms.models import ImageFile
from portfolio_cms.schemas import (
    Certification,
    CertificationForm,
    Education,
    EducationForm,
    Experience,
    ExperienceForm,
    Project,
    ProjectForm,
    Skill,
    SkillForm,
)
from portfolio_cms.workflows import (
    CERTIFICATIONS,
    DESCRIPTORS,
    EDUCATION,
    EXPERIENCE,
    PROJECTS,
    SKILLS,
    ImageGallery,
    ImageSlot,
    get_descriptor,
)
from portfolio_cms.workflows.descriptors import SubmitContext


def _context(editing=None, images=None, galleries=None) -> SubmitContext:
    return SubmitContext(
        editing=editing,
        images=images or {},
        galleries=galleries or {},
        compress=fake_compress,
    )


def _links(*skills: tuple[str, str]) -> list[dict]:
    return [{"skill": skill_data(skill_id, name)} for skill_id, name in skills]


def _project(**overrides) -> Project:
    data = {
        "id": "p1",
        "title": "Portfolio",
        "slug": "portfolio",
        "description": "My site",
        "content": "<p>Body</p>",
        "coverImage": "https://cdn/cover.png",
        "contentImages": ["https://cdn/1.png", "https://cdn/2.png"],
        "projectSkills": _links(("s1", "React"), ("s2", "TypeScript")),
    }
    data.update(overrides)
    return Project.model_validate(data)


def test_registry_lists_every_section() -> None:
    assert list(DESCRIPTORS) == ["skills", "experience", "education", "certifications", "projects"]
    assert get_descriptor("projects") is PROJECTS
    with pytest.raises(KeyError):
        get_descriptor("blog")


class TestSkills:
    def test_payload_compresses_new_icon(self) -> None:
        slot = ImageSlot()
        slot.select(ImageFile("go.png", b"raw", "image/png"))

        payload = SKILLS.build_payload(
            SkillForm(name="Go"), _context(images={"icon": slot})
        )

        assert payload.is_multipart
        assert payload.field_values("name") == ["Go"]
        [icon] = payload.file_values("icon")
        assert icon.content == b"compressed:raw"

    def test_edit_without_new_icon_resends_reference(self) -> None:
        skill = Skill(id="s1", name="Go", icon="https://cdn/go.png")

        payload = SKILLS.build_payload(
            SkillForm(name="Golang"),
            _context(editing=skill, images={"icon": ImageSlot(skill.icon)}),
        )

        assert payload.field_value("icon") == "https://cdn/go.png"
        assert payload.files == ()

    def test_new_skill_without_icon_is_blocked(self) -> None:
        assert SKILLS.check_images(_context(images={"icon": ImageSlot()})) == {
            "icon": "Icon is required for new skills"
        }

    def test_edited_skill_may_keep_existing_icon(self) -> None:
        skill = Skill(id="s1", name="Go", icon="https://cdn/go.png")
        ctx = _context(editing=skill, images={"icon": ImageSlot(skill.icon)})

        assert SKILLS.check_images(ctx) == {}


class TestExperience:
    def test_round_trip_pre_population(self) -> None:
        entry = Experience.model_validate(
            {
                "id": "x1",
                "startYear": 2019,
                "endYear": None,
                "companyName": "Acme",
                "description": "Built things",
                "location": "Berlin",
                "experienceSkills": _links(("s1", "Go"), ("s3", "SQL")),
            }
        )

        form = EXPERIENCE.to_form(entry)

        assert form == {
            "start_year": 2019,
            "end_year": None,
            "is_current_job": True,
            "company_name": "Acme",
            "description": "Built things",
            "location": "Berlin",
            "skill_ids": ["s1", "s3"],
        }

    def test_current_job_sends_null_end_year(self) -> None:
        form = ExperienceForm(
            start_year=2020,
            is_current_job=True,
            end_year=2023,
            company_name="Acme",
            location="Remote",
            skill_ids=["s1"],
        )

        payload = EXPERIENCE.build_payload(form, _context())

        assert payload.json == {
            "startYear": 2020,
            "endYear": None,
            "companyName": "Acme",
            "location": "Remote",
            "skillIds": ["s1"],
        }

    def test_description_included_when_present(self) -> None:
        form = ExperienceForm(
            start_year=2020, end_year=2021, company_name="Acme", location="Remote", description="Hi"
        )

        assert EXPERIENCE.build_payload(form, _context()).json["description"] == "Hi"

    def test_search_fields(self) -> None:
        entry = Experience(
            id="x1", start_year=2020, company_name="Acme", location="Berlin", description=None
        )

        assert EXPERIENCE.matches(entry, "BERL")
        assert EXPERIENCE.matches(entry, "acm")
        assert not EXPERIENCE.matches(entry, "remote")
        assert EXPERIENCE.matches(entry, "")
        assert not EXPERIENCE.matches(entry, " berl")


def test_education_payload_and_form() -> None:
    entry = Education(id="e1", year="2016 - 2020", institution_name="MIT", description=None)

    assert EDUCATION.to_form(entry) == {
        "year": "2016 - 2020",
        "institution_name": "MIT",
        "description": "",
    }
    payload = EDUCATION.build_payload(
        EducationForm(year="2016 - 2020", institution_name="MIT"), _context()
    )
    assert payload.json == {"year": "2016 - 2020", "institutionName": "MIT"}


class TestCertifications:
    def test_empty_link_is_omitted(self) -> None:
        form = CertificationForm(name="CKA", issuing_organization="CNCF", year=2023)

        body = CERTIFICATIONS.build_payload(form, _context()).json

        assert body == {
            "name": "CKA",
            "issuingOrganization": "CNCF",
            "year": 2023,
            "skillIds": [],
        }

    def test_round_trip_pre_population(self) -> None:
        cert = Certification.model_validate(
            {
                "id": "c1",
                "name": "CKA",
                "issuingOrganization": "CNCF",
                "year": 2023,
                "certificateLink": "https://cncf.io/c/1",
                "certificationSkills": _links(("s4", "Kubernetes")),
            }
        )

        assert CERTIFICATIONS.to_form(cert) == {
            "name": "CKA",
            "issuing_organization": "CNCF",
            "year": 2023,
            "description": "",
            "certificate_link": "https://cncf.io/c/1",
            "skill_ids": ["s4"],
        }

    def test_search_matches_organization(self) -> None:
        cert = Certification(id="c1", name="CKA", issuing_organization="CNCF", year=2023)
        assert CERTIFICATIONS.matches(cert, "cncf")


class TestProjects:
    def _form(self, **overrides) -> ProjectForm:
        values = {
            "title": "Portfolio",
            "slug": "portfolio",
            "description": "My site",
            "content": "<p>Body</p>",
            "published": False,
            "skill_ids": ["s1", "s2"],
        }
        values.update(overrides)
        return ProjectForm(**values)

    def test_new_project_payload(self) -> None:
        cover = ImageSlot()
        cover.select(ImageFile("cover.jpg", b"c", "image/jpeg"))
        gallery = ImageGallery()
        gallery.add([ImageFile("1.png", b"1", "image/png"), ImageFile("2.png", b"2", "image/png")])

        payload = PROJECTS.build_payload(
            self._form(),
            _context(images={"cover_image": cover}, galleries={"content_images": gallery}),
        )

        assert payload.field_value("published") == "false"
        assert payload.field_value("publishedAt") is None
        assert payload.field_values("skillIds[]") == ["s1", "s2"]
        assert payload.field_value("existingContentImages") is None
        assert [f.content for f in payload.file_values("coverImage")] == [b"compressed:c"]
        assert [f.filename for f in payload.file_values("contentImages")] == ["1.png", "2.png"]

    def test_edit_sends_kept_content_images(self) -> None:
        project = _project()
        gallery = ImageGallery(project.content_images)
        gallery.remove(0)

        payload = PROJECTS.build_payload(
            self._form(),
            _context(
                editing=project,
                images={"cover_image": ImageSlot(project.cover_image)},
                galleries={"content_images": gallery},
            ),
        )

        assert json.loads(payload.field_value("existingContentImages") or "") == [
            "https://cdn/2.png"
        ]
        assert payload.field_value("coverImage") == "https://cdn/cover.png"
        assert payload.file_values("contentImages") == []

    def test_removed_cover_is_sent_empty(self) -> None:
        project = _project()
        cover = ImageSlot(project.cover_image)
        cover.clear()

        payload = PROJECTS.build_payload(
            self._form(), _context(editing=project, images={"cover_image": cover})
        )

        assert payload.field_value("coverImage") == ""

    def test_publishing_sets_timestamp(self) -> None:
        payload = PROJECTS.build_payload(self._form(published=True), _context())

        assert payload.field_value("published") == "true"
        published_at = datetime.fromisoformat(payload.field_value("publishedAt") or "")
        assert published_at.tzinfo is not None

    def test_republishing_keeps_original_timestamp(self) -> None:
        original = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        project = _project(published=True, publishedAt=original.isoformat())

        payload = PROJECTS.build_payload(self._form(published=True), _context(editing=project))

        assert datetime.fromisoformat(payload.field_value("publishedAt") or "") == original

    def test_round_trip_pre_population(self) -> None:
        project = _project(publishedAt="2024-05-01T12:00:00Z")

        assert PROJECTS.to_form(project) == {
            "title": "Portfolio",
            "slug": "portfolio",
            "description": "My site",
            "content": "<p>Body</p>",
            "published": True,
            "skill_ids": ["s1", "s2"],
        }
        assert PROJECTS.image_refs(project) == {"cover_image": "https://cdn/cover.png"}
        assert PROJECTS.gallery_refs(project) == {
            "content_images": ["https://cdn/1.png", "https://cdn/2.png"]
        }

    def test_search_matches_skill_names(self) -> None:
        project = _project()

        assert PROJECTS.matches(project, "typescript")
        assert PROJECTS.matches(project, "MY SITE")
        assert not PROJECTS.matches(project, "django")


def test_payload_kind_must_match_descriptor() -> None:
    form = ExperienceForm(start_year=2020, end_year=2021, company_name="Acme", location="Berlin")

    assert not EXPERIENCE.payload_for(form, _context()).is_multipart
    with pytest.raises(TypeError, match="experience payload must be a multipart body"):
        replace(EXPERIENCE, multipart=True).payload_for(form, _context())
