from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from portfolio_cms.schemas import (
    Certification,
    Education,
    Experience,
    Project,
    Skill,
    UserDetails,
    parse_social_media,
)
from portfolio_cms.workflows.images import ImageGallery, Pending


def experience_period(entry: Experience) -> str:
    end = "Present" if entry.is_current else str(entry.end_year)
    return f"{entry.start_year} - {end}"


def project_status(project: Project) -> str:
    return "Published" if project.is_published else "Draft"


def gallery_labels(gallery: ImageGallery) -> list[str]:
    """Label each gallery entry: stored images by reference, new ones by file name."""
    return [
        f"{entry.file.filename} (pending upload)" if isinstance(entry, Pending) else entry.ref
        for entry in gallery.entries
    ]


def _skills_line(names: Sequence[str]) -> str:
    return ", ".join(names) if names else "None"


# ----------------------------------------------------------------------
# One-line summaries (list rows)
# ----------------------------------------------------------------------


def _skill_row(skill: Skill) -> str:
    return skill.name


def _experience_row(entry: Experience) -> str:
    return f"{entry.company_name} • {entry.location} • {experience_period(entry)}"


def _education_row(entry: Education) -> str:
    return f"{entry.institution_name} • {entry.year}"


def _certification_row(cert: Certification) -> str:
    return f"{cert.name} • {cert.issuing_organization} • {cert.year}"


def _project_row(project: Project) -> str:
    marker = "★ " if project.highlighted else ""
    return f"{marker}{project.title} [{project_status(project)}]"


_ROW_RENDERERS: dict[str, Callable[[Any], str]] = {
    "skills": _skill_row,
    "experience": _experience_row,
    "education": _education_row,
    "certifications": _certification_row,
    "projects": _project_row,
}


def render_row(section: str, entity: Any) -> str:
    """Render the one-line list summary of ``entity``."""
    return _ROW_RENDERERS[section](entity)


# ----------------------------------------------------------------------
# Detail views (markdown)
# ----------------------------------------------------------------------


def _skill_markdown(skill: Skill) -> list[str]:
    parts = [f"# {skill.name}"]
    if skill.icon:
        parts.append(f"- Icon: {skill.icon}")
    return parts


def _experience_markdown(entry: Experience) -> list[str]:
    parts = [
        f"# {entry.company_name}",
        f"{entry.location} • {experience_period(entry)}",
    ]
    if entry.description:
        parts.append(f"\n{entry.description}")
    parts.append("\n### Skills")
    parts.append(_skills_line(entry.skill_names))
    return parts


def _education_markdown(entry: Education) -> list[str]:
    parts = [f"# {entry.institution_name}", entry.year]
    if entry.description:
        parts.append(f"\n{entry.description}")
    return parts


def _certification_markdown(cert: Certification) -> list[str]:
    parts = [f"# {cert.name}", f"{cert.issuing_organization} • {cert.year}"]
    if cert.certificate_link:
        parts.append(f"\n[View certificate]({cert.certificate_link})")
    if cert.description:
        parts.append(f"\n{cert.description}")
    parts.append("\n### Skills")
    parts.append(_skills_line(cert.skill_names))
    return parts


def _project_markdown(project: Project) -> list[str]:
    heading = f"# {project.title}"
    if project.highlighted:
        heading += " ★"
    parts = [heading, f"`/{project.slug}` • {project_status(project)}"]
    if project.published_at is not None:
        parts.append(f"- Published at: {project.published_at:%Y-%m-%d}")
    if project.cover_image:
        parts.append(f"- Cover image: {project.cover_image}")
    if project.content_images:
        parts.append(f"- Content images: {len(project.content_images)}")
    parts.append(f"\n{project.description}")
    parts.append("\n### Skills")
    parts.append(_skills_line(project.skill_names))
    return parts


_MARKDOWN_RENDERERS: dict[str, Callable[[Any], list[str]]] = {
    "skills": _skill_markdown,
    "experience": _experience_markdown,
    "education": _education_markdown,
    "certifications": _certification_markdown,
    "projects": _project_markdown,
}


def render_markdown(section: str, entity: Any) -> str:
    """Render the detail view of ``entity`` as markdown."""
    return "\n".join(_MARKDOWN_RENDERERS[section](entity))


def render_user_details_markdown(details: UserDetails | None) -> str:
    if details is None:
        return "# User Details\n\nNo details yet. Fill in the form and save."

    parts = [f"# {details.name}", f"**{details.role}**"]
    if details.description:
        parts.append(f"\n{details.description}")
    if details.profile_photo:
        parts.append(f"\n- Profile photo: {details.profile_photo}")
    if details.social_medias:
        parts.append("\n### Social Media")
        for entry in details.social_medias:
            icon, url = parse_social_media(entry)
            parts.append(f"- {icon or 'link'}: {url}")
    return "\n".join(parts)


def render_list(section: str, entities: Sequence[Any]) -> str:
    """Render a plain-text listing for the command line."""
    if not entities:
        return "No items found."
    return "\n".join(f"- {render_row(section, entity)}  ({entity.id})" for entity in entities)
