"""Pydantic schemas for API entities and client-side forms."""

from portfolio_cms.schemas.auth import AuthResult, LoginForm, RegisterForm, User
from portfolio_cms.schemas.certifications import Certification, CertificationForm
from portfolio_cms.schemas.common import Envelope, Skill, SkillLink
from portfolio_cms.schemas.education import Education, EducationForm
from portfolio_cms.schemas.experience import Experience, ExperienceForm
from portfolio_cms.schemas.projects import Project, ProjectForm, slugify
from portfolio_cms.schemas.skills import SkillForm
from portfolio_cms.schemas.user_details import (
    UserDetails,
    UserDetailsForm,
    format_social_media,
    parse_social_media,
)

__all__ = [
    "AuthResult",
    "Certification",
    "CertificationForm",
    "Education",
    "EducationForm",
    "Envelope",
    "Experience",
    "ExperienceForm",
    "LoginForm",
    "Project",
    "ProjectForm",
    "RegisterForm",
    "Skill",
    "SkillForm",
    "SkillLink",
    "User",
    "UserDetails",
    "UserDetailsForm",
    "format_social_media",
    "parse_social_media",
    "slugify",
]
