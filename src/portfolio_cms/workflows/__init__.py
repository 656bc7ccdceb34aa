"""Entity workflows: one generic controller driven by per-entity descriptors."""

from portfolio_cms.workflows.controller import (
    InvalidTransition,
    Mode,
    Phase,
    WorkflowController,
    controller_for,
)
from portfolio_cms.workflows.descriptors import (
    CERTIFICATIONS,
    DESCRIPTORS,
    EDUCATION,
    EXPERIENCE,
    PROJECTS,
    SKILLS,
    EntityDescriptor,
    FieldKind,
    FieldSpec,
    get_descriptor,
)
from portfolio_cms.workflows.images import ImageGallery, ImageSlot, Pending, Persisted
from portfolio_cms.workflows.notifications import (
    Notification,
    Notifier,
    RecordingNotifier,
    Severity,
)
from portfolio_cms.workflows.user_details import UserDetailsController

__all__ = [
    "CERTIFICATIONS",
    "DESCRIPTORS",
    "EDUCATION",
    "EXPERIENCE",
    "PROJECTS",
    "SKILLS",
    "EntityDescriptor",
    "FieldKind",
    "FieldSpec",
    "ImageGallery",
    "ImageSlot",
    "InvalidTransition",
    "Mode",
    "Notification",
    "Notifier",
    "Pending",
    "Persisted",
    "Phase",
    "RecordingNotifier",
    "Severity",
    "UserDetailsController",
    "WorkflowController",
    "controller_for",
    "get_descriptor",
]
