"""Data models for the resume builder."""

from resume_builder.models.conversation import (
    ConversationMessage,
    Notice,
    Role,
    SessionStatus,
    Suggestion,
)
from resume_builder.models.document import Document
from resume_builder.models.sections import (
    CertificationEntry,
    CertificationsContent,
    EducationContent,
    EducationEntry,
    ExperienceContent,
    ExperienceEntry,
    PersonalContent,
    ProjectEntry,
    ProjectsContent,
    Section,
    SectionType,
    SkillsContent,
)

__all__ = [
    "CertificationEntry",
    "CertificationsContent",
    "ConversationMessage",
    "Document",
    "EducationContent",
    "EducationEntry",
    "ExperienceContent",
    "ExperienceEntry",
    "Notice",
    "PersonalContent",
    "ProjectEntry",
    "ProjectsContent",
    "Role",
    "Section",
    "SectionType",
    "SessionStatus",
    "SkillsContent",
    "Suggestion",
]
