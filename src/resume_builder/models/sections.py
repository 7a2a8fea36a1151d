"""Pydantic models for typed resume sections.

Section content is a tagged union keyed by ``kind``; the tag always equals
the owning section's ``type``. All models are frozen and hold collections as
tuples so a committed snapshot can never change underneath an observer.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SectionType(str, Enum):
    PERSONAL = "personal"
    EDUCATION = "education"
    EXPERIENCE = "experience"
    PROJECTS = "projects"
    SKILLS = "skills"
    CERTIFICATIONS = "certifications"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class PersonalContent(_Frozen):
    kind: Literal["personal"] = "personal"
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    summary: str = ""

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip()
        if v and "@" not in v:
            raise ValueError(f"not an email address: {v!r}")
        return v


class ExperienceEntry(_Frozen):
    company: str = ""
    position: str = ""
    duration: str = ""
    description: str = ""


class EducationEntry(_Frozen):
    institution: str = ""
    degree: str = ""
    duration: str = ""
    gpa: str = ""


class ProjectEntry(_Frozen):
    name: str = ""
    description: str = ""
    technologies: tuple[str, ...] = ()


class CertificationEntry(_Frozen):
    name: str = ""
    issuer: str = ""
    date: str = ""


class ExperienceContent(_Frozen):
    kind: Literal["experience"] = "experience"
    entries: tuple[ExperienceEntry, ...] = ()


class EducationContent(_Frozen):
    kind: Literal["education"] = "education"
    entries: tuple[EducationEntry, ...] = ()


class ProjectsContent(_Frozen):
    kind: Literal["projects"] = "projects"
    entries: tuple[ProjectEntry, ...] = ()


class CertificationsContent(_Frozen):
    kind: Literal["certifications"] = "certifications"
    entries: tuple[CertificationEntry, ...] = ()


class SkillsContent(_Frozen):
    """A set of distinct skill names, kept in insertion order."""

    kind: Literal["skills"] = "skills"
    skills: tuple[str, ...] = ()

    @field_validator("skills")
    @classmethod
    def check_distinct(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        seen: set[str] = set()
        cleaned = []
        for skill in v:
            skill = skill.strip()
            if not skill:
                raise ValueError("skill names must not be blank")
            key = skill.casefold()
            if key in seen:
                raise ValueError(f"duplicate skill: {skill!r}")
            seen.add(key)
            cleaned.append(skill)
        return tuple(cleaned)


SectionContent = Annotated[
    Union[
        PersonalContent,
        ExperienceContent,
        EducationContent,
        ProjectsContent,
        CertificationsContent,
        SkillsContent,
    ],
    Field(discriminator="kind"),
]


class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: SectionType
    title: str
    content: SectionContent

    @model_validator(mode="after")
    def check_content_kind(self) -> "Section":
        if self.content.kind != self.type.value:
            raise ValueError(
                f"content kind {self.content.kind!r} does not match section type {self.type.value!r}"
            )
        return self
