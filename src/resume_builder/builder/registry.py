"""Section registry: per-type content schema, patching and rendering.

Every section type is wired in once at startup. Looking up a type that was
never registered raises ConfigurationError, which is a wiring defect and is
not meant to be caught at runtime.

Patches are plain dicts:

    personal        {"summary": "...", "email": "..."}
    entry lists     {"op": "add", "entry": {...}}
                    {"op": "update", "index": 0, "fields": {...}}
                    {"op": "remove", "index": 0}
                    {"op": "replace", "entries": [...]}
    skills          {"op": "add", "skill": "Python"}
                    {"op": "add_many", "skills": [...]}
                    {"op": "remove", "skill": "Python"}
                    {"op": "replace", "skills": [...]}
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from resume_builder.exceptions import ConfigurationError, ValidationError
from resume_builder.models.sections import (
    CertificationsContent,
    EducationContent,
    ExperienceContent,
    PersonalContent,
    ProjectsContent,
    Section,
    SectionType,
    SkillsContent,
)

logger = logging.getLogger(__name__)

Patch = dict[str, Any]


@dataclass(frozen=True)
class SectionSchema:
    """Content contract for one section type."""

    type: SectionType
    content_model: type[BaseModel]
    default_title: str
    patcher: Callable[[BaseModel, Patch], dict]
    renderer: Callable[[BaseModel], str]
    text_patcher: Callable[[BaseModel, str], Patch] | None = None

    def default_content(self) -> BaseModel:
        return self.content_model()

    def validate(self, content: BaseModel | dict) -> BaseModel:
        """Return ``content`` as a validated model of this type or raise ValidationError."""
        data = content.model_dump() if isinstance(content, BaseModel) else content
        if not isinstance(data, dict):
            raise ValidationError(f"content must be a mapping, got {type(data).__name__}", self.type.value)
        data = {**data, "kind": self.type.value} if "kind" not in data else data
        try:
            return self.content_model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(_summarize(e), self.type.value) from e

    def apply_patch(self, content: BaseModel, patch: Patch) -> BaseModel:
        """Return new content with ``patch`` applied; ``content`` itself is never touched."""
        if not isinstance(patch, dict):
            raise ValidationError(f"patch must be a mapping, got {type(patch).__name__}", self.type.value)
        current = self.validate(content)
        try:
            data = self.patcher(current, patch)
        except ValidationError as e:
            if e.section_type is None:
                raise ValidationError(e.message, self.type.value) from e
            raise
        return self.validate(data)

    def render(self, content: BaseModel) -> str:
        return self.renderer(content)

    def patch_from_text(self, content: BaseModel, text: str) -> Patch:
        """Map free assistant text onto a patch for ``content``."""
        if self.text_patcher is None:
            raise ValidationError("section does not accept free text suggestions", self.type.value)
        if not text or not text.strip():
            raise ValidationError("suggestion text is empty", self.type.value)
        return self.text_patcher(content, text.strip())


class SectionRegistry:
    """Lookup table of section schemas keyed by section type."""

    def __init__(self) -> None:
        self._schemas: dict[SectionType, SectionSchema] = {}

    def register(self, schema: SectionSchema) -> None:
        if schema.type in self._schemas:
            raise ConfigurationError(f"Section type already registered: {schema.type.value}")
        self._schemas[schema.type] = schema

    def schema_for(self, section_type: SectionType | str) -> SectionSchema:
        try:
            key = SectionType(section_type)
        except ValueError:
            raise ConfigurationError(f"Unknown section type: {section_type!r}") from None
        schema = self._schemas.get(key)
        if schema is None:
            raise ConfigurationError(f"Section type not registered: {key.value}")
        return schema

    @property
    def types(self) -> list[SectionType]:
        return list(self._schemas)

    def __contains__(self, section_type: object) -> bool:
        try:
            return SectionType(section_type) in self._schemas
        except ValueError:
            return False

    def new_section(
        self,
        section_type: SectionType | str,
        *,
        section_id: str | None = None,
        title: str | None = None,
        content: BaseModel | dict | None = None,
    ) -> Section:
        """Build a section of ``section_type``, using defaults where not given."""
        schema = self.schema_for(section_type)
        body = schema.default_content() if content is None else schema.validate(content)
        return Section(
            id=section_id or f"{schema.type.value}-{uuid.uuid4().hex[:8]}",
            type=schema.type,
            title=title or schema.default_title,
            content=body,
        )


def _summarize(error: PydanticValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


# ---------------------------------------------------------------------------
# Patchers
# ---------------------------------------------------------------------------


def _patch_fields(content: BaseModel, patch: Patch) -> dict:
    allowed = set(type(content).model_fields) - {"kind"}
    unknown = set(patch) - allowed
    if unknown:
        raise ValidationError(f"unknown fields: {', '.join(sorted(unknown))}")
    return {**content.model_dump(), **patch}


def _entry_index(patch: Patch, entries: list) -> int:
    index = patch.get("index")
    if not isinstance(index, int) or isinstance(index, bool):
        raise ValidationError("patch requires an integer 'index'")
    if not 0 <= index < len(entries):
        raise ValidationError(f"entry index {index} out of range for {len(entries)} entries")
    return index


def _patch_entries(content: BaseModel, patch: Patch) -> dict:
    data = content.model_dump()
    entries = list(data["entries"])
    op = patch.get("op")

    if op == "add":
        entry = patch.get("entry")
        if not isinstance(entry, dict):
            raise ValidationError("'add' requires an 'entry' mapping")
        entries.append(entry)
    elif op == "update":
        index = _entry_index(patch, entries)
        fields = patch.get("fields")
        if not isinstance(fields, dict):
            raise ValidationError("'update' requires a 'fields' mapping")
        entries[index] = {**entries[index], **fields}
    elif op == "remove":
        del entries[_entry_index(patch, entries)]
    elif op == "replace":
        new_entries = patch.get("entries")
        if not isinstance(new_entries, list):
            raise ValidationError("'replace' requires an 'entries' list")
        entries = new_entries
    else:
        raise ValidationError(f"unsupported patch op: {op!r}")

    data["entries"] = entries
    return data


def _patch_skills(content: SkillsContent, patch: Patch) -> dict:
    skills = list(content.skills)
    existing = {s.casefold() for s in skills}
    op = patch.get("op")

    if op == "add":
        skill = patch.get("skill")
        if not isinstance(skill, str) or not skill.strip():
            raise ValidationError("'add' requires a non-blank 'skill'")
        if skill.strip().casefold() in existing:
            raise ValidationError(f"duplicate skill: {skill.strip()!r}")
        skills.append(skill.strip())
    elif op == "add_many":
        new = patch.get("skills")
        if not isinstance(new, list):
            raise ValidationError("'add_many' requires a 'skills' list")
        if not all(isinstance(skill, str) for skill in new):
            raise ValidationError("'add_many' skills must all be strings")
        fresh = []
        for skill in new:
            key = skill.strip().casefold()
            if key and key not in existing:
                existing.add(key)
                fresh.append(skill.strip())
        if not fresh:
            raise ValidationError("no new skills to add")
        skills.extend(fresh)
    elif op == "remove":
        skill = patch.get("skill")
        key = skill.strip().casefold() if isinstance(skill, str) else None
        if key not in existing:
            raise ValidationError(f"skill not present: {skill!r}")
        skills = [s for s in skills if s.casefold() != key]
    elif op == "replace":
        new = patch.get("skills")
        if not isinstance(new, list):
            raise ValidationError("'replace' requires a 'skills' list")
        skills = new
    else:
        raise ValidationError(f"unsupported patch op: {op!r}")

    return {"kind": "skills", "skills": skills}


# ---------------------------------------------------------------------------
# Free-text suggestions
# ---------------------------------------------------------------------------

_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


def _summary_from_text(content: BaseModel, text: str) -> Patch:
    return {"summary": text}


def _description_from_text(content: BaseModel, text: str) -> Patch:
    if content.entries:
        return {"op": "update", "index": 0, "fields": {"description": text}}
    return {"op": "add", "entry": {"description": text}}


def _skills_from_text(content: BaseModel, text: str) -> Patch:
    items = []
    for line in text.splitlines():
        # Lead-in sentences ("Here are some skills:") are not skills
        if line.rstrip().endswith(":"):
            continue
        line = _BULLET.sub("", line)
        items.extend(part.strip() for part in line.split(",") if part.strip())
    return {"op": "add_many", "skills": items}


# ---------------------------------------------------------------------------
# Renderers (Markdown)
# ---------------------------------------------------------------------------


def _render_personal(c: PersonalContent) -> str:
    lines = []
    if c.name:
        lines.append(f"**{c.name}**")
    contact = " • ".join(p for p in (c.email, c.phone, c.location) if p)
    if contact:
        lines.append(contact)
    if c.summary:
        lines.append(c.summary)
    return "\n\n".join(lines)


def _render_experience(c: ExperienceContent) -> str:
    blocks = []
    for e in c.entries:
        head = ", ".join(p for p in (f"**{e.position}**" if e.position else "", e.company) if p)
        if e.duration:
            head += f" _({e.duration})_"
        blocks.append("\n\n".join(p for p in (head, e.description) if p))
    return "\n\n".join(blocks)


def _render_education(c: EducationContent) -> str:
    blocks = []
    for e in c.entries:
        head = ", ".join(p for p in (f"**{e.degree}**" if e.degree else "", e.institution) if p)
        if e.duration:
            head += f" _({e.duration})_"
        if e.gpa:
            head += f"  \nGPA: {e.gpa}"
        blocks.append(head)
    return "\n\n".join(blocks)


def _render_projects(c: ProjectsContent) -> str:
    blocks = []
    for p in c.entries:
        parts = [f"**{p.name}**" if p.name else "", p.description]
        if p.technologies:
            parts.append(f"_Technologies: {', '.join(p.technologies)}_")
        blocks.append("\n\n".join(x for x in parts if x))
    return "\n\n".join(blocks)


def _render_certifications(c: CertificationsContent) -> str:
    lines = []
    for cert in c.entries:
        line = f"- **{cert.name}**"
        if cert.issuer:
            line += f", {cert.issuer}"
        if cert.date:
            line += f" ({cert.date})"
        lines.append(line)
    return "\n".join(lines)


def _render_skills(c: SkillsContent) -> str:
    return " · ".join(c.skills)


def build_default_registry() -> SectionRegistry:
    """Registry with all six built-in section types."""
    registry = SectionRegistry()
    registry.register(SectionSchema(
        type=SectionType.PERSONAL,
        content_model=PersonalContent,
        default_title="Personal Information",
        patcher=_patch_fields,
        renderer=_render_personal,
        text_patcher=_summary_from_text,
    ))
    registry.register(SectionSchema(
        type=SectionType.EXPERIENCE,
        content_model=ExperienceContent,
        default_title="Work Experience",
        patcher=_patch_entries,
        renderer=_render_experience,
        text_patcher=_description_from_text,
    ))
    registry.register(SectionSchema(
        type=SectionType.EDUCATION,
        content_model=EducationContent,
        default_title="Education",
        patcher=_patch_entries,
        renderer=_render_education,
    ))
    registry.register(SectionSchema(
        type=SectionType.SKILLS,
        content_model=SkillsContent,
        default_title="Skills",
        patcher=_patch_skills,
        renderer=_render_skills,
        text_patcher=_skills_from_text,
    ))
    registry.register(SectionSchema(
        type=SectionType.PROJECTS,
        content_model=ProjectsContent,
        default_title="Projects",
        patcher=_patch_entries,
        renderer=_render_projects,
        text_patcher=_description_from_text,
    ))
    registry.register(SectionSchema(
        type=SectionType.CERTIFICATIONS,
        content_model=CertificationsContent,
        default_title="Certifications",
        patcher=_patch_entries,
        renderer=_render_certifications,
    ))
    logger.debug("Registered %d section types", len(registry.types))
    return registry
