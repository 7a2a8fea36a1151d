"""Document snapshot model."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from resume_builder.models.sections import Section


class Document(BaseModel):
    """An ordered, immutable sequence of sections.

    Order defines both preview order and export order.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    owner_id: str = "local"
    title: str = "Untitled Resume"
    sections: tuple[Section, ...] = ()
    updated_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def check_unique_ids(self) -> "Document":
        ids = [s.id for s in self.sections]
        if len(ids) != len(set(ids)):
            raise ValueError(f"duplicate section ids in document {self.id}")
        return self

    @property
    def section_ids(self) -> list[str]:
        return [s.id for s in self.sections]

    def index_of(self, section_id: str) -> int | None:
        for i, section in enumerate(self.sections):
            if section.id == section_id:
                return i
        return None

    def get(self, section_id: str) -> Section | None:
        index = self.index_of(section_id)
        return None if index is None else self.sections[index]

    def with_sections(self, sections: Iterable[Section]) -> "Document":
        """Return a new validated snapshot holding ``sections``."""
        return Document(
            id=self.id,
            owner_id=self.owner_id,
            title=self.title,
            sections=tuple(sections),
        )
