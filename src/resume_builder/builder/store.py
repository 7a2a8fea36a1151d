"""Document store: the single owner of section content and order."""

from __future__ import annotations

import logging
from collections.abc import Callable

from resume_builder.builder.registry import Patch, SectionRegistry
from resume_builder.builder.reorder import move
from resume_builder.exceptions import StateStaleError, ValidationError
from resume_builder.models.conversation import Suggestion
from resume_builder.models.document import Document
from resume_builder.models.sections import Section, SectionType

logger = logging.getLogger(__name__)

Observer = Callable[[Document], None]


class DocumentStore:
    """Owns the current Document snapshot; every mutation goes through here.

    Each operation either commits a complete new snapshot and notifies
    observers, or raises and leaves the current snapshot untouched.
    """

    def __init__(self, document: Document, registry: SectionRegistry):
        for section in document.sections:
            registry.schema_for(section.type).validate(section.content)
        self.registry = registry
        self._document = document
        self._observers: list[Observer] = []
        self._moving: str | None = None
        self._closed = False

    @property
    def document(self) -> Document:
        return self._document

    @property
    def moving_section_id(self) -> str | None:
        return self._moving

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer`` for committed snapshots. Returns an unsubscribe callable."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def close(self) -> None:
        self._closed = True
        self._moving = None
        self._observers.clear()

    # --- content ---

    def create_section(self, section_type: SectionType | str, title: str | None = None) -> str:
        """Append a section of ``section_type`` with default content; return its id."""
        self._check_open()
        section = self.registry.new_section(section_type, title=title)
        self._commit((*self._document.sections, section), f"create {section.id}")
        return section.id

    def update_section_content(self, section_id: str, patch: Patch) -> None:
        self._check_open()
        index, section = self._locate(section_id)
        schema = self.registry.schema_for(section.type)
        content = schema.apply_patch(section.content, patch)
        self._replace(index, section.model_copy(update={"content": content}), f"update {section_id}")

    def update_section_title(self, section_id: str, title: str) -> None:
        self._check_open()
        index, section = self._locate(section_id)
        if not title or not title.strip():
            raise ValidationError("section title must not be blank", section.type.value)
        self._replace(index, section.model_copy(update={"title": title.strip()}), f"rename {section_id}")

    def remove_section(self, section_id: str) -> None:
        """Remove ``section_id``; absent ids are ignored."""
        self._check_open()
        sections = self._document.sections
        remaining = tuple(s for s in sections if s.id != section_id)
        if len(remaining) == len(sections):
            logger.debug("remove %s: not present", section_id)
            return
        self._commit(remaining, f"remove {section_id}")

    def apply_suggestion(self, suggestion: Suggestion) -> None:
        """Apply assistant text to its target, re-validated against the current document.

        Raises:
            StateStaleError: the target section is gone or changed type.
            ValidationError: the text cannot be turned into a valid patch.
        """
        self._check_open()
        section = self._document.get(suggestion.section_id)
        if section is None:
            raise StateStaleError(f"Section {suggestion.section_id} no longer exists")
        if section.type != suggestion.section_type:
            raise StateStaleError(
                f"Section {suggestion.section_id} changed from {suggestion.section_type.value} "
                f"to {section.type.value}"
            )
        patch = self.registry.schema_for(section.type).patch_from_text(section.content, suggestion.text)
        self.update_section_content(section.id, patch)

    # --- ordering ---

    def reorder(self, from_index: int, to_index: int) -> None:
        self._check_open()
        sections = move(self._document.sections, from_index, to_index)
        if from_index == to_index:
            return
        self._commit(sections, f"move {from_index}->{to_index}")

    def begin_move(self, section_id: str) -> None:
        """Start a drag gesture. Nothing is stored until commit_move."""
        self._check_open()
        self._locate(section_id)
        self._moving = section_id

    def commit_move(self, section_id: str, destination_index: int) -> None:
        self._check_open()
        try:
            if self._moving != section_id:
                raise StateStaleError(f"No move in progress for section {section_id}")
            from_index, _ = self._locate(section_id)
            self.reorder(from_index, destination_index)
        finally:
            self._moving = None

    def cancel_move(self) -> None:
        self._moving = None

    # --- internals ---

    def _check_open(self) -> None:
        if self._closed:
            raise StateStaleError(f"Document {self._document.id} is closed")

    def _locate(self, section_id: str) -> tuple[int, Section]:
        index = self._document.index_of(section_id)
        if index is None:
            raise StateStaleError(f"Section {section_id} no longer exists")
        return index, self._document.sections[index]

    def _replace(self, index: int, section: Section, reason: str) -> None:
        sections = list(self._document.sections)
        sections[index] = section
        self._commit(sections, reason)

    def _commit(self, sections, reason: str) -> None:
        self._document = self._document.with_sections(sections)
        logger.debug("Document %s: %s", self._document.id, reason)
        for observer in list(self._observers):
            observer(self._document)
