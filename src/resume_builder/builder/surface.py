"""Editing surface: one open document with its store, preview and assistant."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from resume_builder.assistant.generators import ContentGenerator
from resume_builder.assistant.session import AssistantSession, NoticeCallback
from resume_builder.builder.preview import PreviewFragment, render
from resume_builder.builder.registry import SectionRegistry
from resume_builder.builder.store import DocumentStore
from resume_builder.config import DEFAULT_GREETING
from resume_builder.exceptions import (
    ConfigurationError,
    RangeError,
    StateStaleError,
    ValidationError,
)
from resume_builder.export.exporter import export_document
from resume_builder.models.conversation import Notice, Suggestion
from resume_builder.models.document import Document
from resume_builder.storage.document_repository import DocumentRepository, SaveAck

logger = logging.getLogger(__name__)

Exporter = Callable[[Document, SectionRegistry, str, str], bytes]

RECOVERABLE = (ValidationError, RangeError, StateStaleError)


class EditingSurface:
    """Binds a DocumentStore and an AssistantSession for one open builder.

    Recoverable errors from user actions are turned into notices; the
    document and conversation stay usable.
    """

    def __init__(
        self,
        document: Document,
        registry: SectionRegistry,
        generator: ContentGenerator,
        *,
        repository: DocumentRepository | None = None,
        exporter: Exporter = export_document,
        greeting: str = DEFAULT_GREETING,
        theme: str = "professional",
        on_notice: NoticeCallback | None = None,
    ):
        self.registry = registry
        self.repository = repository
        self.exporter = exporter
        self.theme = theme
        self.notices: list[Notice] = []
        self._on_notice = on_notice
        self.store = DocumentStore(document, registry)
        self.session = AssistantSession(
            self.store, generator, greeting=greeting, on_notice=self._record
        )
        self._preview = render(document, registry)
        self.store.subscribe(self._refresh_preview)

    @classmethod
    def open(
        cls,
        document: Document,
        registry: SectionRegistry,
        generator: ContentGenerator,
        **kwargs: Any,
    ) -> "EditingSurface":
        return cls(document, registry, generator, **kwargs)

    @property
    def document(self) -> Document:
        return self.store.document

    @property
    def preview(self) -> tuple[PreviewFragment, ...]:
        return self._preview

    @property
    def closed(self) -> bool:
        return self.store.closed

    def notify(self, level: str, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self._record(notice)
        return notice

    def attempt(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
        """Run a store operation; recoverable failures become a warning notice."""
        try:
            operation(*args, **kwargs)
        except RECOVERABLE as e:
            logger.info("Rejected %s: %s", getattr(operation, "__name__", operation), e)
            self.notify("warning", str(e))
            return False
        return True

    def apply_suggestion(self, suggestion: Suggestion) -> bool:
        try:
            self.session.apply_suggestion(suggestion)
        except StateStaleError:
            self.notify("warning", "The section this suggestion was for has changed; suggestion discarded.")
            return False
        except ValidationError as e:
            self.notify("warning", f"Suggestion could not be applied: {e}")
            return False
        self.notify("info", "Suggestion applied!")
        return True

    def save(self) -> SaveAck:
        if self.repository is None:
            raise ConfigurationError("No document repository configured")
        ack = self.repository.save(self.store.document)
        self.notify("info", "Resume saved successfully!")
        return ack

    def export(self, fmt: str = "pdf") -> bytes:
        return self.exporter(self.store.document, self.registry, fmt, self.theme)

    def close(self) -> None:
        """Detach the session and freeze the store. Late replies are discarded."""
        self.session.close()
        self.store.close()

    def _refresh_preview(self, document: Document) -> None:
        self._preview = render(document, self.registry)

    def _record(self, notice: Notice) -> None:
        self.notices.append(notice)
        if self._on_notice:
            self._on_notice(notice)
