"""Error taxonomy for the resume builder."""

from __future__ import annotations


class BuilderError(Exception):
    """Base class for all resume builder errors."""


class ValidationError(BuilderError):
    """Section content violates its type's schema (including duplicate entries).

    Attributes:
        message: Error description
        section_type: Type tag of the offending section, if known
    """

    def __init__(self, message: str, section_type: str | None = None):
        self.message = message
        self.section_type = section_type
        super().__init__(f"[{section_type}] {message}" if section_type else message)


class RangeError(BuilderError):
    """Reorder index falls outside the document."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Index {index} out of range for {length} sections")


class ConfigurationError(BuilderError):
    """Section type is not wired into the registry. Never recoverable at runtime."""


class AssistantRequestError(BuilderError):
    """The content-generation call failed."""


class SessionBusyError(BuilderError):
    """A prompt was submitted while another request is still pending."""


class StateStaleError(BuilderError):
    """A patch targets content that disappeared or changed shape since it was computed."""


class DocumentNotFoundError(BuilderError):
    """No stored document has the requested id."""
