"""Models for the assistant conversation."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from resume_builder.models.sections import SectionType


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SessionStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class ConversationMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Role
    text: str
    created_at: datetime = Field(default_factory=datetime.now)


class Suggestion(BaseModel):
    """An assistant reply bound to the section targeted when the request was issued."""

    model_config = ConfigDict(frozen=True)

    message_id: str
    section_id: str
    section_type: SectionType
    text: str


class Notice(BaseModel):
    """Short user-visible notification."""

    model_config = ConfigDict(frozen=True)

    level: str  # "info" | "warning" | "error"
    message: str
