"""Content assistant session: conversation log plus one in-flight request."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from resume_builder.assistant.generators import ContentGenerator
from resume_builder.builder.store import DocumentStore
from resume_builder.config import DEFAULT_GREETING
from resume_builder.exceptions import (
    AssistantRequestError,
    SessionBusyError,
    StateStaleError,
    ValidationError,
)
from resume_builder.models.conversation import (
    ConversationMessage,
    Notice,
    Role,
    SessionStatus,
    Suggestion,
)
from resume_builder.models.sections import SectionType

logger = logging.getLogger(__name__)

NoticeCallback = Callable[[Notice], None]


class AssistantSession:
    """Drives ``idle -> pending -> idle`` around a content generator.

    At most one request is pending at a time; a prompt submitted while
    pending is rejected, never queued. The user message is appended before
    the generator is called, and a successful reply is appended right after
    it. A failed request leaves only the user message and records
    ``last_error``.
    """

    def __init__(
        self,
        store: DocumentStore,
        generator: ContentGenerator,
        *,
        greeting: str = DEFAULT_GREETING,
        on_notice: NoticeCallback | None = None,
    ):
        self.store = store
        self.generator = generator
        self.status = SessionStatus.IDLE
        self.last_error: AssistantRequestError | None = None
        self._conversation: list[ConversationMessage] = []
        self._suggestions: dict[str, Suggestion] = {}
        self._task: asyncio.Task | None = None
        self._current = True
        self._on_notice = on_notice
        if greeting:
            self._conversation.append(ConversationMessage(role=Role.ASSISTANT, text=greeting))

    @property
    def conversation(self) -> tuple[ConversationMessage, ...]:
        return tuple(self._conversation)

    @property
    def is_current(self) -> bool:
        return self._current

    @property
    def pending(self) -> bool:
        return self.status is SessionStatus.PENDING

    @property
    def suggestions(self) -> tuple[Suggestion, ...]:
        return tuple(self._suggestions.values())

    def suggestion_for(self, message_id: str) -> Suggestion | None:
        return self._suggestions.get(message_id)

    def start(
        self,
        prompt: str,
        target_section_id: str | None = None,
    ) -> asyncio.Task:
        """Append the user message and schedule the generator call.

        Must be called from inside a running event loop. The returned task
        resolves to the assistant message, or ``None`` when the request failed
        or the session was closed before the reply arrived.

        Raises:
            SessionBusyError: a request is already pending.
            ValidationError: the prompt is blank.
            StateStaleError: the session is closed or the target section is gone.
        """
        if not self._current:
            raise StateStaleError("Assistant session is closed")
        if self.status is SessionStatus.PENDING:
            raise SessionBusyError("Assistant is still working on the previous prompt")
        if not prompt or not prompt.strip():
            raise ValidationError("prompt must not be empty")

        target: tuple[str, SectionType] | None = None
        if target_section_id is not None:
            section = self.store.document.get(target_section_id)
            if section is None:
                raise StateStaleError(f"Section {target_section_id} no longer exists")
            target = (section.id, section.type)

        loop = asyncio.get_running_loop()
        history = tuple(self._conversation)
        user_message = ConversationMessage(role=Role.USER, text=prompt.strip())
        self._conversation.append(user_message)
        self.status = SessionStatus.PENDING
        self.last_error = None
        self._task = loop.create_task(self._run(history, user_message, target))
        return self._task

    async def submit(
        self,
        prompt: str,
        target_section_id: str | None = None,
    ) -> ConversationMessage | None:
        """Start a request and wait for it to settle."""
        return await self.start(prompt, target_section_id)

    async def wait(self) -> None:
        """Wait for the pending request, if any, to settle."""
        if self._task is not None and not self._task.done():
            await self._task

    def close(self) -> None:
        """Mark the session as no longer current. Late replies are discarded."""
        if self._current:
            logger.debug("Assistant session closed (pending=%s)", self.pending)
        self._current = False

    def apply_suggestion(self, suggestion: Suggestion) -> None:
        """Apply ``suggestion`` through the document store.

        The conversation is never touched, whatever the outcome.

        Raises:
            StateStaleError: the session is closed or the target section is gone.
            ValidationError: the suggestion does not fit the section.
        """
        if not self._current:
            raise StateStaleError("Assistant session is closed")
        self.store.apply_suggestion(suggestion)

    async def _run(
        self,
        history: tuple[ConversationMessage, ...],
        user_message: ConversationMessage,
        target: tuple[str, SectionType] | None,
    ) -> ConversationMessage | None:
        try:
            result = await self.generator.generate(history, user_message.text)
            text = result.text.strip()
            if not text:
                raise ValueError("empty reply from content generator")
        except asyncio.CancelledError:
            self.status = SessionStatus.IDLE
            raise
        except Exception as e:
            self.status = SessionStatus.IDLE
            logger.error("Assistant request failed", exc_info=True)
            if not self._current:
                return None
            error = AssistantRequestError(str(e) or type(e).__name__)
            error.__cause__ = e
            self.last_error = error
            self._notify("error", "Failed to get assistant response. Please try again.")
            return None

        self.status = SessionStatus.IDLE
        if not self._current:
            logger.info("Discarding assistant reply for closed session")
            return None

        reply = ConversationMessage(role=Role.ASSISTANT, text=text)
        self._conversation.append(reply)
        if target is not None:
            section_id, section_type = target
            self._suggestions[reply.id] = Suggestion(
                message_id=reply.id,
                section_id=section_id,
                section_type=section_type,
                text=text,
            )
        return reply

    def _notify(self, level: str, message: str) -> None:
        if self._on_notice:
            self._on_notice(Notice(level=level, message=message))
