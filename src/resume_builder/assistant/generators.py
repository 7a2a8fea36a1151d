"""Content-generation collaborators consumed by the assistant session."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from resume_builder.clients.llm_client import LLMClient
from resume_builder.config import AppConfig
from resume_builder.exceptions import ConfigurationError
from resume_builder.models.conversation import ConversationMessage, Role

logger = logging.getLogger(__name__)

ASSISTANT_SYSTEM = """\
You are a resume writing assistant inside a resume builder.
The user edits a resume made of sections (personal information, work
experience, education, skills, projects, certifications) and asks you for
content to insert.

Rules:
1. Reply with text that can be pasted into the section as-is.
2. Prefer concise bullet points starting with strong action verbs.
3. Use concrete metrics only when the user supplied them; never invent employers,
   degrees or dates.
4. For skills, answer with one skill per line.
5. No preamble about being an AI."""


@dataclass(frozen=True)
class GenerationResult:
    text: str


class ContentGenerator(Protocol):
    async def generate(
        self,
        history: Sequence[ConversationMessage],
        prompt: str,
    ) -> GenerationResult: ...


class ClaudeContentGenerator:
    """Generates suggestions through the Anthropic Messages API."""

    def __init__(
        self,
        llm: LLMClient,
        model: str = "claude-haiku-4-5-20251001",
        temperature: float = 0.4,
        max_tokens: int = 2048,
        history_limit: int = 20,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.history_limit = history_limit

    async def generate(
        self,
        history: Sequence[ConversationMessage],
        prompt: str,
    ) -> GenerationResult:
        recent = list(history)[-self.history_limit:] if self.history_limit > 0 else []
        messages = self._to_messages(recent, prompt)
        response = await self.llm.chat(
            messages,
            system=ASSISTANT_SYSTEM,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        text = response.text.strip()
        if not text:
            raise ValueError("LLM returned an empty reply")
        return GenerationResult(text=text)

    @staticmethod
    def _to_messages(history: Sequence[ConversationMessage], prompt: str) -> list[dict]:
        """Build API turns: start with a user turn, merge consecutive same-role turns."""
        turns: list[dict] = []
        for msg in (*history, ConversationMessage(role=Role.USER, text=prompt)):
            if not turns and msg.role != Role.USER:
                continue
            if turns and turns[-1]["role"] == msg.role.value:
                turns[-1]["content"] += "\n\n" + msg.text
            else:
                turns.append({"role": msg.role.value, "content": msg.text})
        return turns


CANNED_OPENERS = [
    "Here's a professional summary that highlights your key strengths and experience:",
    "I'll help you improve that section. Here's a more impactful version:",
    "Based on your experience, here's how you can better showcase your achievements:",
    "Let me suggest some powerful action verbs and metrics to strengthen your descriptions:",
]

CANNED_BODY = (
    "• Led cross-functional teams of 5+ engineers to deliver high-impact projects\n"
    "• Increased system performance by 40% through optimization initiatives\n"
    "• Implemented automated testing frameworks, reducing deployment time by 60%"
)


class CannedContentGenerator:
    """Offline generator that cycles through fixed replies. Useful for demos."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self._openers = itertools.cycle(CANNED_OPENERS)

    async def generate(
        self,
        history: Sequence[ConversationMessage],
        prompt: str,
    ) -> GenerationResult:
        if self.delay:
            await asyncio.sleep(self.delay)
        return GenerationResult(text=f"{next(self._openers)}\n\n{CANNED_BODY}")


def build_generator(config: AppConfig, llm: LLMClient | None = None) -> ContentGenerator:
    """Build the generator named by ``config.assistant.provider``."""
    provider = config.assistant.provider
    if provider == "canned":
        return CannedContentGenerator()
    if provider == "claude":
        return ClaudeContentGenerator(
            llm or LLMClient(timeout=config.llm.timeout, max_retries=config.llm.max_retries),
            model=config.llm.model,
            temperature=config.llm.temperature,
            max_tokens=config.llm.max_tokens,
            history_limit=config.assistant.history_limit,
        )
    raise ConfigurationError(f"Unknown assistant provider: {provider!r}")
