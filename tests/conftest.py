"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from resume_builder.assistant.generators import GenerationResult
from resume_builder.assistant.session import AssistantSession
from resume_builder.builder.registry import SectionRegistry, build_default_registry
from resume_builder.builder.seed import seed_document
from resume_builder.builder.store import DocumentStore
from resume_builder.clients.llm_client import LLMClient, LLMResponse
from resume_builder.models.document import Document
from resume_builder.models.sections import SectionType


class FakeGenerator:
    """Content generator that resolves or fails only when told to."""

    def __init__(self) -> None:
        self.calls: list[tuple[tuple, str]] = []
        self._futures: list[asyncio.Future] = []

    async def generate(self, history, prompt):
        future = asyncio.get_running_loop().create_future()
        self.calls.append((tuple(history), prompt))
        self._futures.append(future)
        return await future

    async def wait_called(self, count: int = 1) -> None:
        for _ in range(100):
            if len(self.calls) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"generator called {len(self.calls)} times, expected {count}")

    def resolve(self, text: str, index: int = -1) -> None:
        self._futures[index].set_result(GenerationResult(text=text))

    def reject(self, error: Exception, index: int = -1) -> None:
        self._futures[index].set_exception(error)


@pytest.fixture
def registry() -> SectionRegistry:
    return build_default_registry()


@pytest.fixture
def document(registry) -> Document:
    return seed_document(registry, owner_id="user-1", title="Test Resume")


@pytest.fixture
def abc_document(registry) -> Document:
    """Three empty sections with ids A, B, C."""
    return Document(
        owner_id="user-1",
        sections=(
            registry.new_section(SectionType.PERSONAL, section_id="A"),
            registry.new_section(SectionType.EXPERIENCE, section_id="B"),
            registry.new_section(SectionType.SKILLS, section_id="C"),
        ),
    )


@pytest.fixture
def store(document, registry) -> DocumentStore:
    return DocumentStore(document, registry)


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def notices() -> list:
    return []


@pytest.fixture
def session(store, fake_generator, notices) -> AssistantSession:
    return AssistantSession(store, fake_generator, greeting="Hi!", on_notice=notices.append)


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.chat = AsyncMock(
        return_value=LLMResponse(text="• Shipped things", input_tokens=100, output_tokens=50)
    )
    return client
