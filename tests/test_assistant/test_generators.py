"""Tests for content generators."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from resume_builder.assistant.generators import (
    ASSISTANT_SYSTEM,
    CANNED_OPENERS,
    CannedContentGenerator,
    ClaudeContentGenerator,
    build_generator,
)
from resume_builder.clients.llm_client import LLMResponse
from resume_builder.config import AppConfig, AssistantConfig, LLMConfig
from resume_builder.exceptions import ConfigurationError
from resume_builder.models.conversation import ConversationMessage, Role


def _msg(role: Role, text: str) -> ConversationMessage:
    return ConversationMessage(role=role, text=text)


class TestToMessages:
    def test_drops_leading_assistant_greeting(self):
        history = [_msg(Role.ASSISTANT, "Hi!")]
        turns = ClaudeContentGenerator._to_messages(history, "help")
        assert turns == [{"role": "user", "content": "help"}]

    def test_alternating_history(self):
        history = [
            _msg(Role.ASSISTANT, "Hi!"),
            _msg(Role.USER, "one"),
            _msg(Role.ASSISTANT, "reply"),
        ]
        turns = ClaudeContentGenerator._to_messages(history, "two")
        assert [t["role"] for t in turns] == ["user", "assistant", "user"]
        assert turns[-1]["content"] == "two"

    def test_merges_consecutive_user_turns(self):
        # a failed request leaves a user message without a reply
        history = [_msg(Role.USER, "one")]
        turns = ClaudeContentGenerator._to_messages(history, "two")
        assert turns == [{"role": "user", "content": "one\n\ntwo"}]


class TestClaudeContentGenerator:
    async def test_generate(self, mock_llm_client):
        generator = ClaudeContentGenerator(mock_llm_client, model="m", temperature=0.2, max_tokens=100)
        result = await generator.generate([_msg(Role.ASSISTANT, "Hi!")], "Write bullets")

        assert result.text == "• Shipped things"
        kwargs = mock_llm_client.chat.call_args.kwargs
        assert kwargs["system"] == ASSISTANT_SYSTEM
        assert kwargs["model"] == "m"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 100
        assert mock_llm_client.chat.call_args.args[0] == [{"role": "user", "content": "Write bullets"}]

    async def test_history_limit(self, mock_llm_client):
        history = []
        for i in range(10):
            history += [_msg(Role.USER, f"q{i}"), _msg(Role.ASSISTANT, f"a{i}")]
        generator = ClaudeContentGenerator(mock_llm_client, history_limit=2)
        await generator.generate(history, "next")

        turns = mock_llm_client.chat.call_args.args[0]
        assert turns == [
            {"role": "user", "content": "q9"},
            {"role": "assistant", "content": "a9"},
            {"role": "user", "content": "next"},
        ]

    async def test_empty_reply_raises(self, mock_llm_client):
        mock_llm_client.chat = AsyncMock(return_value=LLMResponse(text="  ", input_tokens=1, output_tokens=0))
        with pytest.raises(ValueError):
            await ClaudeContentGenerator(mock_llm_client).generate([], "hi")


class TestCannedContentGenerator:
    async def test_cycles_openers(self):
        generator = CannedContentGenerator()
        texts = [(await generator.generate([], "x")).text for _ in range(len(CANNED_OPENERS) + 1)]
        assert texts[0].startswith(CANNED_OPENERS[0])
        assert texts[1].startswith(CANNED_OPENERS[1])
        assert texts[-1] == texts[0]
        assert all("•" in t for t in texts)


class TestBuildGenerator:
    def test_canned(self):
        config = AppConfig(assistant=AssistantConfig(provider="canned"))
        assert isinstance(build_generator(config), CannedContentGenerator)

    def test_claude_uses_llm_settings(self, mock_llm_client):
        config = AppConfig(llm=LLMConfig(model="claude-x", temperature=0.1), assistant=AssistantConfig(history_limit=4))
        generator = build_generator(config, llm=mock_llm_client)
        assert isinstance(generator, ClaudeContentGenerator)
        assert generator.model == "claude-x"
        assert generator.temperature == 0.1
        assert generator.history_limit == 4

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            build_generator(AppConfig(assistant=AssistantConfig(provider="gpt")))
