"""Tests for the editing surface."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from resume_builder.builder.surface import EditingSurface
from resume_builder.exceptions import ConfigurationError, StateStaleError
from resume_builder.storage.document_repository import DocumentRepository


@pytest.fixture
def repo(tmp_path) -> DocumentRepository:
    return DocumentRepository(tmp_path / "documents.db")


@pytest.fixture
def surface(document, registry, fake_generator, repo) -> EditingSurface:
    return EditingSurface.open(document, registry, fake_generator, repository=repo, greeting="Hi!")


class TestEditing:
    def test_preview_tracks_commits(self, surface):
        surface.store.reorder(0, 1)
        assert [f.section_id for f in surface.preview] == surface.document.section_ids

    def test_attempt_success(self, surface):
        assert surface.attempt(surface.store.update_section_content, "personal", {"name": "Jane"})
        assert surface.notices == []

    def test_attempt_turns_errors_into_notices(self, surface):
        before = surface.document
        assert not surface.attempt(surface.store.update_section_content, "skills", {"op": "add", "skill": "Python"})
        assert not surface.attempt(surface.store.reorder, 0, 99)
        assert surface.document is before
        assert [n.level for n in surface.notices] == ["warning", "warning"]

    def test_remove_after_close_becomes_notice(self, surface):
        surface.close()
        assert not surface.attempt(surface.store.remove_section, "skills")
        assert surface.notices[-1].level == "warning"
        assert surface.document.get("skills") is not None

    def test_on_notice_callback(self, document, registry, fake_generator):
        seen = []
        surface = EditingSurface(document, registry, fake_generator, on_notice=seen.append)
        surface.notify("info", "hello")
        assert seen[0].message == "hello"


class TestAssistant:
    async def test_apply_suggestion(self, surface, fake_generator):
        task = surface.session.start("Summarize me", target_section_id="personal")
        await fake_generator.wait_called()
        fake_generator.resolve("Pragmatic engineer.")
        reply = await task

        assert surface.apply_suggestion(surface.session.suggestion_for(reply.id))
        assert surface.document.get("personal").content.summary == "Pragmatic engineer."
        assert surface.preview[0].markdown.rstrip().endswith("Pragmatic engineer.")
        assert surface.notices[-1].message == "Suggestion applied!"

    async def test_stale_suggestion_is_a_notice(self, surface, fake_generator):
        task = surface.session.start("Describe my job", target_section_id="experience")
        await fake_generator.wait_called()
        fake_generator.resolve("Led a team.")
        reply = await task
        surface.store.remove_section("experience")

        assert not surface.apply_suggestion(surface.session.suggestion_for(reply.id))
        assert "discarded" in surface.notices[-1].message
        assert surface.document.get("experience") is None

    async def test_unusable_suggestion_is_a_notice(self, surface, fake_generator):
        task = surface.session.start("Improve education", target_section_id="education")
        await fake_generator.wait_called()
        fake_generator.resolve("BSc with honours")
        reply = await task

        assert not surface.apply_suggestion(surface.session.suggestion_for(reply.id))
        assert surface.notices[-1].level == "warning"

    async def test_assistant_failure_recorded(self, surface, fake_generator):
        task = surface.session.start("help")
        await fake_generator.wait_called()
        fake_generator.reject(TimeoutError())
        await task
        assert surface.notices[-1].level == "error"

    async def test_close_while_pending(self, surface, fake_generator):
        task = surface.session.start("help", target_section_id="skills")
        await fake_generator.wait_called()
        surface.close()
        fake_generator.resolve("Docker")

        assert await task is None
        assert surface.closed
        assert len(surface.session.conversation) == 2
        with pytest.raises(StateStaleError):
            surface.store.remove_section("skills")


class TestPersistence:
    def test_save(self, surface, repo):
        surface.store.update_section_content("personal", {"name": "Jane"})
        ack = surface.save()
        assert ack.document_id == surface.document.id
        assert repo.load(ack.document_id).get("personal").content.name == "Jane"
        assert surface.notices[-1].message == "Resume saved successfully!"

    def test_save_without_repository(self, document, registry, fake_generator):
        surface = EditingSurface(document, registry, fake_generator)
        with pytest.raises(ConfigurationError):
            surface.save()

    def test_export_uses_theme(self, document, registry, fake_generator):
        exporter = MagicMock(return_value=b"artifact")
        surface = EditingSurface(document, registry, fake_generator, exporter=exporter, theme="modern")
        assert surface.export("html") == b"artifact"
        exporter.assert_called_once_with(surface.document, registry, "html", "modern")

    def test_export_renders_only_on_request(self, document, registry, fake_generator):
        exporter = MagicMock(return_value=b"artifact")
        surface = EditingSurface(document, registry, fake_generator, exporter=exporter)
        surface.store.reorder(0, 1)
        exporter.assert_not_called()

        surface.export("md")
        surface.export("md")
        assert exporter.call_count == 2
