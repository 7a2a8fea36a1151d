"""Tests for the document store."""

import pytest

from resume_builder.builder.store import DocumentStore
from resume_builder.exceptions import (
    ConfigurationError,
    RangeError,
    StateStaleError,
    ValidationError,
)
from resume_builder.models.conversation import Suggestion
from resume_builder.models.sections import SectionType


@pytest.fixture
def abc_store(abc_document, registry) -> DocumentStore:
    return DocumentStore(abc_document, registry)


@pytest.fixture
def snapshots(abc_store) -> list:
    seen = []
    abc_store.subscribe(seen.append)
    return seen


class TestCreate:
    def test_appends_with_defaults(self, abc_store, snapshots):
        new_id = abc_store.create_section(SectionType.CERTIFICATIONS)
        doc = abc_store.document
        assert doc.section_ids == ["A", "B", "C", new_id]
        assert doc.sections[-1].title == "Certifications"
        assert len(snapshots) == 1

    def test_custom_title(self, abc_store):
        new_id = abc_store.create_section("projects", title="Side Projects")
        assert abc_store.document.get(new_id).title == "Side Projects"

    def test_unknown_type_is_fatal(self, abc_store):
        with pytest.raises(ConfigurationError):
            abc_store.create_section("hobbies")
        assert abc_store.document.section_ids == ["A", "B", "C"]


class TestUpdateContent:
    def test_update_target_only(self, store):
        before = store.document
        store.update_section_content("personal", {"name": "Jane Roe"})
        after = store.document
        assert len(after.sections) == len(before.sections)
        assert after.get("personal").content.name == "Jane Roe"
        for old, new in zip(before.sections, after.sections):
            if old.id != "personal":
                assert old == new

    def test_validation_error_leaves_document_unchanged(self, store):
        before = store.document
        with pytest.raises(ValidationError):
            store.update_section_content("personal", {"email": "nope"})
        assert store.document is before

    def test_duplicate_skill_rejected(self, store):
        before = store.document.get("skills").content
        with pytest.raises(ValidationError):
            store.update_section_content("skills", {"op": "add", "skill": "Python"})
        assert store.document.get("skills").content == before

    def test_add_many_non_string_leaves_document_unchanged(self, store):
        before = store.document
        with pytest.raises(ValidationError):
            store.update_section_content("skills", {"op": "add_many", "skills": [None]})
        assert store.document is before
        assert "None" not in store.document.get("skills").content.skills

    def test_add_skill(self, store):
        store.update_section_content("skills", {"op": "add", "skill": "Docker"})
        assert store.document.get("skills").content.skills[-1] == "Docker"

    def test_missing_section(self, store):
        with pytest.raises(StateStaleError):
            store.update_section_content("nope", {"name": "x"})

    def test_observers_see_committed_snapshots_only(self, store):
        seen = []
        store.subscribe(seen.append)
        with pytest.raises(ValidationError):
            store.update_section_content("personal", {"email": "nope"})
        store.update_section_content("personal", {"phone": "123"})
        assert len(seen) == 1
        assert seen[0] is store.document

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        store.update_section_content("personal", {"phone": "123"})
        assert seen == []


class TestUpdateTitle:
    def test_rename(self, store):
        store.update_section_title("skills", "  Technical Skills ")
        assert store.document.get("skills").title == "Technical Skills"

    def test_blank_title(self, store):
        with pytest.raises(ValidationError):
            store.update_section_title("skills", "   ")


class TestReorder:
    def test_first_to_last(self, abc_store):
        abc_store.reorder(0, 2)
        assert abc_store.document.section_ids == ["B", "C", "A"]

    def test_last_to_first(self, abc_store):
        abc_store.reorder(2, 0)
        assert abc_store.document.section_ids == ["C", "A", "B"]

    def test_same_index_is_noop(self, abc_store, snapshots):
        before = abc_store.document
        abc_store.reorder(1, 1)
        assert abc_store.document is before
        assert snapshots == []

    def test_out_of_range(self, abc_store):
        before = abc_store.document
        with pytest.raises(RangeError):
            abc_store.reorder(0, 3)
        with pytest.raises(RangeError):
            abc_store.reorder(-1, 0)
        assert abc_store.document is before

    def test_same_index_out_of_range(self, abc_store):
        with pytest.raises(RangeError):
            abc_store.reorder(5, 5)

    def test_ids_preserved(self, store):
        ids = set(store.document.section_ids)
        store.reorder(4, 1)
        assert set(store.document.section_ids) == ids


class TestRemove:
    def test_remove_preserves_order(self, abc_store):
        abc_store.remove_section("B")
        assert abc_store.document.section_ids == ["A", "C"]

    def test_remove_is_idempotent(self, abc_store, snapshots):
        abc_store.remove_section("B")
        abc_store.remove_section("B")
        assert abc_store.document.section_ids == ["A", "C"]
        assert len(snapshots) == 1


class TestMoveProtocol:
    def test_commit(self, abc_store):
        abc_store.begin_move("A")
        assert abc_store.moving_section_id == "A"
        abc_store.commit_move("A", 2)
        assert abc_store.document.section_ids == ["B", "C", "A"]
        assert abc_store.moving_section_id is None

    def test_begin_does_not_touch_order(self, abc_store, snapshots):
        abc_store.begin_move("C")
        assert abc_store.document.section_ids == ["A", "B", "C"]
        assert snapshots == []

    def test_cancel(self, abc_store):
        abc_store.begin_move("A")
        abc_store.cancel_move()
        with pytest.raises(StateStaleError):
            abc_store.commit_move("A", 2)
        assert abc_store.document.section_ids == ["A", "B", "C"]

    def test_commit_without_begin(self, abc_store):
        with pytest.raises(StateStaleError):
            abc_store.commit_move("A", 1)

    def test_commit_other_section(self, abc_store):
        abc_store.begin_move("A")
        with pytest.raises(StateStaleError):
            abc_store.commit_move("B", 0)
        assert abc_store.moving_section_id is None

    def test_section_removed_mid_drag(self, abc_store):
        abc_store.begin_move("B")
        abc_store.remove_section("B")
        with pytest.raises(StateStaleError):
            abc_store.commit_move("B", 0)
        assert abc_store.document.section_ids == ["A", "C"]

    def test_bad_destination(self, abc_store):
        abc_store.begin_move("A")
        with pytest.raises(RangeError):
            abc_store.commit_move("A", 7)
        assert abc_store.moving_section_id is None

    def test_begin_unknown(self, abc_store):
        with pytest.raises(StateStaleError):
            abc_store.begin_move("Z")


class TestApplySuggestion:
    def test_applies_to_current_content(self, store):
        suggestion = Suggestion(
            message_id="m1", section_id="skills", section_type=SectionType.SKILLS, text="Docker\nPython"
        )
        store.apply_suggestion(suggestion)
        assert store.document.get("skills").content.skills[-1] == "Docker"

    def test_removed_target(self, store):
        store.remove_section("experience")
        before = store.document
        suggestion = Suggestion(
            message_id="m1", section_id="experience", section_type=SectionType.EXPERIENCE, text="Led"
        )
        with pytest.raises(StateStaleError):
            store.apply_suggestion(suggestion)
        assert store.document is before

    def test_changed_type(self, store):
        suggestion = Suggestion(
            message_id="m1", section_id="skills", section_type=SectionType.PERSONAL, text="Hello"
        )
        with pytest.raises(StateStaleError):
            store.apply_suggestion(suggestion)


class TestClose:
    def test_mutations_rejected_after_close(self, store):
        store.close()
        before = store.document
        with pytest.raises(StateStaleError):
            store.update_section_content("personal", {"name": "x"})
        with pytest.raises(StateStaleError):
            store.reorder(0, 1)
        with pytest.raises(StateStaleError):
            store.create_section("skills")
        assert store.document is before


def test_store_rejects_unregistered_types(document):
    from resume_builder.builder.registry import SectionRegistry

    with pytest.raises(ConfigurationError):
        DocumentStore(document, SectionRegistry())
