"""Streamlit Web UI for resume-builder.

Left column: section editor (reorder, edit, add, remove).
Right column: live preview. Sidebar: documents, save/export, assistant chat.
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so backend clients can read them
for key in ("ANTHROPIC_API_KEY",):
    if key not in os.environ:
        try:
            os.environ[key] = st.secrets[key]
        except Exception:
            pass

from resume_builder.assistant.generators import build_generator
from resume_builder.builder.registry import build_default_registry
from resume_builder.builder.seed import seed_document
from resume_builder.builder.surface import EditingSurface
from resume_builder.config import load_config
from resume_builder.exceptions import BuilderError
from resume_builder.export.exporter import EXPORT_FORMATS, export_filename
from resume_builder.models.conversation import Role
from resume_builder.models.sections import Section, SectionType
from resume_builder.storage.document_repository import DocumentRepository

st.set_page_config(
    page_title="Resume Builder",
    page_icon=":page_facing_up:",
    layout="wide",
)

_NOTICE_FN = {"info": st.success, "warning": st.warning, "error": st.error}

_ENTRY_FIELDS = {
    SectionType.EXPERIENCE: ("company", "position", "duration", "description"),
    SectionType.EDUCATION: ("institution", "degree", "duration", "gpa"),
    SectionType.PROJECTS: ("name", "description"),
    SectionType.CERTIFICATIONS: ("name", "issuer", "date"),
}

# ---------------------------------------------------------------------------
# Surface lifecycle
# ---------------------------------------------------------------------------


def _get_config():
    return load_config()


def _repository() -> DocumentRepository:
    return DocumentRepository(_get_config().storage.resolved_db_path)


def _open_surface(document) -> EditingSurface:
    config = _get_config()
    old = st.session_state.get("surface")
    if old is not None:
        old.close()
    surface = EditingSurface.open(
        document,
        build_default_registry(),
        build_generator(config),
        repository=_repository(),
        greeting=config.assistant.greeting,
        theme=config.export.theme,
    )
    st.session_state.surface = surface
    st.session_state.notices_seen = 0
    st.session_state.pop("export", None)
    return surface


def _surface() -> EditingSurface:
    if "surface" not in st.session_state:
        config = _get_config()
        _open_surface(seed_document(build_default_registry(), owner_id=config.storage.default_owner))
    return st.session_state.surface


def _flush_notices(surface: EditingSurface) -> None:
    seen = st.session_state.get("notices_seen", 0)
    for notice in surface.notices[seen:]:
        _NOTICE_FN.get(notice.level, st.info)(notice.message)
    st.session_state.notices_seen = len(surface.notices)


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------


def _sidebar(surface: EditingSurface) -> None:
    with st.sidebar:
        st.title("Resume Builder")
        st.caption(surface.document.title)

        saved = _repository().list_documents()
        if saved:
            labels = {f"{d.title} ({d.document_id[:8]})": d.document_id for d in saved}
            choice = st.selectbox("Open saved resume", ["—"] + list(labels))
            if choice != "—":
                open_col, copy_col = st.columns(2)
                if open_col.button("Open"):
                    _open_surface(_repository().load(labels[choice]))
                    st.rerun()
                if copy_col.button("Duplicate"):
                    copy = _repository().duplicate(labels[choice])
                    surface.notify("info", f"Duplicated as '{copy.title}'")
                    st.rerun()

        if st.button("New resume"):
            _open_surface(seed_document(surface.registry, owner_id=_get_config().storage.default_owner))
            st.rerun()

        st.divider()
        if st.button("Save", type="primary"):
            surface.save()

        _export(surface)

        st.divider()
        _assistant(surface)


def _export(surface: EditingSurface) -> None:
    fmt = st.radio("Export format", list(EXPORT_FORMATS), horizontal=True)
    # Rendering (WeasyPrint for PDF) only runs when asked for
    if st.button("Prepare export", key="prepare-export"):
        st.session_state.export = (fmt, surface.document, surface.export(fmt))
    prepared = st.session_state.get("export")
    # Stale once the format or the document snapshot changes
    if prepared and prepared[0] == fmt and prepared[1] is surface.document:
        st.download_button(
            "Download",
            data=prepared[2],
            file_name=export_filename(surface.document.title, fmt),
        )


def _assistant(surface: EditingSurface) -> None:
    st.subheader("AI Assistant")
    session = surface.session
    for message in session.conversation:
        with st.chat_message("user" if message.role is Role.USER else "assistant"):
            st.markdown(message.text)
            suggestion = session.suggestion_for(message.id)
            if suggestion and st.button("Apply to section", key=f"apply-{message.id}"):
                surface.apply_suggestion(suggestion)
                st.rerun()

    targets = {"(no section)": None}
    targets.update({f"{s.title} ({s.type.value})": s.id for s in surface.document.sections})
    target = st.selectbox("Suggest for", list(targets))
    prompt = st.chat_input("Ask for help with your resume...", disabled=session.pending)
    if prompt:
        with st.spinner("Assistant is thinking..."):
            try:
                asyncio.run(session.submit(prompt, target_section_id=targets[target]))
            except BuilderError as e:
                st.warning(str(e))
        st.rerun()


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------


def _move(surface: EditingSurface, section: Section, destination: int) -> None:
    if surface.attempt(surface.store.begin_move, section.id):
        surface.attempt(surface.store.commit_move, section.id, destination)


def _edit_section(surface: EditingSurface, index: int, section: Section) -> None:
    store = surface.store
    count = len(surface.document.sections)
    with st.container(border=True):
        cols = st.columns([6, 1, 1, 1])
        cols[0].markdown(f"**{section.title}**")
        if cols[1].button("↑", key=f"up-{section.id}", disabled=index == 0):
            _move(surface, section, index - 1)
            st.rerun()
        if cols[2].button("↓", key=f"down-{section.id}", disabled=index == count - 1):
            _move(surface, section, index + 1)
            st.rerun()
        if cols[3].button("✕", key=f"rm-{section.id}"):
            surface.attempt(store.remove_section, section.id)
            st.rerun()

        content = section.content
        if section.type is SectionType.PERSONAL:
            with st.form(key=f"form-{section.id}"):
                values = {
                    f: st.text_input(f.capitalize(), value=getattr(content, f))
                    for f in ("name", "email", "phone", "location")
                }
                values["summary"] = st.text_area("Professional Summary", value=content.summary, height=120)
                if st.form_submit_button("Update"):
                    surface.attempt(store.update_section_content, section.id, values)
                    st.rerun()

        elif section.type is SectionType.SKILLS:
            st.write(" · ".join(content.skills) or "_No skills yet_")
            new_skill = st.text_input("Add new skill", key=f"skill-{section.id}")
            if st.button("Add skill", key=f"add-skill-{section.id}") and new_skill.strip():
                surface.attempt(store.update_section_content, section.id, {"op": "add", "skill": new_skill})
                st.rerun()

        else:
            fields = _ENTRY_FIELDS[section.type]
            for i, entry in enumerate(content.entries):
                with st.form(key=f"form-{section.id}-{i}"):
                    values = {
                        f: (st.text_area if f == "description" else st.text_input)(
                            f.capitalize(), value=getattr(entry, f)
                        )
                        for f in fields
                    }
                    update, delete = st.columns(2)
                    if update.form_submit_button("Update"):
                        surface.attempt(
                            store.update_section_content,
                            section.id,
                            {"op": "update", "index": i, "fields": values},
                        )
                        st.rerun()
                    if delete.form_submit_button("Remove"):
                        surface.attempt(store.update_section_content, section.id, {"op": "remove", "index": i})
                        st.rerun()
            if st.button("Add entry", key=f"add-{section.id}"):
                surface.attempt(store.update_section_content, section.id, {"op": "add", "entry": {}})
                st.rerun()


def main() -> None:
    surface = _surface()
    _sidebar(surface)
    _flush_notices(surface)

    editor, preview = st.columns(2)
    with editor:
        st.header("Editor")
        for index, section in enumerate(surface.document.sections):
            _edit_section(surface, index, section)

        with st.form(key="new-section"):
            section_type = st.selectbox("Section type", [t.value for t in SectionType])
            if st.form_submit_button("Add section"):
                surface.attempt(surface.store.create_section, section_type)
                st.rerun()

    with preview:
        st.header("Preview")
        for fragment in surface.preview:
            st.markdown(fragment.markdown)


main()
