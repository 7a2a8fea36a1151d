"""Preview renderer: a pure projection of a Document into display fragments."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import markdown
from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup, escape

from resume_builder.builder.registry import SectionRegistry
from resume_builder.models.document import Document
from resume_builder.models.sections import SectionType

HTML_TEMPLATES_DIR = Path(__file__).parent.parent / "html_templates"
CSS_THEMES_DIR = HTML_TEMPLATES_DIR / "css_themes"

AVAILABLE_THEMES = ("professional", "modern", "minimal")


@dataclass(frozen=True)
class PreviewFragment:
    section_id: str
    type: SectionType
    title: str
    markdown: str
    html: str


def render(document: Document, registry: SectionRegistry) -> tuple[PreviewFragment, ...]:
    """One fragment per section, in document order. Same input, same output."""
    fragments = []
    for section in document.sections:
        body = registry.schema_for(section.type).render(section.content)
        md_text = f"## {section.title}\n\n{body}".rstrip() + "\n"
        fragments.append(PreviewFragment(
            section_id=section.id,
            type=section.type,
            title=section.title,
            markdown=md_text,
            html=_to_html(md_text),
        ))
    return tuple(fragments)


def _to_html(md_text: str) -> str:
    # Section text is user and assistant input; raw HTML in it is shown as text
    return markdown.markdown(str(escape(md_text)), extensions=["nl2br"])


def render_markdown(document: Document, registry: SectionRegistry) -> str:
    """Whole document as a single Markdown string."""
    return "\n".join(f.markdown for f in render(document, registry))


def render_page(
    document: Document,
    registry: SectionRegistry,
    theme: str = "professional",
) -> str:
    """Whole document as a themed, standalone HTML page."""
    if theme not in AVAILABLE_THEMES:
        theme = "professional"
    css_path = CSS_THEMES_DIR / f"{theme}.css"
    css = css_path.read_text(encoding="utf-8") if css_path.exists() else ""
    env = Environment(
        loader=FileSystemLoader(str(HTML_TEMPLATES_DIR)),
        autoescape=True,
    )
    template = env.get_template("page.html")
    return template.render(
        title=document.title,
        css=Markup(css),
        fragments=[(f, Markup(f.html)) for f in render(document, registry)],
    )
