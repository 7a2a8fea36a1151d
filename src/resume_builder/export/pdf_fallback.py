"""Fallback PDF renderer using fpdf2 (pure Python, no system deps)."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from resume_builder.builder.preview import render
from resume_builder.builder.registry import SectionRegistry
from resume_builder.models.document import Document

logger = logging.getLogger(__name__)

# Unicode-capable font search paths (Linux, macOS, Windows)
_UNICODE_FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
    "C:/Windows/Fonts/arial.ttf",
]

_LATIN1_REPLACEMENTS = {"•": "-", "·": "|", "–": "-", "—": "-", "’": "'", "“": '"', "”": '"'}

_EMPHASIS = re.compile(r"(\*\*|__|(?<!\w)_|_(?!\w))")


def _find_unicode_font() -> str | None:
    for path in _UNICODE_FONT_PATHS:
        if Path(path).exists():
            return path
    return None


def document_to_pdf(document: Document, registry: SectionRegistry) -> bytes:
    """Lay out ``document`` section by section with fpdf2."""
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=20)
    pdf.set_title(document.title)
    pdf.add_page()

    font_name = "Helvetica"
    unicode_font = _find_unicode_font()
    if unicode_font:
        try:
            pdf.add_font("BodyFont", "", unicode_font)
            font_name = "BodyFont"
        except (OSError, RuntimeError):
            logger.debug("Failed to load font %s", unicode_font)

    def write(text: str, size: int, height: int) -> None:
        pdf.set_font(font_name, size=size)
        pdf.multi_cell(0, height, _safe_text(text, pdf), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    for fragment in render(document, registry):
        for line_type, text in _markdown_lines(fragment.markdown):
            if line_type == "heading":
                pdf.ln(3)
                write(text, 13, 8)
                pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
                pdf.ln(2)
            elif line_type == "bullet":
                write(f"  - {text}", 10, 6)
            elif line_type == "text":
                write(text, 10, 6)
            else:
                pdf.ln(2)

    return bytes(pdf.output())


def _markdown_lines(md_text: str) -> list[tuple[str, str]]:
    """Split the preview Markdown into (kind, plain text) pairs."""
    lines: list[tuple[str, str]] = []
    for raw in md_text.splitlines():
        line = raw.strip()
        if not line:
            lines.append(("break", ""))
        elif line.startswith("## "):
            lines.append(("heading", _plain(line[3:])))
        elif line.startswith(("- ", "• ")):
            lines.append(("bullet", _plain(line[2:])))
        else:
            lines.append(("text", _plain(line)))
    return lines


def _plain(text: str) -> str:
    return _EMPHASIS.sub("", text).strip()


def _safe_text(text: str, pdf: FPDF) -> str:
    """Ensure text is encodable by the current font. Replace if needed."""
    if pdf.is_ttf_font:
        return text
    for src, dst in _LATIN1_REPLACEMENTS.items():
        text = text.replace(src, dst)
    return text.encode("latin-1", errors="replace").decode("latin-1")
