from __future__ import annotations

import logging
import re
from pathlib import Path

from resume_builder.builder.preview import render_markdown, render_page
from resume_builder.builder.registry import SectionRegistry
from resume_builder.models.document import Document

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("pdf", "html", "md")


def export_document(
    document: Document,
    registry: SectionRegistry,
    fmt: str = "pdf",
    theme: str = "professional",
) -> bytes:
    """Render ``document`` to an export artifact in ``fmt``."""
    if fmt == "md":
        return render_markdown(document, registry).encode("utf-8")
    if fmt == "html":
        return render_page(document, registry, theme).encode("utf-8")
    if fmt == "pdf":
        return _to_pdf(document, registry, theme)
    raise ValueError(f"Unsupported export format: {fmt!r} (expected one of {EXPORT_FORMATS})")


def export_filename(title: str, fmt: str) -> str:
    """File name for an export of a document titled ``title``; never a path."""
    stem = re.sub(r"[^\w.-]+", "_", title).strip("._") or "resume"
    return f"{stem}.{fmt}"


def save_export(artifact: bytes, output_path: str | Path) -> Path:
    """Write an export artifact to disk."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(artifact)
    return path


def _to_pdf(document: Document, registry: SectionRegistry, theme: str) -> bytes:
    """Convert via WeasyPrint, with fpdf2 fallback."""
    try:
        from weasyprint import HTML
        return HTML(string=render_page(document, registry, theme)).write_pdf()
    except (ImportError, OSError):
        logger.warning("WeasyPrint not available, using fpdf2 fallback")
        from resume_builder.export.pdf_fallback import document_to_pdf
        return document_to_pdf(document, registry)
