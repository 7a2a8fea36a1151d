"""Export module for resume-builder."""
from resume_builder.export.exporter import (
    EXPORT_FORMATS,
    export_document,
    export_filename,
    save_export,
)

__all__ = ["export_document", "export_filename", "save_export", "EXPORT_FORMATS"]
