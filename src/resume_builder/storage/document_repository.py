"""SQLite-backed persistence for resume documents."""

from __future__ import annotations

import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from resume_builder.exceptions import DocumentNotFoundError
from resume_builder.models.document import Document

DEFAULT_DB_PATH = Path.home() / ".resume-builder" / "documents.db"


@dataclass(frozen=True)
class SaveAck:
    document_id: str
    saved_at: datetime


@dataclass(frozen=True)
class DocumentSummary:
    """Listing row for a dashboard."""

    document_id: str
    owner_id: str
    title: str
    section_count: int
    updated_at: datetime


class DocumentRepository:
    """Stores whole document snapshots as JSON, one row per document."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS documents (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    section_count INTEGER NOT NULL,
                    document_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_owner ON documents (owner_id)"
            )

    def save(self, document: Document) -> SaveAck:
        """Insert or replace the stored snapshot of ``document``."""
        saved_at = datetime.now()
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO documents
                   (id, owner_id, title, section_count, document_json, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    document.id,
                    document.owner_id,
                    document.title,
                    len(document.sections),
                    document.model_dump_json(),
                    saved_at.isoformat(),
                ),
            )
        return SaveAck(document_id=document.id, saved_at=saved_at)

    def load(self, document_id: str) -> Document:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT document_json FROM documents WHERE id = ?",
                (document_id,),
            ).fetchone()
        if row is None:
            raise DocumentNotFoundError(f"Document not found: {document_id}")
        return Document.model_validate_json(row[0])

    def duplicate(self, document_id: str) -> Document:
        """Store a copy of ``document_id`` under a new id, titled ``"<title> (Copy)"``."""
        original = self.load(document_id)
        copy = Document(
            id=uuid.uuid4().hex,
            owner_id=original.owner_id,
            title=f"{original.title} (Copy)",
            sections=original.sections,
        )
        self.save(copy)
        return copy

    def list_documents(self, owner_id: str | None = None, limit: int = 50) -> list[DocumentSummary]:
        """Most recently saved first, optionally filtered by owner."""
        with self._connect() as conn:
            if owner_id is not None:
                rows = conn.execute(
                    """SELECT id, owner_id, title, section_count, updated_at FROM documents
                       WHERE owner_id = ? ORDER BY updated_at DESC LIMIT ?""",
                    (owner_id, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    """SELECT id, owner_id, title, section_count, updated_at FROM documents
                       ORDER BY updated_at DESC LIMIT ?""",
                    (limit,),
                ).fetchall()
        return [
            DocumentSummary(
                document_id=row[0],
                owner_id=row[1],
                title=row[2],
                section_count=row[3],
                updated_at=datetime.fromisoformat(row[4]),
            )
            for row in rows
        ]

    def delete(self, document_id: str) -> bool:
        """Delete a stored document. Returns whether a row was removed."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))
            return cursor.rowcount > 0
