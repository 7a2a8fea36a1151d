"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_GREETING = (
    "Hi! I'm your resume assistant. I can help you:\n\n"
    "• Generate professional content for any section\n"
    "• Improve your existing descriptions\n"
    "• Tailor your resume for specific job roles\n"
    "• Fix grammar and enhance readability\n\n"
    "What would you like help with today?"
)


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-haiku-4-5-20251001"
    max_tokens: int = 2048
    temperature: float = 0.4
    max_retries: int = 3
    timeout: int = 60


@dataclass(frozen=True)
class AssistantConfig:
    provider: str = "claude"  # "claude" | "canned"
    greeting: str = DEFAULT_GREETING
    history_limit: int = 20


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.resume-builder/documents.db"
    default_owner: str = "local"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class ExportConfig:
    theme: str = "professional"
    output_dir: str = "./output"


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        assistant=AssistantConfig(**raw.get("assistant", {})),
        storage=StorageConfig(**raw.get("storage", {})),
        export=ExportConfig(**raw.get("export", {})),
    )
