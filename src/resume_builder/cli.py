"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
import webbrowser
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from resume_builder.assistant.generators import ClaudeContentGenerator, build_generator
from resume_builder.builder.preview import render_markdown
from resume_builder.builder.registry import build_default_registry
from resume_builder.builder.seed import blank_document, seed_document
from resume_builder.builder.surface import EditingSurface
from resume_builder.config import AppConfig, load_config
from resume_builder.exceptions import BuilderError, DocumentNotFoundError
from resume_builder.export.exporter import EXPORT_FORMATS, export_filename, save_export
from resume_builder.models.conversation import Notice
from resume_builder.models.sections import SectionType
from resume_builder.storage.document_repository import DocumentRepository

app = typer.Typer(
    name="resume-builder",
    help="Build resumes from reorderable sections with an AI writing assistant",
    no_args_is_help=True,
)
console = Console()

_NOTICE_STYLE = {"info": "green", "warning": "yellow", "error": "red"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _print_notice(notice: Notice) -> None:
    style = _NOTICE_STYLE.get(notice.level, "white")
    console.print(f"[{style}]{escape(notice.message)}[/{style}]")


def _repository(config: AppConfig) -> DocumentRepository:
    return DocumentRepository(config.storage.resolved_db_path)


def _open(document_id: str, config: AppConfig, provider: str | None = None) -> EditingSurface:
    repo = _repository(config)
    try:
        document = repo.load(document_id)
    except DocumentNotFoundError:
        console.print(f"[red]Document not found: {document_id}[/red]")
        raise typer.Exit(1)
    if provider:
        config = replace(config, assistant=replace(config.assistant, provider=provider))
    return EditingSurface.open(
        document,
        build_default_registry(),
        build_generator(config),
        repository=repo,
        greeting="",
        theme=config.export.theme,
        on_notice=_print_notice,
    )


def _print_token_usage(surface: EditingSurface) -> None:
    generator = surface.session.generator
    if not isinstance(generator, ClaudeContentGenerator):
        return
    usage = generator.llm.get_token_summary()
    console.print(
        f"[dim]Tokens: {usage['input']:,} in / {usage['output']:,} out "
        f"({len(usage['calls'])} call(s))[/dim]"
    )


def _commit(surface: EditingSurface, ok: bool) -> None:
    if not ok:
        surface.close()
        raise typer.Exit(1)
    surface.save()
    surface.close()


@app.command()
def new(
    title: str = typer.Option("My Resume", "--title", "-t", help="Document title"),
    user: str = typer.Option(None, "--user", "-u", help="Owner id"),
    blank: bool = typer.Option(False, "--blank", help="Start with only a personal section"),
) -> None:
    """Create a new resume document."""
    config = load_config()
    registry = build_default_registry()
    owner = user or config.storage.default_owner
    build = blank_document if blank else seed_document
    document = build(registry, owner_id=owner, title=title)
    ack = _repository(config).save(document)
    console.print(f"[green]Created {document.title!r}: {ack.document_id}[/green]")


@app.command("list")
def list_documents(
    user: str = typer.Option(None, "--user", "-u", help="Only documents owned by this user"),
) -> None:
    """List saved resumes."""
    config = load_config()
    rows = _repository(config).list_documents(owner_id=user)
    if not rows:
        console.print("[yellow]No saved resumes.[/yellow]")
        return

    table = Table(title="Resumes")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Owner")
    table.add_column("Sections", justify="right")
    table.add_column("Updated")
    for row in rows:
        table.add_row(
            row.document_id,
            row.title,
            row.owner_id,
            str(row.section_count),
            row.updated_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@app.command()
def show(
    document_id: str = typer.Argument(help="Document id"),
    ids: bool = typer.Option(False, "--ids", help="List section ids instead of the preview"),
) -> None:
    """Show a resume preview in the terminal."""
    config = load_config()
    try:
        document = _repository(config).load(document_id)
    except DocumentNotFoundError:
        console.print(f"[red]Document not found: {document_id}[/red]")
        raise typer.Exit(1)

    if ids:
        for i, section in enumerate(document.sections):
            console.print(f"  {i}. [bold]{section.id}[/bold] ({section.type.value}) {section.title}")
        return
    console.print(Panel(Markdown(render_markdown(document, build_default_registry())), title=document.title))


@app.command()
def add(
    document_id: str = typer.Argument(help="Document id"),
    section_type: SectionType = typer.Argument(help="Section type"),
    title: str = typer.Option(None, "--title", "-t", help="Section title"),
) -> None:
    """Append a new empty section."""
    surface = _open(document_id, load_config())
    ok = surface.attempt(surface.store.create_section, section_type, title)
    _commit(surface, ok)


@app.command()
def move(
    document_id: str = typer.Argument(help="Document id"),
    from_index: int = typer.Argument(help="Current position (0-based)"),
    to_index: int = typer.Argument(help="New position (0-based)"),
) -> None:
    """Move a section to a new position."""
    surface = _open(document_id, load_config())
    ok = surface.attempt(surface.store.reorder, from_index, to_index)
    _commit(surface, ok)


@app.command()
def remove(
    document_id: str = typer.Argument(help="Document id"),
    section_id: str = typer.Argument(help="Section id"),
) -> None:
    """Remove a section."""
    surface = _open(document_id, load_config())
    ok = surface.attempt(surface.store.remove_section, section_id)
    _commit(surface, ok)


@app.command()
def patch(
    document_id: str = typer.Argument(help="Document id"),
    section_id: str = typer.Argument(help="Section id"),
    patch_json: str = typer.Argument(help='Patch as JSON, e.g. \'{"summary": "..."}\''),
) -> None:
    """Apply a content patch to a section."""
    try:
        data = json.loads(patch_json)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON: {e}[/red]")
        raise typer.Exit(1)
    surface = _open(document_id, load_config())
    ok = surface.attempt(surface.store.update_section_content, section_id, data)
    _commit(surface, ok)


@app.command()
def rename(
    document_id: str = typer.Argument(help="Document id"),
    section_id: str = typer.Argument(help="Section id"),
    title: str = typer.Argument(help="New section title"),
) -> None:
    """Rename a section."""
    surface = _open(document_id, load_config())
    ok = surface.attempt(surface.store.update_section_title, section_id, title)
    _commit(surface, ok)


@app.command()
def skill(
    document_id: str = typer.Argument(help="Document id"),
    section_id: str = typer.Argument(help="Skills section id"),
    name: str = typer.Argument(help="Skill name"),
    remove_skill: bool = typer.Option(False, "--remove", "-r", help="Remove instead of add"),
) -> None:
    """Add or remove a skill."""
    surface = _open(document_id, load_config())
    op = "remove" if remove_skill else "add"
    ok = surface.attempt(surface.store.update_section_content, section_id, {"op": op, "skill": name})
    _commit(surface, ok)


@app.command()
def assist(
    document_id: str = typer.Argument(help="Document id"),
    prompt: str = typer.Argument(help="What to ask the assistant"),
    section: str = typer.Option(None, "--section", "-s", help="Target section id for the suggestion"),
    apply: bool = typer.Option(False, "--apply", help="Apply the suggestion to the target section"),
    provider: str = typer.Option(None, "--provider", help="claude | canned"),
) -> None:
    """Ask the writing assistant for content."""
    config = load_config()
    surface = _open(document_id, config, provider)

    async def _ask():
        return await surface.session.submit(prompt, target_section_id=section)

    with console.status("Assistant is thinking..."):
        try:
            reply = asyncio.run(_ask())
        except BuilderError as e:
            surface.close()
            console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(1)

    if reply is None:
        surface.close()
        raise typer.Exit(1)

    console.print(Panel(reply.text, title="Assistant", border_style="cyan"))
    _print_token_usage(surface)

    suggestion = surface.session.suggestion_for(reply.id)
    if apply and suggestion is not None:
        _commit(surface, surface.apply_suggestion(suggestion))
    else:
        surface.close()


@app.command("export")
def export_cmd(
    document_id: str = typer.Argument(help="Document id"),
    fmt: str = typer.Option("pdf", "--format", "-f", help=f"One of {', '.join(EXPORT_FORMATS)}"),
    output: Path = typer.Option(None, "--output", "-o", help="Output file path"),
    theme: str = typer.Option(None, "--theme", help="professional | modern | minimal"),
) -> None:
    """Export a resume to PDF, HTML or Markdown."""
    config = load_config()
    if fmt not in EXPORT_FORMATS:
        console.print(f"[red]Unsupported format: {fmt}[/red]")
        raise typer.Exit(1)

    surface = _open(document_id, config)
    if theme:
        surface.theme = theme
    with console.status("Exporting..."):
        artifact = surface.export(fmt)
    surface.close()

    if output is None:
        output = Path(config.export.output_dir) / export_filename(surface.document.title, fmt)
    path = save_export(artifact, output)
    console.print(f"[green]Saved: {path}[/green]")


@app.command()
def preview(
    document_id: str = typer.Argument(help="Document id"),
) -> None:
    """Render a resume to HTML and open it in the browser."""
    config = load_config()
    surface = _open(document_id, config)
    artifact = surface.export("html")
    surface.close()
    path = save_export(artifact, Path(config.export.output_dir) / f"{document_id}.html")
    console.print(f"[green]HTML: {path}[/green]")
    webbrowser.open(path.resolve().as_uri())


@app.command()
def duplicate(
    document_id: str = typer.Argument(help="Document id"),
) -> None:
    """Copy a saved resume under a new id."""
    config = load_config()
    try:
        copy = _repository(config).duplicate(document_id)
    except DocumentNotFoundError:
        console.print(f"[red]Document not found: {document_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Duplicated as {escape(copy.title)}: {copy.id}[/green]")


@app.command()
def delete(
    document_id: str = typer.Argument(help="Document id"),
) -> None:
    """Delete a saved resume."""
    config = load_config()
    if _repository(config).delete(document_id):
        console.print(f"[green]Deleted {document_id}[/green]")
    else:
        console.print(f"[yellow]No document {document_id}[/yellow]")


if __name__ == "__main__":
    app()
