"""Maintenance CLI using Typer."""
import logging
import os
from datetime import datetime, time
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import MIN_QUERY_LENGTH, NO_FOLDER, SNIPPET_LENGTH
from ..errors import SenseiHistoryError
from ..export import conversation_to_json, conversation_to_markdown, conversation_to_text
from ..search import SearchFilters, SearchResult
from .providers import get_store

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="sensei-history",
    help="Inspect and maintain HVAC Sensei chat history",
    no_args_is_help=True,
    add_completion=False,
)

# Console for rich output
console = Console()

EXPORTERS = {
    "md": conversation_to_markdown,
    "txt": conversation_to_text,
    "json": conversation_to_json,
}


@app.callback()
def main(
    log_level: str = typer.Option(
        os.getenv("SENSEI_LOG_LEVEL", "WARNING"),
        "--log-level",
        help="Logging level: DEBUG, INFO, WARNING or ERROR"
    )
):
    """Inspect and maintain HVAC Sensei chat history."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(e: Exception) -> None:
    console.print(f"[red]Error: {escape(str(e))}[/red]")
    raise typer.Exit(code=1)


def _render_highlight(result: SearchResult, limit: int = SNIPPET_LENGTH) -> Text:
    content = result.message_content
    text = Text(content[:limit])
    for start, end in result.match_spans:
        if start < limit:
            text.stylize("bold yellow", start, min(end, limit))
    if len(content) > limit:
        text.append("...")
    return text


@app.command(name="list")
def list_conversations(
    folder: Optional[str] = typer.Option(
        None,
        "--folder",
        "-f",
        help=f"Folder id to list ('{NO_FOLDER}' for uncategorized)"
    ),
    include_archived: bool = typer.Option(
        False,
        "--archived",
        "-a",
        help="Include archived conversations"
    )
):
    """List conversations, most recently modified first."""
    try:
        with get_store(console) as store:
            if folder is None:
                conversations = store.repository.list_recent()
            elif folder == NO_FOLDER:
                conversations = store.folders.uncategorized()
            else:
                conversations = store.folders.conversations_in(folder)
    except SenseiHistoryError as e:
        _fail(e)

    if not include_archived:
        conversations = [c for c in conversations if not c.archived]

    if not conversations:
        console.print("[yellow]No conversations found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("System", style="yellow")
    table.add_column("Messages", justify="right")
    table.add_column("Modified", style="green")
    table.add_column("Flags")

    for conversation in conversations:
        flags = ("*" if conversation.starred else "") + ("A" if conversation.archived else "")
        table.add_row(
            conversation.id,
            escape(conversation.title),
            conversation.system_type or "-",
            str(conversation.message_count),
            conversation.date_modified.strftime("%Y-%m-%d %H:%M"),
            flags,
        )

    console.print(table)


@app.command()
def show(conversation_id: str = typer.Argument(..., help="Conversation id")):
    """Print a conversation transcript."""
    try:
        with get_store(console) as store:
            conversation = store.repository.get(conversation_id)
    except SenseiHistoryError as e:
        _fail(e)

    console.print(f"[bold]{escape(conversation.title)}[/bold]")
    if conversation.system_type:
        console.print(f"[dim]System: {conversation.system_type}[/dim]")
    for message in conversation.messages:
        console.print(Panel(
            escape(message.content),
            title=f"{message.role.value} - {message.timestamp.strftime('%Y-%m-%d %H:%M')}",
            border_style="cyan" if message.role.value == "user" else "green"
        ))


@app.command()
def search(
    query: str = typer.Argument(..., help="Search text (at least 2 characters)"),
    role: str = typer.Option("all", "--role", "-r", help="Message role: all, user or assistant"),
    system_type: Optional[str] = typer.Option(None, "--system-type", "-s", help="System type"),
    date_from: Optional[datetime] = typer.Option(
        None, "--from", formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"], help="Earliest message date"
    ),
    date_to: Optional[datetime] = typer.Option(
        None,
        "--to",
        formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"],
        help="Latest message date (a bare date covers the whole day)"
    ),
    starred: bool = typer.Option(False, "--starred", help="Only starred conversations"),
    folder: Optional[str] = typer.Option(None, "--folder", "-f", help="Folder id"),
    limit: int = typer.Option(20, "--limit", "-l", min=1, help="Maximum results to show")
):
    """Search message content across all conversations."""
    if date_to is not None and date_to.time() == time.min:
        date_to = datetime.combine(date_to.date(), time.max)

    filters = SearchFilters(
        query=query,
        message_type=role,
        system_type=system_type,
        date_from=date_from,
        date_to=date_to,
        starred=starred,
        folder_id=folder,
    )
    try:
        with get_store(console) as store:
            results = store.search(filters)
            if len(query.strip()) >= MIN_QUERY_LENGTH:
                store.recent_queries.record(query)
    except SenseiHistoryError as e:
        _fail(e)

    if not results:
        console.print("[yellow]No results found[/yellow]")
        return

    console.print(f"[green]Found {len(results)} results[/green]\n")
    for result in results[:limit]:
        console.print(Panel(
            _render_highlight(result),
            title=f"{escape(result.conversation_title)} ({result.message_role})",
            subtitle=result.timestamp.strftime("%Y-%m-%d %H:%M"),
            border_style="dim"
        ))


@app.command()
def archive(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Only report which conversations would be archived"
    )
):
    """Archive conversations idle for longer than the retention window."""
    try:
        with get_store(console, auto_archive=False) as store:
            if dry_run:
                stale = store.archival.stale_ids()
                console.print(f"[dim]{len(stale)} conversation(s) would be archived[/dim]")
                for conversation_id in stale:
                    console.print(f"  {conversation_id}")
                return
            count = store.archival.run_sweep()
    except SenseiHistoryError as e:
        _fail(e)

    console.print(f"[green]Archived {count} conversation(s)[/green]")


@app.command()
def folders():
    """List folders and their conversation counts."""
    try:
        with get_store(console) as store:
            folder_list = store.folders.list_folders()
            uncategorized = len(store.folders.uncategorized())
    except SenseiHistoryError as e:
        _fail(e)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Conversations", justify="right")

    for folder in folder_list:
        table.add_row(folder.id, escape(folder.name), str(len(folder.conversation_ids)))
    table.add_row(NO_FOLDER, "[dim]Uncategorized[/dim]", str(uncategorized))

    console.print(table)


@app.command()
def export(
    conversation_id: str = typer.Argument(..., help="Conversation id"),
    format: str = typer.Option("md", "--format", "-F", help="Export format: md, txt or json"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout")
):
    """Export a conversation as Markdown, text or JSON."""
    exporter = EXPORTERS.get(format)
    if exporter is None:
        console.print(f"[red]Error: Unknown format: {format}[/red]")
        raise typer.Exit(code=1)

    try:
        with get_store(console) as store:
            conversation = store.repository.get(conversation_id)
    except SenseiHistoryError as e:
        _fail(e)

    content = exporter(conversation)
    if output is None:
        typer.echo(content)
        return

    output.write_text(content, encoding="utf-8")
    console.print(f"[green]Exported to {output}[/green]")


@app.command()
def recent(
    clear: bool = typer.Option(False, "--clear", help="Forget recent searches")
):
    """Show or clear recent search queries."""
    try:
        with get_store(console, auto_archive=False) as store:
            if clear:
                store.recent_queries.clear()
                console.print("[green]Recent searches cleared[/green]")
                return
            entries = store.recent_queries.entries()
    except SenseiHistoryError as e:
        _fail(e)

    if not entries:
        console.print("[dim]No recent searches[/dim]")
        return
    for i, entry in enumerate(entries, 1):
        console.print(f"{i:>2}. {escape(entry)}")
