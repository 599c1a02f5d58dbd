import json
import os
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from city_library.book import Book
from city_library.member import Member

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def print_book_list(books: List[Book], title: str = "📚 Books", empty_message: str = "No books found.",
                    mode: Optional[str] = None) -> None:
    """Print books in the current output mode.
    - plain: 'ID - Title by Author [Category] (Status)' lines
    - json: JSON array of book dicts
    - rich: Rich table
    """
    mode = mode or get_output_mode()

    if not books:
        print(empty_message)
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=title, show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Category", style="white")
        table.add_column("Status")
        for b in books:
            status = "[red]Issued[/]" if b.issued else "[green]Available[/]"
            table.add_row(str(b.id), escape(b.title), escape(b.author), escape(b.category), status)
        _console.print(table)
    else:
        for b in books:
            print(f"{b.id} - {b.title} by {b.author} [{b.category}] ({b.status})")


def print_member_list(members: List[Member]) -> None:
    mode = get_output_mode()

    if not members:
        print("No members registered.")
        return

    if mode == "json":
        print(json.dumps([m.to_dict() for m in members], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="👥 Members", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Email", style="white")
        table.add_column("Issued Books", style="white")
        for m in members:
            table.add_row(str(m.id), escape(m.name), escape(m.email), _format_issued(m))
        _console.print(table)
    else:
        for m in members:
            print(f"{m.id} - {m.name} <{m.email}> issued: {_format_issued(m)}")


def print_stats_result(stats: Dict[str, Any], mode: Optional[str] = None) -> None:
    """Print statistics in the current output mode, or in ``mode`` if given."""
    mode = mode or get_output_mode()

    total = stats.get("total_books", 0)
    issued = stats.get("issued_count", 0)
    available = stats.get("available_count", 0)
    members = stats.get("total_members", 0)

    if mode == "json":
        print(json.dumps({
            "total_books": total,
            "issued_count": issued,
            "available_count": available,
            "total_members": members,
        }, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Total Books:[/] {total}\n"
            f"[bold]Books Issued:[/] {issued}\n"
            f"[bold]Books Available:[/] {available}\n"
            f"[bold]Total Members:[/] {members}"
        )
        _console.print(Panel.fit(content, title="📊 Library Statistics", border_style="blue"))
    else:
        print(f"Total Books: {total}")
        print(f"Books Issued: {issued}")
        print(f"Books Available: {available}")
        print(f"Total Members: {members}")


def _format_issued(member: Member) -> str:
    issued = member.issued_books
    return ", ".join(str(b) for b in issued) if issued else "None"
