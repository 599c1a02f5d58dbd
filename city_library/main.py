import logging
import sys
from typing import NoReturn, Optional, Tuple

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from city_library.book import BookField
from city_library.config import settings
from city_library.errors import LibraryError
from city_library.library import Library
from city_library.ui_helpers import (
    print_book_list,
    print_member_list,
    print_stats_result,
    set_output_mode,
)

APP_NAME = settings.app_name

console = Console()


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Single Library instance shared by the commands of one process
class LibraryManager:
    _instance: Optional[Library] = None
    _files_snapshot: Optional[Tuple[str, str]] = None

    @classmethod
    def get_instance(cls) -> Library:
        """Get or create the Library for the configured data files."""
        files = (settings.books_file, settings.members_file)
        # Re-create the instance if the data files changed (e.g. per-test files)
        if cls._instance is None or files != cls._files_snapshot:
            cls._instance = Library(*files)
            cls._files_snapshot = files
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None
        cls._files_snapshot = None


def _fail(error: LibraryError) -> NoReturn:
    print(f"Error: {error}")
    raise typer.Exit(code=1)


# --- Typer CLI application ---
app = typer.Typer(help="City Library catalog manager")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    if output:
        set_output_mode(output)


@app.command("add-book")
def cli_add_book(title: str, author: str, category: str):
    """Add a book to the catalog."""
    lib = LibraryManager.get_instance()
    try:
        book_id = lib.add_book(title, author, category)
    except LibraryError as e:
        _fail(e)
    print(f"Book added successfully with ID: {book_id}")


@app.command("add-member")
def cli_add_member(name: str, email: str):
    """Register a new member."""
    lib = LibraryManager.get_instance()
    try:
        member_id = lib.add_member(name, email)
    except LibraryError as e:
        _fail(e)
    print(f"Member added successfully with ID: {member_id}")


@app.command("issue")
def cli_issue(book_id: int, member_id: int):
    """Issue a book to a member."""
    lib = LibraryManager.get_instance()
    try:
        lib.issue_book(book_id, member_id)
    except LibraryError as e:
        _fail(e)
    print(f"Book {book_id} issued to member {member_id}.")


@app.command("return")
def cli_return(book_id: int, member_id: int):
    """Return a book from a member."""
    lib = LibraryManager.get_instance()
    try:
        lib.return_book(book_id, member_id)
    except LibraryError as e:
        _fail(e)
    print(f"Book {book_id} returned by member {member_id}.")


@app.command("search")
def cli_search(
    field: BookField = typer.Argument(..., help="Field to search: title | author | category"),
    term: str = typer.Argument(..., help="Text to look for (case-insensitive)"),
):
    """Search books by title, author or category."""
    books = LibraryManager.get_instance().search_books(field, term)
    print_book_list(books, title=f"🔎 Results for '{term}'")


@app.command("sort")
def cli_sort(field: BookField = typer.Argument(..., help="Field to sort by: title | author | category")):
    """List books sorted by title, author or category."""
    books = LibraryManager.get_instance().sort_books(field)
    print_book_list(books, title=f"📚 Books sorted by {field.value}", empty_message="No books available to sort.")


@app.command("stats")
def cli_stats():
    """Show library statistics."""
    print_stats_result(LibraryManager.get_instance().get_statistics())


@app.command("list")
def cli_list():
    """List all books."""
    print_book_list(LibraryManager.get_instance().list_books(), empty_message="No books in library.")


@app.command("members")
def cli_members():
    """List all members and the books they hold."""
    print_member_list(LibraryManager.get_instance().list_members())


# --- Interactive menu ---
def _ask_field(action: str) -> BookField:
    choice = Prompt.ask(f"{action} by", choices=[f.value for f in BookField], default=BookField.TITLE.value)
    return BookField(choice)


def add_book(lib: Library) -> None:
    title = Prompt.ask("Enter Book Title")
    author = Prompt.ask("Enter Author")
    category = Prompt.ask("Enter Category")
    book_id = lib.add_book(title, author, category)
    console.print(f"[green]✅ Book added successfully with ID: [bold]{book_id}[/][/]")


def add_member(lib: Library) -> None:
    name = Prompt.ask("Enter Member Name")
    email = Prompt.ask("Enter Email")
    member_id = lib.add_member(name, email)
    console.print(f"[green]✅ Member added successfully with ID: [bold]{member_id}[/][/]")


def issue_book(lib: Library) -> None:
    book_id = IntPrompt.ask("Enter Book ID")
    member_id = IntPrompt.ask("Enter Member ID")
    lib.issue_book(book_id, member_id)
    console.print("[green]✅ Book issued successfully![/]")


def return_book(lib: Library) -> None:
    book_id = IntPrompt.ask("Enter Book ID")
    member_id = IntPrompt.ask("Enter Member ID")
    lib.return_book(book_id, member_id)
    console.print("[green]✅ Book returned successfully![/]")


def search_books(lib: Library) -> None:
    field = _ask_field("Search")
    term = Prompt.ask("Enter search term")
    print_book_list(
        lib.search_books(field, term),
        title=f"🔎 Results for '{escape(term)}'",
        empty_message=f"🔍 No books found for '{term}'.",
        mode="rich",
    )


def sort_books(lib: Library) -> None:
    field = _ask_field("Sort")
    print_book_list(
        lib.sort_books(field),
        title=f"📚 Books sorted by {field.value.title()}",
        empty_message="No books available to sort.",
        mode="rich",
    )


def show_stats(lib: Library) -> None:
    print_stats_result(lib.get_statistics(), mode="rich")


MENU_ACTIONS = {
    "1": ("Add Book", "➕", add_book),
    "2": ("Add Member", "👤", add_member),
    "3": ("Issue Book", "📤", issue_book),
    "4": ("Return Book", "📥", return_book),
    "5": ("Search Books", "🔎", search_books),
    "6": ("Sort Books", "🔤", sort_books),
    "7": ("View Statistics", "📊", show_stats),
}
EXIT_CHOICE = "8"


def run_menu() -> None:
    """Simple interactive menu for the library."""
    lib = LibraryManager.get_instance()

    def render_menu() -> None:
        table = Table.grid(padding=(0, 2))
        table.add_column(justify="right", style="bold cyan", width=4)
        table.add_column(justify="left", style="white")
        for key, (label, icon, _) in MENU_ACTIONS.items():
            table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")
        table.add_row(f"[reverse]{EXIT_CHOICE}[/]", "🚪 Exit")

        console.print(Panel(
            table,
            title=f"Welcome to {APP_NAME}",
            border_style="cyan",
            box=box.HEAVY,
            padding=(1, 2),
        ))

    choices = list(MENU_ACTIONS) + [EXIT_CHOICE]
    try:
        while True:
            render_menu()
            choice = Prompt.ask("Enter your choice", choices=choices, default="7").strip()

            if choice == EXIT_CHOICE:
                break

            label, _, action = MENU_ACTIONS[choice]
            try:
                action(lib)
            except LibraryError as e:
                console.print(f"[bold red]{label} failed:[/] {e}")
            console.print()
    except (KeyboardInterrupt, EOFError):
        console.print()
    finally:
        lib.close()
    console.print("[green]Data saved. Goodbye![/]")


def run() -> None:
    """Console entry point: menu without arguments, Typer commands otherwise."""
    configure_logging()
    if len(sys.argv) > 1:
        app()
    else:
        run_menu()


if __name__ == "__main__":
    run()
