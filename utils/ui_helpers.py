import os
import json
from typing import Any, Dict, Iterable, List
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from catalog import Book, User
from config import settings

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"
OUTPUT_MODES = {"plain", "json", "rich"}

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in OUTPUT_MODES:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    mode = os.environ.get(OUTPUT_MODE_ENV, settings.cli_output).lower()
    return mode if mode in OUTPUT_MODES else "plain"


def format_book(book: Book) -> str:
    return str(book)


def format_user(user: User) -> str:
    return str(user)


def _sorted_books(books: Iterable[Book]) -> List[Book]:
    # Catalog order is unspecified; sort for stable console output
    return sorted(books, key=lambda b: b.isbn)


def print_books(books: Iterable[Book], title: str = "Library Books", empty_message: str = "No books in library.") -> None:
    """Print books in the current output mode.
    - plain: '<title> (<n>):' header followed by one line per book
    - json: JSON array of book dicts
    - rich: Rich table
    """
    books = _sorted_books(books)
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
        return

    if not books:
        print(empty_message)
        return

    if mode == "rich":
        table = Table(title=f"📚 {escape(title)}", show_lines=True, header_style="bold cyan")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Available", justify="center")
        for b in books:
            table.add_row(escape(b.isbn), escape(b.title), escape(b.author), "[green]Yes[/]" if b.available else "[red]No[/]")
        _console.print(table)
    else:
        print(f"{title} ({len(books)}):")
        for b in books:
            print(format_book(b))


def print_users(users: Iterable[User]) -> None:
    users = sorted(users, key=lambda u: u.user_id)
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([u.to_dict() for u in users], ensure_ascii=False))
        return

    if not users:
        print("No users registered.")
        return

    if mode == "rich":
        table = Table(title="👤 Users", show_lines=True, header_style="bold cyan")
        table.add_column("User ID", style="magenta", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Borrowed", style="white")
        for u in users:
            table.add_row(escape(u.user_id), escape(u.name), escape(", ".join(sorted(u.borrowed_books))) or "-")
        _console.print(table)
    else:
        print(f"Users ({len(users)}):")
        for u in users:
            print(format_user(u))


def print_user_detail(user: User) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(user.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        borrowed = ", ".join(sorted(user.borrowed_books)) or "none"
        content = f"[bold]Name:[/] {escape(user.name)}\n[bold]Borrowed:[/] {escape(borrowed)}"
        _console.print(Panel.fit(content, title=f"👤 {escape(user.user_id)}", border_style="blue"))
    else:
        print(format_user(user))
        for isbn in sorted(user.borrowed_books):
            print(f"  - {isbn}")


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics in the current output mode."""
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{key.replace('_', ' ').title()}:[/] {value}" for key, value in stats.items())
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for key, value in stats.items():
            print(f"{key.replace('_', ' ').title()}: {value}")
