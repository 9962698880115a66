import logging
import shlex
import subprocess
import sys
from typing import Callable, Dict, Optional, Tuple

import typer
from rich.console import Console
from rich.prompt import Prompt

from catalog import Book, Library, LibraryError, User
from catalog.demo import load_demo_catalog
from config import settings
from utils.ui_helpers import (
    print_books,
    print_stats_result,
    print_user_detail,
    print_users,
    set_output_mode,
)

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

console = Console()

# Command name -> usage line shown by 'help' and on wrong argument counts
SHELL_COMMANDS: Dict[str, str] = {
    "add-book": "add-book <isbn> <title> <author>",
    "remove-book": "remove-book <isbn>",
    "add-user": "add-user <user_id> <name>",
    "remove-user": "remove-user <user_id>",
    "borrow": "borrow <user_id> <isbn>",
    "return": "return <user_id> <isbn>",
    "book": "book <isbn>",
    "user": "user <user_id>",
    "books": "books",
    "users": "users",
    "search-title": "search-title <text>",
    "search-author": "search-author <text>",
    "stats": "stats",
    "help": "help",
    "quit": "quit",
}

# Arity None: remaining words are joined into a single argument
_REST = None


class LibraryShell:
    """Interactive command session over one Library owned by the caller."""

    def __init__(self, library: Library) -> None:
        self.library = library
        self._handlers: Dict[str, Tuple[Optional[int], Callable[..., None]]] = {
            "add-book": (3, self._add_book),
            "remove-book": (1, self._remove_book),
            "add-user": (2, self._add_user),
            "remove-user": (1, self._remove_user),
            "borrow": (2, self._borrow),
            "return": (2, self._return),
            "book": (1, self._show_book),
            "user": (1, self._show_user),
            "books": (0, self._list_books),
            "users": (0, self._list_users),
            "search-title": (_REST, self._search_title),
            "search-author": (_REST, self._search_author),
            "stats": (0, self._stats),
        }

    def execute(self, line: str) -> bool:
        """Run one command line. Returns False once the session should end."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            print(f"Error: {e}")
            return True
        if not parts:
            return True

        command, args = parts[0].lower(), parts[1:]
        if command in ("quit", "exit"):
            return False
        if command == "help":
            self._help()
            return True

        entry = self._handlers.get(command)
        if entry is None:
            print(f"Unknown command: {command}. Type 'help' for a list of commands.")
            return True

        arity, handler = entry
        if arity is _REST:
            args = [" ".join(args)]
        elif len(args) != arity:
            print(f"Usage: {SHELL_COMMANDS[command]}")
            return True

        try:
            handler(*args)
        except LibraryError as e:
            logger.debug("Command %r rejected: %s", command, e.kind.value)
            print(f"Error [{e.kind.value}]: {e.message}")
        return True

    # ------------------------- Handlers ------------------------- #
    def _help(self) -> None:
        print("Available commands:")
        for usage in SHELL_COMMANDS.values():
            print(f"  {usage}")

    def _add_book(self, isbn: str, title: str, author: str) -> None:
        self.library.add_book(Book(isbn, title, author))
        print(f"Added book {isbn}.")

    def _remove_book(self, isbn: str) -> None:
        self.library.remove_book(isbn)
        print(f"Removed book {isbn}.")

    def _add_user(self, user_id: str, name: str) -> None:
        self.library.add_user(User(user_id, name))
        print(f"Added user {user_id}.")

    def _remove_user(self, user_id: str) -> None:
        self.library.remove_user(user_id)
        print(f"Removed user {user_id}.")

    def _borrow(self, user_id: str, isbn: str) -> None:
        self.library.borrow_book(user_id, isbn)
        print(f"User {user_id} borrowed {isbn}.")

    def _return(self, user_id: str, isbn: str) -> None:
        self.library.return_book(user_id, isbn)
        print(f"User {user_id} returned {isbn}.")

    def _show_book(self, isbn: str) -> None:
        print_books([self.library.get_book(isbn)], title="Book")

    def _show_user(self, user_id: str) -> None:
        print_user_detail(self.library.get_user(user_id))

    def _list_books(self) -> None:
        print_books(self.library.list_books())

    def _list_users(self) -> None:
        print_users(self.library.list_users())

    def _search_title(self, text: str) -> None:
        print_books(
            self.library.search_by_title(text),
            title=f"Title matches for '{text}'",
            empty_message="No matching books.",
        )

    def _search_author(self, text: str) -> None:
        print_books(
            self.library.search_by_author(text),
            title=f"Author matches for '{text}'",
            empty_message="No matching books.",
        )

    def _stats(self) -> None:
        print_stats_result(self.library.get_statistics())


def run_shell(library: Library) -> None:
    shell = LibraryShell(library)
    print(f"{settings.app_name} shell. Type 'help' for commands, 'quit' to exit.")
    logger.info("Shell session started")
    while True:
        try:
            line = Prompt.ask("library", console=console)
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not shell.execute(line):
            break
    logger.info("Shell session ended")
    print("Goodbye.")


# --- Typer CLI application ---
app = typer.Typer(help="Library catalog CLI")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global options for the CLI (e.g. output mode)."""
    if output:
        set_output_mode(output)


@app.command("demo")
def cli_demo():
    """Run a short scripted walkthrough on the demo catalog."""
    library = Library()
    load_demo_catalog(library)

    print("=== Simple interactive demo ===")
    print_books(library.list_books())
    print_users(library.list_users())

    print("\nCharlie (U100) borrows ISBN-A...")
    library.borrow_book("U100", "ISBN-A")
    print_books(library.list_books())

    print("\nCharlie returns ISBN-A...")
    library.return_book("U100", "ISBN-A")
    print_books(library.list_books())

    print("\nSearch for 'Data':")
    print_books(library.search_by_title("Data"), title="Search results", empty_message="No matching books.")


@app.command("shell")
def cli_shell(seed: bool = typer.Option(False, "--seed/--no-seed", help="Preload the demo catalog")):
    """Start an interactive session over a fresh in-memory catalog."""
    library = Library()
    if seed:
        load_demo_catalog(library)
    run_shell(library)


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from API_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (default from API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Restart the server on code changes"),
):
    """Start the HTTP API with uvicorn."""
    host = host or settings.api_host
    port = port or settings.api_port
    print(f"Starting API on http://{host}:{port}/")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "api:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        args.append("--reload")
    logger.info("Launching uvicorn: %s", " ".join(args))
    subprocess.run(args, check=False)


if __name__ == "__main__":
    app()
