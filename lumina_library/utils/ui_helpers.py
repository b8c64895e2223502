import os
import json
from typing import List
from rich.console import Console
from rich.table import Table
from rich.markup import escape

from lumina_library.book import Book

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LUMINA_CLI_OUTPUT"

GENERATING_TEXT = "Generating AI insights..."

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def count_label(count: int) -> str:
    return f"{count} {'Book' if count == 1 else 'Books'}"


def insight_text(book: Book) -> str:
    if book.is_generating:
        return GENERATING_TEXT
    return book.insight or ""


def print_list_result(books: List[Book]) -> None:
    """Print the reading list in the current output mode.
    - plain: '[Category] Title by Author (date)' plus an insight line, or 'No books in library.'
    - json: JSON array of stored records
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in library.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=f"📚 Recently Added ({count_label(len(books))})", show_lines=True, header_style="bold cyan")
        table.add_column("Category", style="magenta", no_wrap=True)
        table.add_column("Title", style="bold white")
        table.add_column("Author", style="white")
        table.add_column("Added", style="dim", no_wrap=True)
        table.add_column("Insight", style="italic")
        table.add_column("ID", style="dim")
        for b in books:
            table.add_row(escape(b.badge), escape(b.title), escape(b.author), b.added_date, escape(insight_text(b)), b.id)
        _console.print(table)
    else:
        print(count_label(len(books)))
        for b in books:
            print(f"[{b.badge}] {b.title} by {b.author} ({b.added_date}) - {b.id}")
            print(f"    {insight_text(b)}")


def print_book_result(book: Book) -> None:
    """Print a single record in the current output mode."""
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        _console.print(f"[bold]{escape(book.title)}[/] - {escape(book.author)} [magenta]\\[{escape(book.badge)}][/]")
        _console.print(f"[italic]{escape(insight_text(book))}[/]")
        _console.print(f"[dim]{book.id}[/]")
    else:
        print(f"Title: {book.title}")
        print(f"Author: {book.author}")
        print(f"Category: {book.badge}")
        print(f"Insight: {insight_text(book)}")
        print(f"ID: {book.id}")
