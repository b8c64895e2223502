import asyncio
import logging
import subprocess
import sys
import webbrowser
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from lumina_library.config import settings
from lumina_library.database import BookStore, KeyValueStore
from lumina_library.library import Library
from lumina_library.services.http_client import cleanup_http_client
from lumina_library.services.insight_service import InsightService
from lumina_library.utils.ui_helpers import (
    GENERATING_TEXT,
    get_output_mode,
    print_book_result,
    print_list_result,
    set_output_mode,
)

console = Console()
logger = logging.getLogger(__name__)


def create_library() -> Library:
    """Build a controller over the configured storage file and load it."""
    store = BookStore(KeyValueStore(settings.data_file), settings.storage_key)
    library = Library(store, InsightService())
    library.initialize()
    return library


async def _run_cycle(library: Library, title: str, author: str):
    try:
        return await library.submit(title, author)
    finally:
        await cleanup_http_client()


async def _run_resume(library: Library) -> int:
    try:
        scheduled = library.resume_pending()
        await library.wait_for_enrichment()
        return scheduled
    finally:
        await cleanup_http_client()


# --- Typer CLI app ---
app = typer.Typer(help="Lumina Library CLI")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log messages"),
):
    """Global options (output mode, logging)."""
    if output:
        set_output_mode(output)
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@app.command("list")
def cli_list():
    """List all books, most recent first."""
    library = create_library()
    print_list_result(library.list_books())


@app.command("add")
def cli_add(title: str, author: str):
    """Add a book and wait for its AI insight."""
    library = create_library()
    if get_output_mode() == "rich":
        with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
                      transient=True, console=console) as progress:
            progress.add_task(GENERATING_TEXT, total=None)
            book = asyncio.run(_run_cycle(library, title, author))
    else:
        book = asyncio.run(_run_cycle(library, title, author))

    if book is None:
        print("Error: title and author must not be blank.")
        raise typer.Exit(code=1)
    print_book_result(book)


@app.command("remove")
def cli_remove(book_id: str):
    """Remove a book by its id."""
    library = create_library()
    if library.delete_book(book_id):
        print(f"Book {book_id} has been removed.")
    else:
        print(f"Book {book_id} not found.")
        raise typer.Exit(code=1)


@app.command("resume")
def cli_resume():
    """Generate insights for books left generating by an interrupted session."""
    library = create_library()
    scheduled = asyncio.run(_run_resume(library))
    if scheduled:
        print(f"Generated insights for {scheduled} book(s).")
    else:
        print("No pending books.")


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Port"),
    open_browser: bool = typer.Option(True, "--open/--no-open", help="Open the page in a browser"),
):
    """Start the web UI with uvicorn."""
    host = host or settings.api_host
    port = int(port or settings.api_port)
    url = f"http://{host}:{port}/"
    print(f"Starting web UI on {url}")
    if open_browser:
        try:
            webbrowser.open(url)
        except webbrowser.Error:
            console.print("[yellow]Could not open a web browser automatically.[/]")

    args = [
        sys.executable,
        "-m", "uvicorn",
        "lumina_library.api:app",
        "--host", host,
        "--port", str(port),
    ]
    try:
        subprocess.run(args, check=False)
    except KeyboardInterrupt:
        print("Server stopped.")


if __name__ == "__main__":
    app()
