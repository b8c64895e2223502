import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from lumina_library.config import settings
from lumina_library.database import BookStore, KeyValueStore
from lumina_library.library import Library
from lumina_library.services.http_client import cleanup_http_client, get_http_client
from lumina_library.services.insight_service import InsightService

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def create_library(data_file: Optional[str] = None) -> Library:
    store = BookStore(KeyValueStore(data_file or settings.data_file), settings.storage_key)
    return Library(store, InsightService())


library = create_library()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Open shared resources and load the list
    await get_http_client()
    library.initialize()
    if settings.resume_pending_enrichment:
        library.resume_pending()
    try:
        yield
    finally:
        # Records cut off here stay generating and are resumed on next start
        await library.cancel_pending()
        await cleanup_http_client()


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)


@app.middleware("http")
async def add_cache_headers(request: Request, call_next):
    response = await call_next(request)
    # The page polls these while enrichment is pending
    if request.url.path == "/state" or request.url.path.startswith("/books"):
        response.headers["Cache-Control"] = "no-store"
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


# --- Models ---
class BookModel(BaseModel):
    id: str
    title: str
    author: str
    addedAt: int
    insight: str | None = None
    category: str | None = None
    isGenerating: bool = False


class BookCreateModel(BaseModel):
    title: str | None = Field(default=None, description="Falls back to the pending form title")
    author: str | None = Field(default=None, description="Falls back to the pending form author")


class FormModel(BaseModel):
    title: str | None = None
    author: str | None = None


class StateModel(BaseModel):
    books: List[BookModel]
    count: int
    title: str
    author: str
    isSubmitting: bool


# --- Health ---
@app.get("/health")
async def health():
    """Lightweight health endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_books": library.count,
        "services": {
            "insights": library.insight_service.is_available(),
        },
    }


# --- Page ---
@app.get("/")
async def read_root():
    """Serve the single-page UI."""
    return FileResponse(STATIC_DIR / "index.html")


# --- State & books ---
# Handlers are async so they run on the loop that owns the list and its tasks.
@app.get("/state", response_model=StateModel, response_model_exclude_none=True)
async def get_state():
    return library.snapshot()


@app.get("/books", response_model=List[BookModel], response_model_exclude_none=True)
async def get_books():
    """List books, most recent first."""
    return [BookModel(**b.to_dict()) for b in library.list_books()]


@app.get("/books/{book_id}", response_model=BookModel, response_model_exclude_none=True)
async def get_book(book_id: str):
    book = library.find_book(book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found.")
    return BookModel(**book.to_dict())


@app.post("/books", response_model=BookModel, status_code=201, response_model_exclude_none=True)
async def add_book(payload: BookCreateModel):
    """Add a book; its insight is generated in the background."""
    book = library.add_book(payload.title, payload.author)
    if book is None:
        raise HTTPException(status_code=422, detail="Provide a non-empty title and author.")
    return BookModel(**book.to_dict())


@app.put("/form", response_model=StateModel, response_model_exclude_none=True)
async def update_form(payload: FormModel):
    """Update the pending title/author fields."""
    library.update_form(title=payload.title, author=payload.author)
    return library.snapshot()


@app.delete("/books/{book_id}")
async def delete_book(book_id: str):
    if not library.delete_book(book_id):
        raise HTTPException(status_code=404, detail="Book not found.")
    return {"message": "Book removed."}
