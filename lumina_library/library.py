import asyncio
import logging
from typing import Any, Dict, List, Optional

from lumina_library.book import Book
from lumina_library.database import BookStore
from lumina_library.services.insight_service import BookInsight, InsightService
from lumina_library.utils.validators import TextValidator

logger = logging.getLogger(__name__)


class Library:
    """Owns the reading list, the pending form fields and the enrichment tasks.

    All methods must be called from the thread running the event loop; the
    list is never touched from anywhere else, so no locking is needed.
    """

    def __init__(self, store: BookStore, insight_service: Optional[InsightService] = None) -> None:
        self.store = store
        self.insight_service = insight_service or InsightService()

        self.books: List[Book] = []
        # Pending form fields
        self.title = ""
        self.author = ""
        self.is_submitting = False

        self._submitting_id: Optional[str] = None
        # One enrichment task per record id
        self._inflight: Dict[str, asyncio.Task] = {}

    # ------------------------- Lifecycle ------------------------- #
    def initialize(self) -> List[Book]:
        """Replace the in-memory list with whatever the store holds."""
        self.books = self.store.load()
        logger.info(f"Loaded {len(self.books)} book(s) from storage")
        return self.books

    def resume_pending(self) -> int:
        """Schedule enrichment for loaded records still marked generating.

        A record is left generating when the process stopped before its
        enrichment resolved. Returns the number of tasks scheduled.
        """
        scheduled = 0
        for book in self.books:
            if book.is_generating and book.id not in self._inflight:
                self._schedule_enrichment(book)
                scheduled += 1
        if scheduled:
            logger.info(f"Resumed enrichment for {scheduled} book(s)")
        return scheduled

    async def wait_for_enrichment(self) -> None:
        """Wait until no enrichment task is in flight."""
        pending = [t for t in self._inflight.values() if not t.done()]
        while pending:
            await asyncio.gather(*pending, return_exceptions=True)
            pending = [t for t in self._inflight.values() if not t.done()]

    async def cancel_pending(self) -> None:
        """Cancel in-flight enrichment; used at shutdown."""
        tasks = list(self._inflight.values())
        self._inflight.clear()
        for task in tasks:
            task.cancel()
        # A task cancelled before it started never reaches its cleanup
        self.is_submitting = False
        self._submitting_id = None
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------- Core operations ------------------------- #
    def update_form(self, title: Optional[str] = None, author: Optional[str] = None) -> None:
        if title is not None:
            self.title = title
        if author is not None:
            self.author = author

    def add_book(self, title: Optional[str] = None, author: Optional[str] = None) -> Optional[Book]:
        """Prepend a new generating record and start its enrichment.

        Falls back to the pending form fields for omitted arguments. Returns
        None, leaving everything untouched, when either field is blank.
        Must be called with a running event loop.
        """
        title = self.title if title is None else title
        author = self.author if author is None else author
        if not TextValidator.validate_entry(title, author):
            logger.debug("Rejected blank title/author")
            return None
        # Fail before touching state when there is no loop to enrich on
        loop = asyncio.get_running_loop()

        book = Book(title=title, author=author, is_generating=True)
        self.books.insert(0, book)
        self.title = ""
        self.author = ""
        self.is_submitting = True
        self._submitting_id = book.id
        self.save()

        self._schedule_enrichment(book, loop)
        logger.info(f"Added '{book.title}' by {book.author} ({book.id})")
        return book

    async def submit(self, title: Optional[str] = None, author: Optional[str] = None) -> Optional[Book]:
        """Run one add-and-enrich cycle and return the settled record."""
        book = self.add_book(title, author)
        if book is None:
            return None
        task = self._inflight.get(book.id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        # Deleted meanwhile: hand back the last copy we had
        return self.find_book(book.id) or book

    def delete_book(self, book_id: str) -> bool:
        remaining = [book for book in self.books if book.id != book_id]
        if len(remaining) == len(self.books):
            return False
        self.books = remaining
        self.save()
        logger.info(f"Deleted book {book_id}")
        return True

    def find_book(self, book_id: str) -> Optional[Book]:
        for book in self.books:
            if book.id == book_id:
                return book
        return None

    def list_books(self) -> List[Book]:
        return list(self.books)

    @property
    def count(self) -> int:
        return len(self.books)

    def save(self) -> None:
        self.store.save(self.books)

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the whole controller state."""
        return {
            "books": [book.to_dict() for book in self.books],
            "count": self.count,
            "title": self.title,
            "author": self.author,
            "isSubmitting": self.is_submitting,
        }

    # ------------------------- Enrichment ------------------------- #
    def _schedule_enrichment(self, book: Book, loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Task:
        loop = loop or asyncio.get_running_loop()
        task = loop.create_task(self._enrich(book.id, book.title, book.author))
        self._inflight[book.id] = task

        def _forget(done: asyncio.Task, book_id: str = book.id) -> None:
            # Only drop the entry if it is still this task
            if self._inflight.get(book_id) is done:
                self._inflight.pop(book_id, None)

        task.add_done_callback(_forget)
        return task

    async def _enrich(self, book_id: str, title: str, author: str) -> None:
        try:
            insight = await self.insight_service.fetch_insight(title, author)
            self._apply_insight(book_id, insight)
        finally:
            if self._submitting_id == book_id:
                self.is_submitting = False
                self._submitting_id = None

    def _apply_insight(self, book_id: str, insight: BookInsight) -> bool:
        """Patch a record by id; a record deleted in the meantime stays deleted."""
        book = self.find_book(book_id)
        if book is None:
            logger.debug(f"Dropping insight for deleted book {book_id}")
            return False
        book.insight = insight.insight
        book.category = insight.category
        book.is_generating = False
        self.save()
        return True
