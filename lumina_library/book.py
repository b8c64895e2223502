from __future__ import annotations

import math
import time
import uuid
from datetime import datetime


def _parse_timestamp(value: object) -> int:
    """Epoch milliseconds from a stored number; rejects bools, strings and non-finite values."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError("addedAt must be a number")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValueError(f"addedAt must be a whole number, got {value!r}")
        value = int(value)
    if value < 0:
        raise ValueError(f"addedAt must not be negative, got {value!r}")
    return value


class Book:
    """A single entry in the reading list."""

    def __init__(self, title: str, author: str, id: str | None = None, added_at: int | None = None,
                 # AI fields
                 insight: str | None = None, category: str | None = None,
                 is_generating: bool = False) -> None:
        self.id = id or str(uuid.uuid4())
        self.title = title.strip()
        self.author = author.strip()
        # Epoch milliseconds
        self.added_at = added_at if added_at is not None else int(time.time() * 1000)

        # Filled in once enrichment settles
        self.insight = insight
        self.category = category
        self.is_generating = is_generating

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.id})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @property
    def is_settled(self) -> bool:
        return not self.is_generating

    @property
    def badge(self) -> str:
        """Category label shown on the card."""
        if self.category:
            return self.category
        return "Analyzing..." if self.is_generating else "Book"

    @property
    def added_date(self) -> str:
        return datetime.fromtimestamp(self.added_at / 1000).strftime("%Y-%m-%d")

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "addedAt": self.added_at,
            "isGenerating": self.is_generating,
        }
        if self.insight is not None:
            data["insight"] = self.insight
        if self.category is not None:
            data["category"] = self.category
        return data

    @staticmethod
    def from_dict(data: dict) -> "Book":
        """Build a Book from its stored form.

        Raises KeyError/TypeError/ValueError when the mapping does not look like a stored book.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected a mapping, got {type(data).__name__}")
        book_id = data["id"]
        title = data["title"]
        author = data["author"]
        if not isinstance(book_id, str) or not book_id:
            raise TypeError("id must be a non-empty string")
        if not isinstance(title, str) or not isinstance(author, str):
            raise TypeError("title and author must be strings")
        for field in ("insight", "category"):
            value = data.get(field)
            if value is not None and not isinstance(value, str):
                raise TypeError(f"{field} must be a string when present")
        is_generating = data.get("isGenerating", False)
        if not isinstance(is_generating, bool):
            raise TypeError("isGenerating must be a boolean")
        return Book(
            title=title,
            author=author,
            id=book_id,
            added_at=_parse_timestamp(data["addedAt"]),
            insight=data.get("insight"),
            category=data.get("category"),
            is_generating=is_generating,
        )
