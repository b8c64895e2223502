import pytest

from lumina_library.book import Book


def test_new_book_defaults():
    book = Book("  Dune ", " Frank Herbert ")
    assert book.title == "Dune"
    assert book.author == "Frank Herbert"
    assert book.id
    assert book.added_at > 0
    assert book.insight is None
    assert book.category is None
    assert book.is_generating is False


def test_ids_are_unique():
    ids = {Book("T", "A").id for _ in range(50)}
    assert len(ids) == 50


def test_to_dict_uses_stored_keys_and_omits_absent_fields():
    book = Book("Dune", "Frank Herbert", id="abc", added_at=1700000000000, is_generating=True)
    assert book.to_dict() == {
        "id": "abc",
        "title": "Dune",
        "author": "Frank Herbert",
        "addedAt": 1700000000000,
        "isGenerating": True,
    }


def test_from_dict_reads_settled_record():
    book = Book.from_dict({
        "id": "abc",
        "title": "Dune",
        "author": "Frank Herbert",
        "addedAt": 1700000000000,
        "insight": "A desert epic about power and prophecy.",
        "category": "Science Fiction",
        "isGenerating": False,
    })
    assert book.id == "abc"
    assert book.category == "Science Fiction"
    assert book.is_settled


def test_from_dict_without_generating_flag_is_settled():
    book = Book.from_dict({"id": "x", "title": "T", "author": "A", "addedAt": 1})
    assert book.is_generating is False


@pytest.mark.parametrize("data", [
    {"title": "T", "author": "A", "addedAt": 1},
    {"id": "x", "title": 5, "author": "A", "addedAt": 1},
    {"id": "x", "title": "T", "author": "A", "addedAt": "yesterday"},
    {"id": "x", "title": "T", "author": "A", "addedAt": float("inf")},
    {"id": "x", "title": "T", "author": "A", "addedAt": float("nan")},
    {"id": "x", "title": "T", "author": "A", "addedAt": 1.5},
    {"id": "x", "title": "T", "author": "A", "addedAt": True},
    {"id": None, "title": "T", "author": "A", "addedAt": 1},
    {"id": 7, "title": "T", "author": "A", "addedAt": 1},
    {"id": "x", "title": "T", "author": "A", "addedAt": 1, "insight": 5},
    {"id": "x", "title": "T", "author": "A", "addedAt": 1, "category": ["x"]},
    {"id": "x", "title": "T", "author": "A", "addedAt": 1, "isGenerating": "false"},
    ["not", "a", "dict"],
])
def test_from_dict_rejects_malformed_records(data):
    with pytest.raises((KeyError, TypeError, ValueError)):
        Book.from_dict(data)


def test_from_dict_accepts_whole_float_timestamp():
    book = Book.from_dict({"id": "x", "title": "T", "author": "A", "addedAt": 1700000000000.0})
    assert book.added_at == 1700000000000
    assert isinstance(book.added_at, int)


def test_badge_label():
    book = Book("T", "A", is_generating=True)
    assert book.badge == "Analyzing..."
    book.is_generating = False
    assert book.badge == "Book"
    book.category = "Mystery"
    assert book.badge == "Mystery"
