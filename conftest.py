import os

# Keep imports from touching a real storage file or the network
os.environ.setdefault("LUMINA_DATA_FILE", os.path.join(os.environ.get("TMPDIR", "/tmp"), "lumina_library_test.db"))
os.environ["GEMINI_API_KEY"] = ""
os.environ["API_KEY"] = ""

import pytest

from lumina_library.database import BookStore, KeyValueStore
from lumina_library.library import Library
from lumina_library.services.insight_service import BookInsight


class FakeInsightService:
    """Insight service double; records calls and can be held open with ``gate``."""

    def __init__(self, result=None, gate=None):
        self.result = result or BookInsight(insight="A fake insight.", category="Fiction")
        self.gate = gate
        self.calls = []

    def is_available(self):
        return True

    async def fetch_insight(self, title, author):
        self.calls.append((title, author))
        if self.gate is not None:
            await self.gate.wait()
        return self.result


@pytest.fixture
def db_file(tmp_path, request):
    # Unique storage file per test
    return str(tmp_path / f"test_{request.node.name}.db")


@pytest.fixture
def store(db_file):
    return BookStore(KeyValueStore(db_file))


@pytest.fixture
def fake_insight_factory():
    return FakeInsightService


@pytest.fixture
def insight_service():
    return FakeInsightService()


@pytest.fixture
def lib(store, insight_service):
    library = Library(store, insight_service)
    library.initialize()
    return library
