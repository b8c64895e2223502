import json

import pytest

from lumina_library.book import Book
from lumina_library.utils import ui_helpers
from lumina_library.utils.validators import TextValidator


@pytest.fixture(autouse=True)
def plain_mode(monkeypatch):
    monkeypatch.setenv(ui_helpers.OUTPUT_MODE_ENV, "plain")


def test_count_label():
    assert ui_helpers.count_label(0) == "0 Books"
    assert ui_helpers.count_label(1) == "1 Book"
    assert ui_helpers.count_label(7) == "7 Books"


def test_set_output_mode_ignores_unknown():
    ui_helpers.set_output_mode("RICH")
    assert ui_helpers.get_output_mode() == "rich"
    ui_helpers.set_output_mode("yaml")
    assert ui_helpers.get_output_mode() == "rich"


def test_json_list(capsys):
    ui_helpers.set_output_mode("json")
    book = Book("Dune", "Frank Herbert", insight="Spice.", category="Sci-Fi")
    ui_helpers.print_list_result([book])
    assert json.loads(capsys.readouterr().out) == [book.to_dict()]


def test_rich_list_renders():
    ui_helpers.set_output_mode("rich")
    with ui_helpers._console.capture() as capture:
        ui_helpers.print_list_result([Book("Dune", "Frank Herbert", is_generating=True)])
    output = capture.get()
    assert "Dune" in output
    assert "Analyzing..." in output
    assert "1 Book" in output


def test_insight_text():
    assert ui_helpers.insight_text(Book("T", "A", is_generating=True)) == "Generating AI insights..."
    assert ui_helpers.insight_text(Book("T", "A", insight="Nice.")) == "Nice."


@pytest.mark.parametrize("title,author,ok", [
    ("Dune", "Frank Herbert", True),
    (" Dune ", " F ", True),
    ("", "Frank Herbert", False),
    ("Dune", "  ", False),
    (None, "Frank Herbert", False),
])
def test_validate_entry(title, author, ok):
    assert TextValidator.validate_entry(title, author) is ok
