import pytest

from catalog import Book, Library, User
from utils.ui_helpers import OUTPUT_MODE_ENV


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    # The CLI stores the chosen output mode in the environment; reset it per test
    monkeypatch.setenv(OUTPUT_MODE_ENV, "plain")


@pytest.fixture
def lib():
    # Each test gets its own catalog
    return Library()


@pytest.fixture
def seeded_lib(lib):
    lib.add_book(Book("ISBN-001", "Introduction to C++", "Bjarne Stroustrup"))
    lib.add_book(Book("ISBN-002", "Programming Principles", "Jane Doe"))
    lib.add_book(Book("ISBN-003", "Algorithms in Depth", "Robert Sedgewick"))
    lib.add_user(User("U001", "Alice"))
    lib.add_user(User("U002", "Bob"))
    return lib
