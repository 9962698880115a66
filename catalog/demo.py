"""Sample catalog used by the console demo and by a freshly seeded API."""

from catalog.book import Book
from catalog.library import Library
from catalog.user import User

DEMO_BOOKS = [
    ("ISBN-A", "Learn C++", "Author A"),
    ("ISBN-B", "Data Structures", "Author B"),
    ("ISBN-C", "Databases", "Author C"),
]
DEMO_USERS = [
    ("U100", "Charlie"),
]


def load_demo_catalog(library: Library) -> None:
    for isbn, title, author in DEMO_BOOKS:
        library.add_book(Book(isbn, title, author))
    for user_id, name in DEMO_USERS:
        library.add_user(User(user_id, name))
