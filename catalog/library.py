from __future__ import annotations

from threading import RLock
from typing import Any, Callable, Dict, List

from catalog.book import Book
from catalog.errors import (
    AlreadyExistsError,
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    NotOwnedError,
    UnavailableError,
)
from catalog.user import User


class Library:
    """Owns every book and user record and mediates all state transitions.

    Callers only ever receive copies of the stored records; all mutation goes
    through the methods below. A rejected operation raises before touching
    either collection, so failures never leave partial state behind.

    Every operation runs under a single re-entrant lock so one instance can be
    shared by the HTTP workers.
    """

    def __init__(self) -> None:
        self._books: Dict[str, Book] = {}
        self._users: Dict[str, User] = {}
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._books)

    def __contains__(self, isbn: object) -> bool:
        with self._lock:
            return isbn in self._books

    # ------------------------- Books ------------------------- #
    def add_book(self, book: Book) -> None:
        """Add a book to the catalog. It is always stored as available."""
        with self._lock:
            if not book.isbn:
                raise InvalidArgumentError("ISBN cannot be empty")
            if book.isbn in self._books:
                raise AlreadyExistsError(f"Book with ISBN {book.isbn} already exists")
            stored = book.copy()
            stored.available = True
            self._books[stored.isbn] = stored

    def remove_book(self, isbn: str) -> None:
        with self._lock:
            book = self._require_book(isbn)
            if not book.available:
                raise ConflictError(f"Cannot remove book {isbn}: it is currently borrowed")
            del self._books[isbn]

    def get_book(self, isbn: str) -> Book:
        with self._lock:
            return self._require_book(isbn).copy()

    def list_books(self) -> List[Book]:
        with self._lock:
            return [book.copy() for book in self._books.values()]

    def search_by_title(self, partial: str) -> List[Book]:
        """Case-insensitive substring search on titles. Result order is unspecified."""
        return self._search(partial, lambda book: book.title)

    def search_by_author(self, partial: str) -> List[Book]:
        """Case-insensitive substring search on authors. Result order is unspecified."""
        return self._search(partial, lambda book: book.author)

    # ------------------------- Users ------------------------- #
    def add_user(self, user: User) -> None:
        """Register a user. New users never start with loans."""
        with self._lock:
            if not user.user_id:
                raise InvalidArgumentError("User ID cannot be empty")
            if user.user_id in self._users:
                raise AlreadyExistsError(f"User {user.user_id} already exists")
            self._users[user.user_id] = User(user_id=user.user_id, name=user.name)

    def remove_user(self, user_id: str) -> None:
        with self._lock:
            user = self._require_user(user_id)
            if user.borrowed_books:
                raise ConflictError(f"Cannot remove user {user_id}: they still have borrowed books")
            del self._users[user_id]

    def get_user(self, user_id: str) -> User:
        with self._lock:
            return self._require_user(user_id).copy()

    def list_users(self) -> List[User]:
        with self._lock:
            return [user.copy() for user in self._users.values()]

    # ------------------------- Loans ------------------------- #
    def borrow_book(self, user_id: str, isbn: str) -> None:
        with self._lock:
            user = self._require_user(user_id)
            book = self._require_book(isbn)
            if not book.available:
                raise UnavailableError(f"Book {isbn} is not available")
            book.available = False
            user.borrow_book(isbn)

    def return_book(self, user_id: str, isbn: str) -> None:
        with self._lock:
            user = self._require_user(user_id)
            book = self._require_book(isbn)
            if not user.has_borrowed(isbn):
                raise NotOwnedError(f"User {user_id} did not borrow book {isbn}")
            user.return_book(isbn)
            book.available = True

    # ------------------------- Statistics ------------------------- #
    def get_statistics(self) -> Dict[str, Any]:
        with self._lock:
            borrowed = sum(1 for book in self._books.values() if not book.available)
            return {
                "total_books": len(self._books),
                "available_books": len(self._books) - borrowed,
                "borrowed_books": borrowed,
                "total_users": len(self._users),
                "unique_authors": len({book.author for book in self._books.values()}),
            }

    # ------------------------- Utilities ------------------------- #
    def _search(self, partial: str, field: Callable[[Book], str]) -> List[Book]:
        needle = partial.lower()
        with self._lock:
            return [book.copy() for book in self._books.values() if needle in field(book).lower()]

    def _require_book(self, isbn: str) -> Book:
        book = self._books.get(isbn)
        if book is None:
            raise NotFoundError("book", isbn)
        return book

    def _require_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user
