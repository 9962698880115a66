from __future__ import annotations

from typing import Iterable, List, Optional, Set


class User:
    """A library patron and the ISBNs they currently hold.

    The borrowed set is plain bookkeeping: inserting a duplicate or removing an
    absent ISBN is a no-op here. Duplicate and ownership checks belong to
    ``Library``.
    """

    def __init__(self, user_id: str, name: str, borrowed_books: Optional[Iterable[str]] = None) -> None:
        self._user_id = user_id
        self.name = name
        self.borrowed_books: Set[str] = set(borrowed_books or ())

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def borrowed_count(self) -> int:
        return len(self.borrowed_books)

    def has_borrowed(self, isbn: str) -> bool:
        return isbn in self.borrowed_books

    def borrow_book(self, isbn: str) -> None:
        self.borrowed_books.add(isbn)

    def return_book(self, isbn: str) -> None:
        self.borrowed_books.discard(isbn)

    def list_borrowed(self) -> List[str]:
        """Snapshot of the borrowed ISBNs, in no particular order."""
        return list(self.borrowed_books)

    def copy(self) -> "User":
        return User(user_id=self._user_id, name=self.name, borrowed_books=self.borrowed_books)

    def __str__(self) -> str:
        return f"User ID: {self.user_id}, Name: {self.name}, Borrowed count: {self.borrowed_count}"

    def __repr__(self) -> str:
        return f"User(user_id={self.user_id!r}, name={self.name!r}, borrowed_books={sorted(self.borrowed_books)!r})"

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "borrowed_books": sorted(self.borrowed_books),
        }

    @staticmethod
    def from_dict(data: dict) -> "User":
        return User(
            user_id=data["user_id"],
            name=data["name"],
            borrowed_books=data.get("borrowed_books"),
        )
