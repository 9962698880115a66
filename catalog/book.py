from __future__ import annotations


class Book:
    """Represents a single book item in the library catalog."""

    def __init__(self, isbn: str, title: str, author: str, available: bool = True) -> None:
        self._isbn = isbn
        self.title = title
        self.author = author
        self.available = available

    @property
    def isbn(self) -> str:
        return self._isbn

    def copy(self) -> "Book":
        return Book(isbn=self._isbn, title=self.title, author=self.author, available=self.available)

    def __str__(self) -> str:
        return (
            f"ISBN: {self.isbn}, Title: {self.title}, Author: {self.author}, "
            f"Available: {'Yes' if self.available else 'No'}"
        )

    def __repr__(self) -> str:
        return f"Book(isbn={self.isbn!r}, title={self.title!r}, author={self.author!r}, available={self.available!r})"

    def to_dict(self) -> dict:
        return {"isbn": self.isbn, "title": self.title, "author": self.author, "available": self.available}

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            isbn=data["isbn"],
            title=data["title"],
            author=data["author"],
            available=data.get("available", True),
        )
