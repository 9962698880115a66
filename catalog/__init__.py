"""Library Catalog - Core Package

This package contains the in-memory catalog core:
- Data models (book.py, user.py)
- Error kinds raised by the catalog (errors.py)
- The Library aggregate that owns and mutates every record (library.py)
"""

from catalog.book import Book
from catalog.errors import (
    AlreadyExistsError,
    ConflictError,
    ErrorKind,
    InvalidArgumentError,
    LibraryError,
    NotFoundError,
    NotOwnedError,
    UnavailableError,
)
from catalog.library import Library
from catalog.user import User

__all__ = [
    "AlreadyExistsError",
    "Book",
    "ConflictError",
    "ErrorKind",
    "InvalidArgumentError",
    "Library",
    "LibraryError",
    "NotFoundError",
    "NotOwnedError",
    "UnavailableError",
    "User",
]
