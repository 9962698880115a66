from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Every way a catalog operation can be rejected."""

    INVALID_ARGUMENT = "invalid_argument"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAVAILABLE = "unavailable"
    NOT_OWNED = "not_owned"


class LibraryError(Exception):
    """Base class for rejected catalog operations. Branch on ``kind``, not on the message."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(LibraryError, ValueError):
    """An empty ISBN or user ID was supplied."""

    kind = ErrorKind.INVALID_ARGUMENT


class AlreadyExistsError(LibraryError, ValueError):
    """Identity collision on insert."""

    kind = ErrorKind.ALREADY_EXISTS


class NotFoundError(LibraryError, LookupError):
    """The referenced book or user has no record."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, key: str) -> None:
        super().__init__(f"{entity.capitalize()} {key!r} not found")
        self.entity = entity
        self.key = key


class ConflictError(LibraryError):
    """Removal blocked by an outstanding loan."""

    kind = ErrorKind.CONFLICT


class UnavailableError(LibraryError):
    """The book exists but is currently lent out."""

    kind = ErrorKind.UNAVAILABLE


class NotOwnedError(LibraryError):
    """Return attempted by a user who does not hold the loan."""

    kind = ErrorKind.NOT_OWNED
