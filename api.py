import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Security
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field

from catalog import Book, ErrorKind, Library, LibraryError, User
from catalog.demo import load_demo_catalog
from config import settings

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

# Catalog error kind -> HTTP status
ERROR_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UNAVAILABLE: 409,
    ErrorKind.NOT_OWNED: 409,
}


# --- Models ---
class BookModel(BaseModel):
    isbn: str
    title: str
    author: str
    available: bool = True


class BookCreateModel(BaseModel):
    isbn: str = Field(..., description="Unique catalog key")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")


class UserModel(BaseModel):
    user_id: str
    name: str
    borrowed_books: List[str] = Field(default_factory=list)


class UserCreateModel(BaseModel):
    user_id: str = Field(..., description="Unique patron key")
    name: str


class StatsModel(BaseModel):
    total_books: int
    available_books: int
    borrowed_books: int
    total_users: int
    unique_authors: int


class MessageModel(BaseModel):
    message: str


# --- Security ---
api_key_header = APIKeyHeader(name="X-API-Key")


def get_api_key(api_key: str = Security(api_key_header)):
    """Dependency that validates the API key."""
    if api_key == settings.api_key:
        return api_key
    raise HTTPException(
        status_code=403,
        detail="Could not validate credentials",
    )


def get_library(request: Request) -> Library:
    """The Library owned by the running application."""
    return request.app.state.library


async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.kind.value, exc.message)
    return JSONResponse(
        status_code=ERROR_STATUS[exc.kind],
        content={"detail": exc.message, "kind": exc.kind.value},
    )


router = APIRouter()


# --- Health check ---
@router.get("/health")
def health(library: Library = Depends(get_library)):
    """Lightweight health endpoint with catalog counts."""
    stats = library.get_statistics()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_books": stats["total_books"],
        "total_users": stats["total_users"],
    }


@router.get("/stats", response_model=StatsModel)
def get_library_stats(library: Library = Depends(get_library)):
    """Basic statistics about the catalog."""
    return StatsModel(**library.get_statistics())


# --- Books ---
@router.get("/books", response_model=List[BookModel])
def get_books(
    title: Optional[str] = Query(None, description="Case-insensitive title substring"),
    author: Optional[str] = Query(None, description="Case-insensitive author substring"),
    library: Library = Depends(get_library),
):
    """List the catalog, optionally filtered by title and/or author."""
    if title is not None and author is not None:
        by_author = {b.isbn for b in library.search_by_author(author)}
        books = [b for b in library.search_by_title(title) if b.isbn in by_author]
    elif title is not None:
        books = library.search_by_title(title)
    elif author is not None:
        books = library.search_by_author(author)
    else:
        books = library.list_books()
    # Catalog order is unspecified; sort so responses are stable
    books.sort(key=lambda b: b.isbn)
    return [BookModel(**b.to_dict()) for b in books]


@router.get("/books/{isbn}", response_model=BookModel)
def get_book(isbn: str, library: Library = Depends(get_library)):
    return BookModel(**library.get_book(isbn).to_dict())


@router.post("/books", response_model=BookModel, status_code=201, dependencies=[Depends(get_api_key)])
def add_book(payload: BookCreateModel, library: Library = Depends(get_library)):
    """Add a new book to the catalog."""
    library.add_book(Book.from_dict(payload.model_dump()))
    logger.info("Book %s added", payload.isbn)
    return BookModel(**library.get_book(payload.isbn).to_dict())


@router.delete("/books/{isbn}", response_model=MessageModel, dependencies=[Depends(get_api_key)])
def delete_book(isbn: str, library: Library = Depends(get_library)):
    library.remove_book(isbn)
    logger.info("Book %s removed", isbn)
    return MessageModel(message=f"Book {isbn} removed.")


# --- Users ---
@router.get("/users", response_model=List[UserModel])
def get_users(library: Library = Depends(get_library)):
    users = sorted(library.list_users(), key=lambda u: u.user_id)
    return [UserModel(**u.to_dict()) for u in users]


@router.get("/users/{user_id}", response_model=UserModel)
def get_user(user_id: str, library: Library = Depends(get_library)):
    return UserModel(**library.get_user(user_id).to_dict())


@router.post("/users", response_model=UserModel, status_code=201, dependencies=[Depends(get_api_key)])
def add_user(payload: UserCreateModel, library: Library = Depends(get_library)):
    library.add_user(User.from_dict(payload.model_dump()))
    logger.info("User %s added", payload.user_id)
    return UserModel(**library.get_user(payload.user_id).to_dict())


@router.delete("/users/{user_id}", response_model=MessageModel, dependencies=[Depends(get_api_key)])
def delete_user(user_id: str, library: Library = Depends(get_library)):
    library.remove_user(user_id)
    logger.info("User %s removed", user_id)
    return MessageModel(message=f"User {user_id} removed.")


# --- Loans ---
@router.post("/users/{user_id}/borrow/{isbn}", response_model=UserModel, dependencies=[Depends(get_api_key)])
def borrow_book(user_id: str, isbn: str, library: Library = Depends(get_library)):
    """Lend a book to a user. Returns the user's updated loans."""
    library.borrow_book(user_id, isbn)
    logger.info("User %s borrowed %s", user_id, isbn)
    return UserModel(**library.get_user(user_id).to_dict())


@router.post("/users/{user_id}/return/{isbn}", response_model=UserModel, dependencies=[Depends(get_api_key)])
def return_book(user_id: str, isbn: str, library: Library = Depends(get_library)):
    library.return_book(user_id, isbn)
    logger.info("User %s returned %s", user_id, isbn)
    return UserModel(**library.get_user(user_id).to_dict())


def create_app(library: Optional[Library] = None) -> FastAPI:
    """Build the API around ``library``, or around a fresh one when omitted."""
    if library is None:
        library = Library()
        if settings.seed_demo_data:
            load_demo_catalog(library)

    app = FastAPI(title=settings.app_name, version=settings.app_version, debug=settings.debug)
    app.state.library = library
    app.add_exception_handler(LibraryError, library_error_handler)
    app.include_router(router)
    return app


app = create_app()
