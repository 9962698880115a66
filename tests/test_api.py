import pytest
from fastapi.testclient import TestClient

from api import create_app
from catalog import Book, Library, User
from config import settings

HEADERS = {"X-API-Key": settings.api_key}


@pytest.fixture
def client(seeded_lib):
    # Each test drives its own Library through a fresh app
    return TestClient(create_app(seeded_lib))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["total_books"] == 3
    assert body["total_users"] == 2


def test_create_app_without_library_starts_empty(monkeypatch):
    monkeypatch.setattr(settings, "seed_demo_data", False)
    client = TestClient(create_app())
    assert client.get("/books").json() == []


def test_create_app_can_seed_demo_catalog(monkeypatch):
    monkeypatch.setattr(settings, "seed_demo_data", True)
    client = TestClient(create_app())
    assert [b["isbn"] for b in client.get("/books").json()] == ["ISBN-A", "ISBN-B", "ISBN-C"]
    assert client.get("/users/U100").json()["name"] == "Charlie"


def test_list_books(client):
    response = client.get("/books")
    assert response.status_code == 200
    assert {b["isbn"] for b in response.json()} == {"ISBN-001", "ISBN-002", "ISBN-003"}


def test_search_books_by_title(client):
    response = client.get("/books", params={"title": "c++"})
    assert response.status_code == 200
    assert [b["isbn"] for b in response.json()] == ["ISBN-001"]


def test_search_books_by_title_and_author(client):
    response = client.get("/books", params={"title": "in", "author": "sedgewick"})
    assert [b["isbn"] for b in response.json()] == ["ISBN-003"]


def test_get_book(client):
    response = client.get("/books/ISBN-002")
    assert response.status_code == 200
    assert response.json() == {
        "isbn": "ISBN-002",
        "title": "Programming Principles",
        "author": "Jane Doe",
        "available": True,
    }


def test_get_missing_book(client):
    response = client.get("/books/ISBN-999")
    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


def test_add_book_with_valid_api_key(client):
    payload = {"isbn": "ISBN-004", "title": "Clean Code", "author": "Robert Martin"}
    response = client.post("/books", headers=HEADERS, json=payload)
    assert response.status_code == 201
    assert response.json()["isbn"] == "ISBN-004"
    assert response.json()["available"] is True


def test_add_book_with_invalid_api_key(client):
    payload = {"isbn": "ISBN-004", "title": "Clean Code", "author": "Robert Martin"}
    response = client.post("/books", headers={"X-API-Key": "invalid-key"}, json=payload)
    assert response.status_code == 403
    assert client.get("/books/ISBN-004").status_code == 404


def test_add_duplicate_book(client):
    payload = {"isbn": "ISBN-001", "title": "Other", "author": "Other"}
    response = client.post("/books", headers=HEADERS, json=payload)
    assert response.status_code == 409
    assert response.json()["kind"] == "already_exists"


def test_add_book_with_empty_isbn(client):
    payload = {"isbn": "", "title": "Nameless", "author": "Nobody"}
    response = client.post("/books", headers=HEADERS, json=payload)
    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_argument"


def test_add_book_missing_fields(client):
    response = client.post("/books", headers=HEADERS, json={"isbn": "ISBN-004"})
    assert response.status_code == 422


def test_delete_book(client):
    response = client.delete("/books/ISBN-003", headers=HEADERS)
    assert response.status_code == 200
    assert client.get("/books/ISBN-003").status_code == 404


def test_users_crud(client):
    response = client.post("/users", headers=HEADERS, json={"user_id": "U003", "name": "Carol"})
    assert response.status_code == 201
    assert response.json() == {"user_id": "U003", "name": "Carol", "borrowed_books": []}

    ids = [u["user_id"] for u in client.get("/users").json()]
    assert ids == ["U001", "U002", "U003"]

    assert client.get("/users/U003").json()["name"] == "Carol"
    assert client.delete("/users/U003", headers=HEADERS).status_code == 200
    assert client.get("/users/U003").status_code == 404


def test_borrow_and_return(client):
    response = client.post("/users/U001/borrow/ISBN-001", headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["borrowed_books"] == ["ISBN-001"]
    assert client.get("/books/ISBN-001").json()["available"] is False

    response = client.post("/users/U002/borrow/ISBN-001", headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["kind"] == "unavailable"

    response = client.post("/users/U001/return/ISBN-001", headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["borrowed_books"] == []
    assert client.get("/books/ISBN-001").json()["available"] is True


def test_return_not_owned(client):
    response = client.post("/users/U002/return/ISBN-002", headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["kind"] == "not_owned"


def test_remove_borrowed_book_conflicts(client):
    client.post("/users/U002/borrow/ISBN-002", headers=HEADERS)
    response = client.delete("/books/ISBN-002", headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["kind"] == "conflict"

    response = client.delete("/users/U002", headers=HEADERS)
    assert response.status_code == 409


def test_borrow_requires_api_key(client):
    response = client.post("/users/U001/borrow/ISBN-001", headers={"X-API-Key": "nope"})
    assert response.status_code == 403
    assert client.get("/books/ISBN-001").json()["available"] is True


def test_stats(client):
    client.post("/users/U001/borrow/ISBN-001", headers=HEADERS)
    response = client.get("/stats")
    assert response.status_code == 200
    assert response.json() == {
        "total_books": 3,
        "available_books": 2,
        "borrowed_books": 1,
        "total_users": 2,
        "unique_authors": 3,
    }


def test_apps_do_not_share_state():
    first = Library()
    first.add_book(Book("ISBN-X", "Only Here", "Someone"))
    first.add_user(User("U1", "One"))
    assert len(TestClient(create_app(first)).get("/books").json()) == 1
    assert TestClient(create_app(Library())).get("/books").json() == []
