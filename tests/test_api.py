from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from bookreview.app import create_app
from bookreview.core.config import get_settings
from bookreview.domain.entities import Book
from bookreview.repositories.json_storage import JsonRecordStore
from bookreview.repositories.memory_storage import MemoryRecordStore


def _app(store=None, seed=False):
    settings = replace(get_settings(), app_env="test", seed_sample_data=seed)
    return create_app(settings=settings, store=store if store is not None else MemoryRecordStore())


def _signed_in(app, username="alice"):
    client = TestClient(app)
    resp = client.post(
        "/api/register",
        json={"username": username, "password": "secret1", "email": f"{username}@example.com", "fullName": username.title()},
    )
    assert resp.status_code == 201, resp.text
    return client


@pytest.fixture()
def app():
    return _app()


@pytest.fixture()
def alice(app):
    return _signed_in(app, "alice")


@pytest.fixture()
def bob(app):
    return _signed_in(app, "bob")


def test_register_returns_public_user_and_cookie(app):
    client = TestClient(app)
    resp = client.post("/api/register", json={"username": "carol", "password": "secret1", "email": "carol@example.com"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["username"] == "carol"
    assert "password" not in body
    assert "session" in resp.cookies
    assert client.get("/api/user").json()["id"] == body["id"]


def test_register_validation_and_duplicates(app, alice):
    client = TestClient(app)
    assert client.post("/api/register", json={"username": "al", "password": "secret1", "email": "a@b.co"}).status_code == 400
    assert client.post("/api/register", json={"username": "dave", "password": "123", "email": "d@b.co"}).status_code == 400
    assert client.post("/api/register", json={"username": "dave", "password": "secret1", "email": "nope"}).status_code == 400
    resp = client.post("/api/register", json={"username": "alice", "password": "secret1", "email": "x@example.com"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Username already exists"


def test_login_logout_cycle(app, alice):
    client = TestClient(app)
    assert client.post("/api/login", json={"username": "alice", "password": "wrong!"}).status_code == 401
    assert client.get("/api/user").status_code == 401

    resp = client.post("/api/login", json={"username": "alice", "password": "secret1"})
    assert resp.status_code == 200
    assert resp.json()["fullName"] == "Alice"
    assert client.get("/api/user").status_code == 200

    assert client.post("/api/logout").json() == {"ok": True}
    assert client.get("/api/user").status_code == 401


def test_book_crud_and_ownership(alice, bob):
    resp = alice.post("/api/books", json={"title": "Clean Code", "author": "Robert C. Martin", "publicationYear": 2008})
    assert resp.status_code == 201
    book = resp.json()
    assert book["id"] == 1
    assert book["addedBy"] == alice.get("/api/user").json()["id"]
    assert book["createdAt"].endswith("Z")

    assert alice.get("/api/books/1").json() == book
    assert bob.put("/api/books/1", json={"title": "Mine now", "author": "Bob"}).status_code == 403
    assert bob.delete("/api/books/1").status_code == 403

    resp = alice.put("/api/books/1", json={"title": "Clean Code", "author": "Uncle Bob", "isbn": "978-0132350884"})
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["author"] == "Uncle Bob"
    assert updated["publicationYear"] == 2008
    assert updated["createdAt"] == book["createdAt"]

    assert alice.delete("/api/books/1").status_code == 204
    assert alice.get("/api/books/1").status_code == 404
    assert alice.delete("/api/books/1").status_code == 404
    assert alice.put("/api/books/1", json={"title": "x", "author": "y"}).status_code == 404


def test_mutations_require_a_session(app):
    anonymous = TestClient(app)
    assert anonymous.post("/api/books", json={"title": "T", "author": "A"}).status_code == 401
    assert anonymous.post("/api/books/1/reviews", json={"rating": 5, "content": "Great read indeed."}).status_code == 401
    assert anonymous.delete("/api/reviews/1").status_code == 401


def test_search_endpoints(alice):
    alice.post("/api/books", json={"title": "Clean Code", "author": "Robert C. Martin", "isbn": "978-0132350884"})
    alice.post("/api/books", json={"title": "Refactoring", "author": "Martin Fowler", "description": "Clean up old code"})
    alice.post("/api/books", json={"title": "Eloquent JavaScript", "author": "Marijn Haverbeke"})

    assert [b["id"] for b in alice.get("/api/books").json()] == [1, 2, 3]
    assert [b["id"] for b in alice.get("/api/books/search", params={"q": "clean"}).json()] == [1, 2]
    assert alice.get("/api/books/search", params={"q": " "}).status_code == 400
    assert [b["id"] for b in alice.get("/api/books/search/author", params={"q": "MARTIN"}).json()] == [1, 2]
    assert [b["id"] for b in alice.get("/api/books/search/title", params={"q": "script"}).json()] == [3]
    assert alice.get("/api/books/search/isbn", params={"q": "978-0132350884"}).json()["id"] == 1
    assert alice.get("/api/books/search/isbn", params={"q": "000"}).status_code == 404
    assert alice.get("/api/books/isbn/978-0132350884").json()["title"] == "Clean Code"
    assert [b["id"] for b in alice.get("/api/books/author/fowler").json()] == [2]
    assert [b["id"] for b in alice.get("/api/books/title/eloquent").json()] == [3]
    assert alice.get("/api/books/title/nothing-here").json() == []


def test_books_page(alice):
    for i in range(5):
        alice.post("/api/books", json={"title": f"Book {i}", "author": "A"})
    body = alice.get("/api/books/page", params={"page": 2, "pageSize": 2}).json()
    assert body["page"] == 2
    assert body["pageSize"] == 2
    assert body["total"] == 5
    assert body["totalPages"] == 3
    assert [b["id"] for b in body["items"]] == [3, 4]

    filtered = alice.get("/api/books/page", params={"q": "book 4"}).json()
    assert filtered["total"] == 1


def test_review_flow(alice, bob):
    alice.post("/api/books", json={"title": "Clean Code", "author": "Robert C. Martin"})
    bob_id = bob.get("/api/user").json()["id"]

    assert bob.post("/api/books/9/reviews", json={"rating": 4, "content": "No such book here."}).status_code == 404
    assert bob.post("/api/books/1/reviews", json={"rating": 6, "content": "Off the scale!!"}).status_code == 400
    assert bob.post("/api/books/1/reviews", json={"rating": 4, "content": "short"}).status_code == 400

    resp = bob.post("/api/books/1/reviews", json={"rating": 4, "title": "Solid", "content": "Practical and clear."})
    assert resp.status_code == 201
    review = resp.json()
    assert review["bookId"] == 1
    assert review["userId"] == bob_id

    assert alice.get("/api/books/1/reviews").json() == [review]
    assert alice.get(f"/api/users/{bob_id}/reviews").json() == [review]
    assert alice.get("/api/reviews/1").json() == review
    assert alice.get("/api/reviews/2").status_code == 404

    assert alice.put("/api/reviews/1", json={"rating": 1, "content": "Changed by someone else"}).status_code == 403
    assert alice.delete("/api/reviews/1").status_code == 403

    resp = bob.put("/api/reviews/1", json={"rating": 5, "content": "Even better on a second read."})
    assert resp.status_code == 200
    assert resp.json()["rating"] == 5
    assert resp.json()["title"] == "Solid"

    assert bob.delete("/api/reviews/1").status_code == 204
    assert bob.get("/api/reviews/1").status_code == 404


def test_deleting_a_book_removes_its_reviews(alice, bob):
    alice.post("/api/books", json={"title": "Doomed", "author": "A"})
    alice.post("/api/books", json={"title": "Kept", "author": "B"})
    for _ in range(3):
        bob.post("/api/books/1/reviews", json={"rating": 3, "content": "Three stars from me."})
    bob.post("/api/books/2/reviews", json={"rating": 5, "content": "Five stars from me."})

    assert alice.delete("/api/books/1").status_code == 204
    assert alice.get("/api/books/1/reviews").json() == []
    assert alice.get("/api/reviews/4").json()["bookId"] == 2
    assert alice.get("/api/reviews/1").status_code == 404


def test_sample_data_seeded_on_startup():
    client = TestClient(_app(seed=True))
    books = client.get("/api/books").json()
    assert len(books) == 6
    assert books[0]["title"].startswith("Clean Code")
    assert len(client.get("/api/books/1/reviews").json()) == 2


def test_health_reports_degraded_json_store(tmp_path):
    store = JsonRecordStore(tmp_path)
    client = TestClient(_app(store=store))
    assert client.get("/api/health").json() == {"status": "ok", "backend": "json", "readErrors": {}}

    store.path_for(Book).write_text("{broken", encoding="utf-8")
    assert client.get("/api/books").json() == []
    health = client.get("/api/health").json()
    assert health["status"] == "degraded"
    assert list(health["readErrors"]) == ["books"]


def test_storage_failure_is_a_500(tmp_path):
    store = JsonRecordStore(tmp_path)
    app = _app(store=store)
    client = _signed_in(app)
    store.path_for(Book).write_text("{broken", encoding="utf-8")

    resp = client.post("/api/books", json={"title": "T", "author": "A"})
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Storage failure"}
    assert store.path_for(Book).read_text(encoding="utf-8") == "{broken"


def test_validation_errors_are_400_with_message(alice):
    alice.post("/api/books", json={"title": "Clean Code", "author": "Robert C. Martin"})
    resp = alice.post("/api/books/1/reviews", json={"rating": 0, "content": "Rating below the scale."})
    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Validation error: rating:")
    assert resp.json()["errors"][0]["loc"] == ["body", "rating"]
    assert alice.get("/api/books/not-a-number").status_code == 400
