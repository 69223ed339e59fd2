"""Shared fixtures: an app over a throwaway SQLite file, and helpers to seed it."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from bookshelf.catalog.store import BookStore
from bookshelf.config import Settings
from bookshelf.main import create_app
from bookshelf.storage import Book, Database


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        secret_key="test-secret",
        log_level="WARNING",
    )


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.connect()
    yield db
    db.dispose()


@pytest.fixture
def store(database):
    with database.session() as session:
        yield BookStore(session)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


class Library:
    """Direct database access for HTTP tests, one fresh session per call."""

    def __init__(self, database: Database):
        self.database = database

    def add(self, **fields) -> int:
        with self.database.session() as session:
            return BookStore(session).create(fields).id

    def add_many(self, n: int) -> list:
        return [
            self.add(title=f"Book {i:02d}", author=f"Author {i:02d}")
            for i in range(1, n + 1)
        ]

    def count(self) -> int:
        with self.database.session() as session:
            return session.scalar(select(func.count()).select_from(Book))

    def get(self, book_id: int):
        with self.database.session() as session:
            return session.get(Book, book_id)


@pytest.fixture
def library(client):
    return Library(client.app.state.database)
