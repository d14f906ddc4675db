"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from catalog.database import CatalogDatabaseService
from catalog.dependencies import get_db_service
from catalog.main import app
from catalog.models import Author, Book, BookInstance, BookInstanceStatus, Genre

AUTHOR_ID = "650000000000000000000001"
GENRE_ID = "650000000000000000000002"
BOOK_ID = "650000000000000000000003"
BOOKINSTANCE_ID = "650000000000000000000004"
MISSING_ID = "65000000000000000000ffff"


@pytest.fixture
def client():
    """Create test client; server errors are rendered instead of re-raised."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def mock_db_service():
    """Mock database service installed as the request dependency."""
    service = AsyncMock(spec=CatalogDatabaseService)
    app.dependency_overrides[get_db_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_db_service, None)


@pytest.fixture
def sample_author():
    return Author(
        id=AUTHOR_ID,
        first_name="Patrick",
        family_name="Rothfuss",
        date_of_birth=datetime(1973, 6, 6),
    )


@pytest.fixture
def sample_genre():
    return Genre(id=GENRE_ID, name="Fantasy")


@pytest.fixture
def sample_book():
    return Book(
        id=BOOK_ID,
        title="The Name of the Wind",
        author=AUTHOR_ID,
        summary="The tale of Kvothe, told in his own words.",
        isbn="9780756404079",
        genre=[GENRE_ID],
    )


@pytest.fixture
def sample_bookinstance():
    return BookInstance(
        id=BOOKINSTANCE_ID,
        book=BOOK_ID,
        imprint="Gollancz, 2011.",
        status=BookInstanceStatus.LOANED,
        due_back=datetime(2024, 1, 5),
    )


def make_cursor(documents):
    """Mock motor cursor supporting ``sort`` chaining and ``to_list``."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=documents)
    return cursor


@pytest.fixture
def mock_database():
    """Mock motor database with the four catalog collections."""
    database = MagicMock()
    for name in ("authors", "genres", "books", "bookinstances"):
        collection = MagicMock()
        collection.name = name
        collection.find.return_value = make_cursor([])
        collection.find_one = AsyncMock(return_value=None)
        collection.insert_one = AsyncMock()
        collection.replace_one = AsyncMock()
        collection.delete_one = AsyncMock()
        collection.count_documents = AsyncMock(return_value=0)
        collection.create_index = AsyncMock()
        setattr(database, name, collection)
    database.command = AsyncMock(return_value={"ok": 1.0})
    return database


@pytest.fixture
def db_service(mock_database):
    return CatalogDatabaseService(mock_database)
