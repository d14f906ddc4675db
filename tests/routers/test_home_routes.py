"""
Tests for the home page, health check and error pages.
"""

from unittest.mock import AsyncMock, patch

from pymongo.errors import PyMongoError

from catalog.models import CatalogCounts


def test_root_redirects_to_catalog(client):
    response = client.get("/", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/catalog"


def test_index_shows_counts(client, mock_db_service):
    mock_db_service.get_counts.return_value = CatalogCounts(
        book_count=7,
        book_instance_count=11,
        book_instance_available_count=3,
        author_count=5,
        genre_count=4,
    )

    response = client.get("/catalog")

    assert response.status_code == 200
    assert "<strong>Books:</strong> 7" in response.text
    assert "<strong>Copies available:</strong> 3" in response.text


def test_index_renders_count_errors(client, mock_db_service):
    mock_db_service.get_counts.side_effect = PyMongoError("timed out")

    response = client.get("/catalog")

    assert response.status_code == 200
    assert "Error getting dynamic content: timed out" in response.text


def test_unknown_route_renders_not_found(client):
    response = client.get("/catalog/unknown/route/here")

    assert response.status_code == 404
    assert "Not Found" in response.text


def test_missing_database_service_is_server_error(client):
    response = client.get("/catalog/genres")

    assert response.status_code == 500
    assert "Database service not available" in response.text


def test_health_check_without_database(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database_status"] == "unavailable"
    assert "timestamp" in data
    assert "version" in data


def test_health_check_with_database(client):
    service = AsyncMock()
    service.health_check.return_value = {"status": "healthy"}

    with patch('catalog.dependencies.db_service', service):
        response = client.get("/health")

    assert response.json()["status"] == "healthy"
