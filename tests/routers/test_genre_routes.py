"""
Tests for the genre pages.
"""

from catalog.models import Genre
from conftest import GENRE_ID, MISSING_ID


def test_genre_list(client, mock_db_service, sample_genre):
    mock_db_service.list_genres.return_value = [sample_genre]

    response = client.get("/catalog/genres")

    assert response.status_code == 200
    assert "Fantasy" in response.text


def test_genre_detail_lists_books(client, mock_db_service, sample_genre, sample_book):
    mock_db_service.get_genre.return_value = sample_genre
    mock_db_service.get_genre_books.return_value = [sample_book]

    response = client.get(f"/catalog/genres/{GENRE_ID}")

    assert response.status_code == 200
    assert "Genre: Fantasy" in response.text
    assert "The Name of the Wind" in response.text


def test_genre_not_found(client, mock_db_service):
    mock_db_service.get_genre.return_value = None

    response = client.get(f"/catalog/genres/{MISSING_ID}")

    assert response.status_code == 404


def test_create_genre(client, mock_db_service, sample_genre):
    mock_db_service.find_genre_by_name.return_value = None
    mock_db_service.create_genre.return_value = sample_genre

    response = client.post("/catalog/genres/create", data={"name": " Fantasy "}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == f"/catalog/genres/{GENRE_ID}"
    mock_db_service.find_genre_by_name.assert_awaited_once_with("Fantasy")
    assert mock_db_service.create_genre.await_args.args[0].name == "Fantasy"


def test_create_existing_genre_redirects_to_it(client, mock_db_service, sample_genre):
    mock_db_service.find_genre_by_name.return_value = sample_genre

    response = client.post("/catalog/genres/create", data={"name": "Fantasy"}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == f"/catalog/genres/{GENRE_ID}"
    mock_db_service.create_genre.assert_not_awaited()


def test_create_genre_requires_name(client, mock_db_service):
    response = client.post("/catalog/genres/create", data={"name": ""}, follow_redirects=False)

    assert response.status_code == 200
    assert "Genre name required" in response.text
    mock_db_service.find_genre_by_name.assert_not_awaited()
    mock_db_service.create_genre.assert_not_awaited()


def test_delete_genre_referenced_by_book_is_rejected(client, mock_db_service, sample_genre, sample_book):
    mock_db_service.get_genre.return_value = sample_genre
    mock_db_service.get_genre_books.return_value = [sample_book]

    response = client.post(f"/catalog/genres/{GENRE_ID}/delete", follow_redirects=False)

    assert response.status_code == 200
    assert "Delete the following books before attempting to delete this genre." in response.text
    mock_db_service.delete_genre.assert_not_awaited()


def test_delete_unused_genre(client, mock_db_service, sample_genre):
    mock_db_service.get_genre.return_value = sample_genre
    mock_db_service.get_genre_books.return_value = []

    response = client.post(f"/catalog/genres/{GENRE_ID}/delete", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/catalog/genres"
    mock_db_service.delete_genre.assert_awaited_once_with(GENRE_ID)


def test_delete_confirmation_page(client, mock_db_service, sample_genre):
    mock_db_service.get_genre.return_value = sample_genre
    mock_db_service.get_genre_books.return_value = []

    response = client.get(f"/catalog/genres/{GENRE_ID}/delete")

    assert response.status_code == 200
    assert "Do you really want to delete this Genre?" in response.text


def test_update_genre_keeps_id(client, mock_db_service):
    mock_db_service.update_genre.side_effect = lambda genre_id, genre: genre

    response = client.post(f"/catalog/genres/{GENRE_ID}/update", data={"name": "Epic Fantasy"}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == f"/catalog/genres/{GENRE_ID}"
    mock_db_service.update_genre.assert_awaited_once_with(GENRE_ID, Genre(id=GENRE_ID, name="Epic Fantasy"))


def test_update_genre_invalid_renders_form(client, mock_db_service):
    response = client.post(f"/catalog/genres/{GENRE_ID}/update", data={"name": " "}, follow_redirects=False)

    assert response.status_code == 200
    assert "Update Genre" in response.text
    assert "Genre name required" in response.text
    mock_db_service.update_genre.assert_not_awaited()
