"""
Genre pages.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from catalog.database import CatalogDatabaseService
from catalog.dependencies import get_db_service
from catalog.forms import GenreForm, initial_values, read_form, validate_form
from catalog.templating import redirect, render

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/catalog/genres", tags=["Genres"])

LIST_URL = "/catalog/genres"


def genre_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Genre not found")


@router.get("", response_class=HTMLResponse)
async def genre_list(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    genres = await db.list_genres()
    return render(request, "genre_list.html", {"title": "Genre List", "genre_list": genres})


@router.get("/create", response_class=HTMLResponse)
async def genre_create_get(request: Request):
    return render(request, "genre_form.html", {"title": "Create Genre", "form": {}, "errors": []})


@router.post("/create", response_class=HTMLResponse)
async def genre_create_post(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    """Create a genre, or go to the existing one when the name is taken."""
    result = validate_form(GenreForm, await read_form(request))
    if not result.is_valid:
        return render(request, "genre_form.html", {
            "title": "Create Genre",
            "form": result.values,
            "errors": result.errors,
        })

    existing = await db.find_genre_by_name(result.cleaned.name)
    if existing is not None:
        logger.info("Genre already exists", genre_id=existing.id, name=existing.name)
        return redirect(existing.url)

    genre = await db.create_genre(result.cleaned.build())
    return redirect(genre.url)


@router.get("/{genre_id}", response_class=HTMLResponse)
async def genre_detail(genre_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    genre = await db.get_genre(genre_id)
    if genre is None:
        raise genre_not_found()

    books = await db.get_genre_books(genre_id)
    return render(request, "genre_detail.html", {
        "title": "Genre Detail",
        "genre": genre,
        "genre_books": books,
    })


@router.get("/{genre_id}/delete", response_class=HTMLResponse)
async def genre_delete_get(genre_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    genre = await db.get_genre(genre_id)
    if genre is None:
        return redirect(LIST_URL)

    books = await db.get_genre_books(genre_id)
    return render(request, "genre_delete.html", {
        "title": "Delete Genre",
        "genre": genre,
        "genre_books": books,
    })


@router.post("/{genre_id}/delete", response_class=HTMLResponse)
async def genre_delete_post(genre_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    """Delete a genre unless books are still tagged with it."""
    genre = await db.get_genre(genre_id)
    if genre is None:
        return redirect(LIST_URL)

    books = await db.get_genre_books(genre_id)
    if books:
        logger.info("Genre delete blocked by books", genre_id=genre_id, books=len(books))
        return render(request, "genre_delete.html", {
            "title": "Delete Genre",
            "genre": genre,
            "genre_books": books,
        })

    await db.delete_genre(genre_id)
    return redirect(LIST_URL)


@router.get("/{genre_id}/update", response_class=HTMLResponse)
async def genre_update_get(genre_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    genre = await db.get_genre(genre_id)
    if genre is None:
        raise genre_not_found()

    return render(request, "genre_form.html", {
        "title": "Update Genre",
        "form": initial_values(genre),
        "errors": [],
    })


@router.post("/{genre_id}/update", response_class=HTMLResponse)
async def genre_update_post(genre_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    result = validate_form(GenreForm, await read_form(request))
    if not result.is_valid:
        return render(request, "genre_form.html", {
            "title": "Update Genre",
            "form": result.values,
            "errors": result.errors,
        })

    genre = await db.update_genre(genre_id, result.cleaned.build(genre_id))
    if genre is None:
        raise genre_not_found()
    return redirect(genre.url)
