"""
Book pages.
"""

from typing import Any, Dict, List

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from catalog.database import CatalogDatabaseService
from catalog.dependencies import get_db_service
from catalog.forms import BookForm, FieldError, initial_values, read_form, validate_form
from catalog.templating import redirect, render

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/catalog/books", tags=["Books"])

LIST_URL = "/catalog/books"


def book_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")


async def render_book_form(
    request: Request,
    db: CatalogDatabaseService,
    title: str,
    form: Dict[str, Any],
    errors: List[FieldError]
):
    """Render the book form with the author and genre choices."""
    authors = await db.list_authors()
    genres = await db.list_genres()
    return render(request, "book_form.html", {
        "title": title,
        "form": form,
        "errors": errors,
        "authors": authors,
        "genres": genres,
        "selected_genres": set(form.get("genre") or []),
    })


@router.get("", response_class=HTMLResponse)
async def book_list(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    """List all books sorted by title with their authors."""
    books = await db.list_books()
    return render(request, "book_list.html", {"title": "Book List", "book_list": books})


@router.get("/create", response_class=HTMLResponse)
async def book_create_get(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    return await render_book_form(request, db, "Create Book", {"genre": []}, [])


@router.post("/create", response_class=HTMLResponse)
async def book_create_post(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    result = validate_form(BookForm, await read_form(request, BookForm.list_fields))
    if not result.is_valid:
        return await render_book_form(request, db, "Create Book", result.values, result.errors)

    book = await db.create_book(result.cleaned.build())
    return redirect(book.url)


@router.get("/{book_id}", response_class=HTMLResponse)
async def book_detail(book_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    """Show a book with its author, genres and copies."""
    book = await db.get_book(book_id)
    if book is None:
        raise book_not_found()

    author = await db.get_author(book.author)
    genres = await db.get_genres_by_ids(book.genre)
    instances = await db.get_book_instances(book_id)
    return render(request, "book_detail.html", {
        "title": book.title,
        "book": book,
        "author": author,
        "genres": genres,
        "book_instances": instances,
    })


@router.get("/{book_id}/delete", response_class=HTMLResponse)
async def book_delete_get(book_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    book = await db.get_book(book_id)
    if book is None:
        return redirect(LIST_URL)

    author = await db.get_author(book.author)
    instances = await db.get_book_instances(book_id)
    return render(request, "book_delete.html", {
        "title": "Delete Book",
        "book": book,
        "author": author,
        "book_instances": instances,
    })


@router.post("/{book_id}/delete", response_class=HTMLResponse)
async def book_delete_post(book_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    """Delete a book unless copies of it still exist."""
    book = await db.get_book(book_id)
    if book is None:
        return redirect(LIST_URL)

    instances = await db.get_book_instances(book_id)
    if instances:
        logger.info("Book delete blocked by copies", book_id=book_id, copies=len(instances))
        author = await db.get_author(book.author)
        return render(request, "book_delete.html", {
            "title": "Delete Book",
            "book": book,
            "author": author,
            "book_instances": instances,
        })

    await db.delete_book(book_id)
    return redirect(LIST_URL)


@router.get("/{book_id}/update", response_class=HTMLResponse)
async def book_update_get(book_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    book = await db.get_book(book_id)
    if book is None:
        raise book_not_found()

    return await render_book_form(request, db, "Update Book", initial_values(book), [])


@router.post("/{book_id}/update", response_class=HTMLResponse)
async def book_update_post(book_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    result = validate_form(BookForm, await read_form(request, BookForm.list_fields))
    if not result.is_valid:
        return await render_book_form(request, db, "Update Book", result.values, result.errors)

    book = await db.update_book(book_id, result.cleaned.build(book_id))
    if book is None:
        raise book_not_found()
    return redirect(book.url)
