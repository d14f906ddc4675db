"""
Book instance (copy) pages.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from catalog.database import CatalogDatabaseService
from catalog.dependencies import get_db_service
from catalog.forms import BookInstanceForm, FieldError, initial_values, read_form, validate_form
from catalog.templating import redirect, render

router = APIRouter(prefix="/catalog/bookinstances", tags=["Book Instances"])

LIST_URL = "/catalog/bookinstances"


def bookinstance_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book copy not found")


async def render_bookinstance_form(
    request: Request,
    db: CatalogDatabaseService,
    title: str,
    form: Dict[str, Any],
    errors: List[FieldError]
):
    books = await db.list_book_titles()
    return render(request, "bookinstance_form.html", {
        "title": title,
        "form": form,
        "errors": errors,
        "book_list": books,
    })


@router.get("", response_class=HTMLResponse)
async def bookinstance_list(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    items = await db.list_book_instances()
    return render(request, "bookinstance_list.html", {"title": "Book Instance List", "bookinstance_list": items})


@router.get("/create", response_class=HTMLResponse)
async def bookinstance_create_get(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    return await render_bookinstance_form(request, db, "Create BookInstance", {}, [])


@router.post("/create", response_class=HTMLResponse)
async def bookinstance_create_post(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    result = validate_form(BookInstanceForm, await read_form(request))
    if not result.is_valid:
        return await render_bookinstance_form(request, db, "Create BookInstance", result.values, result.errors)

    bookinstance = await db.create_book_instance(result.cleaned.build())
    return redirect(bookinstance.url)


@router.get("/{bookinstance_id}", response_class=HTMLResponse)
async def bookinstance_detail(
    bookinstance_id: str,
    request: Request,
    db: CatalogDatabaseService = Depends(get_db_service)
):
    bookinstance = await db.get_book_instance(bookinstance_id)
    if bookinstance is None:
        raise bookinstance_not_found()

    book = await db.get_book(bookinstance.book)
    return render(request, "bookinstance_detail.html", {
        "title": f"Copy: {book.title}" if book else "Copy",
        "bookinstance": bookinstance,
        "book": book,
    })


@router.get("/{bookinstance_id}/delete", response_class=HTMLResponse)
async def bookinstance_delete_get(
    bookinstance_id: str,
    request: Request,
    db: CatalogDatabaseService = Depends(get_db_service)
):
    bookinstance = await db.get_book_instance(bookinstance_id)
    if bookinstance is None:
        return redirect(LIST_URL)

    book = await db.get_book(bookinstance.book)
    return render(request, "bookinstance_delete.html", {
        "title": "Delete BookInstance",
        "bookinstance": bookinstance,
        "book": book,
    })


@router.post("/{bookinstance_id}/delete", response_class=HTMLResponse)
async def bookinstance_delete_post(bookinstance_id: str, db: CatalogDatabaseService = Depends(get_db_service)):
    # Copies have no dependents
    await db.delete_book_instance(bookinstance_id)
    return redirect(LIST_URL)


@router.get("/{bookinstance_id}/update", response_class=HTMLResponse)
async def bookinstance_update_get(
    bookinstance_id: str,
    request: Request,
    db: CatalogDatabaseService = Depends(get_db_service)
):
    bookinstance = await db.get_book_instance(bookinstance_id)
    if bookinstance is None:
        raise bookinstance_not_found()

    return await render_bookinstance_form(request, db, "Update BookInstance", initial_values(bookinstance), [])


@router.post("/{bookinstance_id}/update", response_class=HTMLResponse)
async def bookinstance_update_post(
    bookinstance_id: str,
    request: Request,
    db: CatalogDatabaseService = Depends(get_db_service)
):
    result = validate_form(BookInstanceForm, await read_form(request))
    if not result.is_valid:
        return await render_bookinstance_form(request, db, "Update BookInstance", result.values, result.errors)

    bookinstance = await db.update_book_instance(bookinstance_id, result.cleaned.build(bookinstance_id))
    if bookinstance is None:
        raise bookinstance_not_found()
    return redirect(bookinstance.url)
