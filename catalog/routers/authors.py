"""
Author pages.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from catalog.database import CatalogDatabaseService
from catalog.dependencies import get_db_service
from catalog.forms import AuthorForm, initial_values, read_form, validate_form
from catalog.templating import redirect, render

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/catalog/authors", tags=["Authors"])

LIST_URL = "/catalog/authors"


def author_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Author not found")


@router.get("", response_class=HTMLResponse)
async def author_list(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    """List all authors sorted by family name."""
    authors = await db.list_authors()
    return render(request, "author_list.html", {"title": "Author List", "author_list": authors})


@router.get("/create", response_class=HTMLResponse)
async def author_create_get(request: Request):
    return render(request, "author_form.html", {"title": "Create Author", "form": {}, "errors": []})


@router.post("/create", response_class=HTMLResponse)
async def author_create_post(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    result = validate_form(AuthorForm, await read_form(request))
    if not result.is_valid:
        return render(request, "author_form.html", {
            "title": "Create Author",
            "form": result.values,
            "errors": result.errors,
        })

    author = await db.create_author(result.cleaned.build())
    return redirect(author.url)


@router.get("/{author_id}", response_class=HTMLResponse)
async def author_detail(author_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    author = await db.get_author(author_id)
    if author is None:
        raise author_not_found()

    books = await db.get_author_books(author_id)
    return render(request, "author_detail.html", {
        "title": "Author Detail",
        "author": author,
        "author_books": books,
    })


@router.get("/{author_id}/delete", response_class=HTMLResponse)
async def author_delete_get(author_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    author = await db.get_author(author_id)
    if author is None:
        return redirect(LIST_URL)

    books = await db.get_author_books(author_id)
    return render(request, "author_delete.html", {
        "title": "Delete Author",
        "author": author,
        "author_books": books,
    })


@router.post("/{author_id}/delete", response_class=HTMLResponse)
async def author_delete_post(author_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    """Delete an author unless books still reference it."""
    author = await db.get_author(author_id)
    if author is None:
        return redirect(LIST_URL)

    books = await db.get_author_books(author_id)
    if books:
        logger.info("Author delete blocked by books", author_id=author_id, books=len(books))
        return render(request, "author_delete.html", {
            "title": "Delete Author",
            "author": author,
            "author_books": books,
        })

    await db.delete_author(author_id)
    return redirect(LIST_URL)


@router.get("/{author_id}/update", response_class=HTMLResponse)
async def author_update_get(author_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    author = await db.get_author(author_id)
    if author is None:
        raise author_not_found()

    return render(request, "author_form.html", {
        "title": "Update Author",
        "form": initial_values(author),
        "errors": [],
    })


@router.post("/{author_id}/update", response_class=HTMLResponse)
async def author_update_post(author_id: str, request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    result = validate_form(AuthorForm, await read_form(request))
    if not result.is_valid:
        return render(request, "author_form.html", {
            "title": "Update Author",
            "form": result.values,
            "errors": result.errors,
        })

    author = await db.update_author(author_id, result.cleaned.build(author_id))
    if author is None:
        raise author_not_found()
    return redirect(author.url)
