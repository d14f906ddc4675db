"""
Site root and catalog home page.
"""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from catalog.database import CatalogDatabaseService
from catalog.dependencies import get_db_service
from catalog.templating import redirect, render

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Home"])


@router.get("/", include_in_schema=False)
async def root():
    return redirect("/catalog")


@router.get("/catalog", response_class=HTMLResponse)
async def index(request: Request, db: CatalogDatabaseService = Depends(get_db_service)):
    """Home page with document counts; counting errors are shown on the page."""
    try:
        counts = await db.get_counts()
        error = None
    except Exception as e:
        logger.error("Failed to load catalog counts", error=str(e))
        counts = None
        error = str(e)

    return render(request, "index.html", {
        "title": "Local Library Home",
        "data": counts,
        "error": error,
    })
