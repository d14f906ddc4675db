"""
Jinja2 view rendering.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from catalog.config import config
from catalog.models import BookInstanceStatus

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["app_title"] = config.app_title
templates.env.globals["statuses"] = [s.value for s in BookInstanceStatus]


def render(
    request: Request,
    template_name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = status.HTTP_200_OK
):
    """Render a template with the request in its context."""
    return templates.TemplateResponse(request, template_name, context or {}, status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    """Redirect after a form submission so a reload does not resubmit."""
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)
