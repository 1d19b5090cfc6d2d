"""HTML rendering helpers for the generated routes."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from .request import flash, get_flashed_messages, resource


def templates_of(request: Request) -> Jinja2Templates:
    return request.app.state.restbone_templates


def render(request: Request, name: str, context: Dict[str, Any]) -> Response:
    """
    Render ``name`` with the configured templates.

    Besides ``context`` every view receives ``resource(name)`` to reach the
    resources loaded for this request, and ``get_flashed_messages()``.
    """
    context = {
        **context,
        "resource": lambda key: resource(request, key),
        "get_flashed_messages": lambda: get_flashed_messages(request),
    }
    return templates_of(request).TemplateResponse(request, name, context)


def redirect(request: Request, url: str, message: str, *args: Any) -> Response:
    """Flash an info message and redirect to ``url`` after a form post."""
    flash(request, "info", message, *args)
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)
