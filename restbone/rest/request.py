"""Per-request helpers used by the generated routes.

Loaded resources, the parsed body and flash messages live on the Starlette
request (``request.state`` and the session scope), so route handlers,
dependencies and templates can share them without globals.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from starlette.requests import Request

from restbone.core.errors import InvalidBodyError

_UNSET: Any = object()
_FLASH_KEY = "_flashes"


def _resources(request: Request) -> Dict[str, Any]:
    store = getattr(request.state, "resources", None)
    if store is None:
        store = {}
        request.state.resources = store
    return store


def resource(request: Request, name: str, value: Any = _UNSET) -> Any:
    """
    Get or set a resource loaded for this request.

    Called with a value it stores and returns the value; called without one
    it returns the stored value or ``None``.
    """
    store = _resources(request)
    if value is _UNSET:
        return store.get(name)
    store[name] = value
    return value


def request_format(request: Request) -> Optional[str]:
    """The ``.{format}`` suffix of the matched route, e.g. ``json`` for ``/posts.json``."""
    fmt = request.path_params.get("format")
    return fmt.lower() if fmt else None


def is_xhr(request: Request) -> bool:
    return request.headers.get("x-requested-with", "").lower() == "xmlhttprequest"


def _prefers_json(accept: str) -> bool:
    accept = accept.lower()
    return "application/json" in accept and "text/html" not in accept


def wants_json(request: Request) -> bool:
    """
    Decide whether a response should be JSON rather than a rendered view.

    JSON is chosen for XHR requests, the ``.json`` suffix, clients that accept
    JSON but not HTML, and whenever the application has no HTML templates.
    """
    if is_xhr(request) or request_format(request) == "json":
        return True
    if getattr(request.app.state, "restbone_templates", None) is None:
        return True
    return _prefers_json(request.headers.get("accept", ""))


def current_user(request: Request) -> Any:
    """The authenticated user, from authentication middleware or ``request.state.user``."""
    user = request.scope.get("user")
    if user is not None:
        return user
    return getattr(request.state, "user", None)


async def read_body(request: Request) -> Dict[str, Any]:
    """
    Parse the request body once and cache it on the request.

    JSON bodies must be objects; form bodies become plain dicts. An empty
    body is an empty dict.

    Raises:
        InvalidBodyError: If the body is not a JSON object.
    """
    cached = getattr(request.state, "body", None)
    if cached is not None:
        return cached

    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        body: Dict[str, Any] = {key: value for key, value in form.items()}
    else:
        raw = await request.body()
        if not raw.strip():
            body = {}
        else:
            try:
                body = json.loads(raw)
            except ValueError as e:
                raise InvalidBodyError(f"Request body is not valid JSON: {e}") from e
            if not isinstance(body, dict):
                raise InvalidBodyError("Request body must be a JSON object")

    request.state.body = body
    return body


def _session(request: Request) -> Optional[Dict[str, Any]]:
    # Only present when SessionMiddleware is installed.
    return request.scope.get("session")


def flash(request: Request, category: str, message: str, *args: Any) -> None:
    """Queue a message for the next rendered page. No-op without a session."""
    session = _session(request)
    if session is None:
        return
    text = message % args if args else message
    session.setdefault(_FLASH_KEY, []).append([category, text])


def get_flashed_messages(request: Request) -> List[Tuple[str, str]]:
    """Pop the queued ``(category, message)`` pairs."""
    session = _session(request)
    if session is None:
        return []
    return [(category, text) for category, text in session.pop(_FLASH_KEY, [])]
