"""Access control for generated route handlers.

When a model defines ``acl(user, action, obj)``, every generated action of
that model (and of its embedded children) is routed through it. ``obj`` is the
autoloaded resource, or the request body when the action has none.
"""

from __future__ import annotations

import functools
import inspect
from typing import Any, Awaitable, Callable, Dict, Type

from fastapi import Request
from sqlmodel import SQLModel

from restbone.core.errors import AuthorizationError
from restbone.core.logging_config import get_logger

from .request import current_user, read_body, resource

logger = get_logger(__name__)

Endpoint = Callable[..., Awaitable[Any]]


async def call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    """Call a model hook that may be sync or async."""
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def authorize(model: Type[SQLModel], request: Request, action: str, singular: str) -> None:
    """
    Ask ``model.acl`` whether the current user may perform ``action``.

    Raises:
        AuthorizationError: If the hook answers falsy.
    """
    user = current_user(request)
    obj = resource(request, singular)
    if obj is None:
        obj = await read_body(request)
    allowed = await call_hook(model.acl, user, action, obj)
    if not allowed:
        logger.info(f"ACL of {model.__name__} denied '{action}' on {singular} for user {user!r}")
        raise AuthorizationError(action, singular)


def guard(endpoint: Endpoint, model: Type[SQLModel], action: str, singular: str) -> Endpoint:
    """
    Wrap a route handler so it only runs once ``model.acl`` allows ``action``.

    The wrapper keeps the handler's signature, so FastAPI resolves the same
    dependencies (the autoloaders run before the check).
    """

    @functools.wraps(endpoint)
    async def guarded(*args: Any, **kwargs: Any) -> Any:
        await authorize(model, kwargs["request"], action, singular)
        return await endpoint(*args, **kwargs)

    return guarded


def guard_all(routes: Dict[str, Endpoint], model: Type[SQLModel], singular: str) -> Dict[str, Endpoint]:
    """Route every action through ``model.acl`` when the model defines one."""
    if not callable(getattr(model, "acl", None)):
        return routes
    logger.debug(f"Routing {singular} actions through {model.__name__}.acl")
    return {action: guard(handle, model, action, singular) for action, handle in routes.items()}
