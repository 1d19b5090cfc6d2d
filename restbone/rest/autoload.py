"""Resource autoloading.

A route containing a resource parameter, e.g. ``/posts/{post}``, loads the
requested post before the handler runs, where ``{post}`` is either an id or a
unique slug (``/posts/my-test-post`` or ``/posts/23``). Embedded resources,
e.g. ``/posts/{post}/comments/{comment}``, are looked up among the already
loaded parent's children.

The loaders are FastAPI dependencies built per resource; they store what they
load with ``resource(request, singular, obj)``.
"""

import re
import uuid
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Type, get_args

from fastapi import Depends, Request
from sqlalchemy import Select, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import SQLModel

from restbone.core.database import get_session
from restbone.core.errors import ResourceNotFoundError
from restbone.core.logging_config import get_logger
from restbone.models.registry import EmbeddedResource

from .request import resource

logger = get_logger(__name__)

Loader = Callable[..., Awaitable[Any]]

HEX_ID_FORMAT = re.compile(r"^(?:[0-9a-f]{24}|[0-9a-f]{32})$")


def primary_key_name(model: Type[SQLModel]) -> str:
    return sa_inspect(model).primary_key[0].name


def _primary_key_type(model: Type[SQLModel]) -> Optional[type]:
    annotation = model.model_fields[primary_key_name(model)].annotation
    # Optional[int] -> int
    candidates = [arg for arg in get_args(annotation) if arg is not type(None)] or [annotation]
    for candidate in candidates:
        if candidate is int or candidate is uuid.UUID:
            return candidate
    return candidates[0] if isinstance(candidates[0], type) else None


def coerce_id(model: Type[SQLModel], value: str) -> Any:
    """
    Convert a path value to the model's primary key type.

    Returns ``None`` when the value cannot be an id of this model.
    """
    key_type = _primary_key_type(model)
    if key_type is int:
        return int(value) if value.isdecimal() else None
    if key_type is uuid.UUID:
        try:
            return uuid.UUID(value)
        except ValueError:
            return None
    return value


def looks_like_id(model: Type[SQLModel], value: str) -> bool:
    """Whether ``value`` has the shape of one of ``model``'s ids."""
    key_type = _primary_key_type(model)
    if key_type is int or key_type is uuid.UUID:
        return coerce_id(model, value) is not None
    if HEX_ID_FORMAT.match(value.lower()):
        return True
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def with_children(statement: Select, model: Type[SQLModel], attributes: Iterable[str]) -> Select:
    """Eager-load the given relationship attributes."""
    options = [selectinload(getattr(model, attribute)) for attribute in attributes]
    return statement.options(*options) if options else statement


async def fetch(
    session: AsyncSession,
    model: Type[SQLModel],
    criterion: Any,
    attributes: Iterable[str] = (),
) -> Optional[SQLModel]:
    """Load one instance matching ``criterion`` together with its children."""
    statement = with_children(select(model).where(criterion), model, attributes)
    statement = statement.execution_options(populate_existing=True)
    result = await session.execute(statement)
    return result.scalars().first()


async def find_top_level(
    session: AsyncSession,
    model: Type[SQLModel],
    identifier: str,
    attributes: Iterable[str] = (),
) -> Optional[SQLModel]:
    """
    Look a top-level instance up by id, or by slug when the model has a
    ``slug`` field and ``identifier`` does not look like an id.
    """
    if "slug" in model.model_fields and not looks_like_id(model, identifier):
        return await fetch(session, model, getattr(model, "slug") == identifier, attributes)

    key = coerce_id(model, identifier)
    if key is None:
        return None
    return await fetch(session, model, getattr(model, primary_key_name(model)) == key, attributes)


async def reload(
    session: AsyncSession,
    model: Type[SQLModel],
    instance: SQLModel,
    attributes: Iterable[str] = (),
) -> SQLModel:
    """Re-read a saved instance and its children."""
    pk = primary_key_name(model)
    loaded = await fetch(session, model, getattr(model, pk) == getattr(instance, pk), attributes)
    return loaded if loaded is not None else instance


def top_level_loader(model: Type[SQLModel], singular: str, attributes: List[str]) -> Loader:
    """
    Build the dependency that autoloads ``{singular}`` for a top-level model.

    Args:
        model: The table class.
        singular: The route parameter and resource name.
        attributes: Embedded relationship attributes to eager-load.
    """

    async def load(request: Request, session: AsyncSession = Depends(get_session)) -> Any:
        identifier = request.path_params[singular]
        obj = await find_top_level(session, model, identifier, attributes)
        if obj is None:
            logger.debug(f"No {singular} matches '{identifier}'")
            raise ResourceNotFoundError(singular, identifier)
        return resource(request, singular, obj)

    load.__name__ = f"load_{singular}"
    return load


def embedded_loader(parent_loader: Loader, parent_singular: str, child: EmbeddedResource) -> Loader:
    """
    Build the dependency that autoloads an embedded resource.

    The parent is loaded first by ``parent_loader``; the child is the element
    of the parent's attribute whose primary key matches the path value.
    """
    singular = child.singular
    pk = primary_key_name(child.model)

    async def load(request: Request, parent: Any = Depends(parent_loader)) -> Any:
        identifier = request.path_params[singular]
        children = getattr(parent, child.attribute, None)
        if children is None:
            logger.debug(f"{parent_singular} has no '{child.attribute}' collection")
            raise ResourceNotFoundError(singular, identifier)
        for item in children:
            if str(getattr(item, pk)) == identifier:
                return resource(request, singular, item)
        logger.debug(f"No {singular} '{identifier}' in {parent_singular}.{child.attribute}")
        raise ResourceNotFoundError(singular, identifier)

    load.__name__ = f"load_{singular}"
    return load
