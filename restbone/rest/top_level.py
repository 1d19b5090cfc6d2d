"""Route handlers for top-level resources.

``top_level_routes`` builds the five RESTful actions of one registered model::

    GET    /<plural>            index
    POST   /<plural>            create
    GET    /<plural>/<id>       read
    PUT    /<plural>/<id>       update
    DELETE /<plural>/<id>       destroy

Every action answers JSON to XHR / ``.json`` / JSON-only clients and renders
``<plural>/index.html`` or ``<plural>/read.html`` (or redirects after a write)
when HTML templates are configured.
"""

from typing import Any, Dict, Optional, Tuple, Type

from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from restbone.core.config import RestConfig
from restbone.core.database import get_session
from restbone.core.errors import InvalidQueryError
from restbone.core.logging_config import get_logger
from restbone.models.registry import ModelRegistry, Resource

from .acl import Endpoint, call_hook, guard_all
from .autoload import primary_key_name, reload, top_level_loader, with_children
from .payload import assign, build, prepare
from .request import current_user, read_body, resource, wants_json
from .views import redirect, render

logger = get_logger(__name__)

_FALSY = frozenset({"", "0", "false", "no", "off"})


def _positive_int(request: Request, name: str, default: int) -> int:
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidQueryError(f"Query parameter '{name}' must be an integer") from None
    # Zero counts as unset
    if value == 0:
        return default
    return max(value, 1)


def page_and_limit(request: Request, config: RestConfig) -> Tuple[int, int]:
    """The requested page (from 1) and page size capped at ``config.max_limit``."""
    page = _positive_int(request, "page", 1)
    limit = min(config.max_limit, _positive_int(request, "limit", config.default_limit))
    return page, limit


def _is_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() not in _FALSY


def order_clause(model: Type[SQLModel], order: str, descending: bool) -> Any:
    if order not in model.model_fields:
        raise InvalidQueryError(f"Cannot order {model.__name__} by '{order}'")
    column = getattr(model, order)
    return column.desc() if descending else column.asc()


async def base_query(model: Type[SQLModel], request: Request, params: Dict[str, str]) -> Select:
    """``model.search(params, user)`` when the model defines it, else ``select(model)``."""
    search = getattr(model, "search", None)
    if callable(search):
        return await call_hook(search, params, current_user(request))
    return select(model)


def top_level_routes(registry: ModelRegistry, entry: Resource, prefix: str, config: RestConfig) -> Dict[str, Endpoint]:
    """
    Generate routes for a top-level model.

    Args:
        registry: The registry used to serialize instances.
        entry: The registered resource.
        prefix: The collection URL, e.g. ``/posts``.
        config: Pagination settings.

    Returns:
        Handlers keyed by action name, routed through ``acl`` when defined.
    """
    model = entry.model
    singular, plural = entry.singular, entry.plural
    attributes = [child.attribute for child in entry.children]
    pk = primary_key_name(model)
    load = top_level_loader(model, singular, attributes)

    def dump(instance: SQLModel) -> Dict[str, Any]:
        return registry.serialize(entry.name, instance)

    # GET /<resource>
    async def index(request: Request, session: AsyncSession = Depends(get_session)):
        page, limit = page_and_limit(request, config)
        offset = (page - 1) * limit
        order = request.query_params.get("order")
        params = dict(request.query_params)

        statement = await base_query(model, request, params)
        if order:
            statement = statement.order_by(order_clause(model, order, _is_truthy(request.query_params.get("desc"))))
        statement = with_children(statement, model, attributes).offset(offset).limit(limit)
        results = list((await session.execute(statement)).scalars().all())
        resource(request, plural, results)

        if wants_json(request):
            return [dump(row) for row in results]
        return render(
            request,
            f"{plural}/index.html",
            {
                "limit": limit,
                "page": page,
                "offset": offset,
                "sort": order or pk,
                "query": params,
                plural: results,
            },
        )

    # POST /<resource>
    async def create(request: Request, session: AsyncSession = Depends(get_session)):
        payload = await prepare(model, await read_body(request))
        instance = build(model, payload)
        session.add(instance)
        await session.commit()
        instance = await reload(session, model, instance, attributes)
        resource(request, singular, instance)
        logger.info(f"Created {singular} {getattr(instance, pk)}")

        if wants_json(request):
            return JSONResponse(dump(instance), status_code=status.HTTP_201_CREATED)
        return redirect(request, prefix, "The %s was created successfully", singular)

    # GET /<resource>/:id
    async def read(request: Request, instance: Any = Depends(load)):
        if wants_json(request):
            return dump(instance)
        return render(request, f"{plural}/read.html", {"instance": instance})

    # PUT /<resource>/:id
    async def update(
        request: Request,
        instance: Any = Depends(load),
        session: AsyncSession = Depends(get_session),
    ):
        payload = await prepare(model, await read_body(request))
        assign(model, instance, payload)
        session.add(instance)
        await session.commit()
        instance = await reload(session, model, instance, attributes)
        resource(request, singular, instance)
        logger.info(f"Updated {singular} {getattr(instance, pk)}: {sorted(payload)}")

        if wants_json(request):
            return dump(instance)
        return redirect(request, f"{prefix}/{getattr(instance, pk)}", "The %s was updated successfully", singular)

    # DELETE /<resource>/:id
    async def destroy(
        request: Request,
        instance: Any = Depends(load),
        session: AsyncSession = Depends(get_session),
    ):
        identifier = getattr(instance, pk)
        await session.delete(instance)
        await session.commit()
        logger.info(f"Removed {singular} {identifier}")

        if wants_json(request):
            return {"status": "ok"}
        return redirect(request, prefix, "The %s was removed successfully", singular)

    routes: Dict[str, Endpoint] = {
        "index": index,
        "create": create,
        "read": read,
        "update": update,
        "destroy": destroy,
    }
    for action, handle in routes.items():
        handle.__name__ = f"{action}_{plural}"

    # If there's an acl() hook, patch each action to route through it
    return guard_all(routes, model, singular)
