"""Route handlers for embedded resources.

Embedded resources live in a relationship attribute of their parent and are
only reachable through it::

    GET    /<parent>/<parent_id>/<resource>          index
    POST   /<parent>/<parent_id>/<resource>          create
    GET    /<parent>/<parent_id>/<resource>/<id>     read
    PUT    /<parent>/<parent_id>/<resource>/<id>     update
    DELETE /<parent>/<parent_id>/<resource>/<id>     destroy

These routes always answer JSON; they serve the client collections.
"""

from typing import Any, Dict

from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from restbone.core.database import get_session
from restbone.core.logging_config import get_logger
from restbone.models.registry import EmbeddedResource, ModelRegistry, Resource

from .acl import Endpoint, guard_all
from .autoload import Loader, embedded_loader, primary_key_name
from .payload import assign, build, prepare
from .request import read_body

logger = get_logger(__name__)


def embedded_routes(
    registry: ModelRegistry,
    parent: Resource,
    child: EmbeddedResource,
    parent_load: Loader,
) -> Dict[str, Endpoint]:
    """
    Generate routes for the documents embedded in ``parent.<child.attribute>``.

    Args:
        registry: The registry used to serialize instances.
        parent: The registered parent resource.
        child: The embedded collection.
        parent_load: The parent's autoload dependency.

    Returns:
        Handlers keyed by action name, routed through the parent's ``acl``
        when defined.
    """
    model = child.model
    attribute = child.attribute
    pk = primary_key_name(model)
    load = embedded_loader(parent_load, parent.singular, child)

    def dump(instance: Any) -> Dict[str, Any]:
        return registry.serialize(child.resource, instance)

    # GET /<parent_resource>/:parent_id/<resource>
    async def index(request: Request, owner: Any = Depends(parent_load)):
        return [dump(item) for item in getattr(owner, attribute) or []]

    # POST /<parent_resource>/:parent_id/<resource>
    async def create(
        request: Request,
        owner: Any = Depends(parent_load),
        session: AsyncSession = Depends(get_session),
    ):
        payload = await prepare(model, await read_body(request))
        item = build(model, payload)
        getattr(owner, attribute).append(item)
        session.add(owner)
        await session.commit()
        logger.info(f"Created {child.singular} {getattr(item, pk)} in {parent.singular}.{attribute}")
        return JSONResponse(dump(item), status_code=status.HTTP_201_CREATED)

    # GET /<parent_resource>/:parent_id/<resource>/:id
    async def read(request: Request, item: Any = Depends(load)):
        return dump(item)

    # PUT /<parent_resource>/:parent_id/<resource>/:id
    async def update(
        request: Request,
        item: Any = Depends(load),
        owner: Any = Depends(parent_load),
        session: AsyncSession = Depends(get_session),
    ):
        payload = await prepare(model, await read_body(request))
        assign(model, item, payload)
        session.add(owner)
        await session.commit()
        logger.info(f"Updated {child.singular} {getattr(item, pk)}: {sorted(payload)}")
        return dump(item)

    # DELETE /<parent_resource>/:parent_id/<resource>/:id
    async def destroy(
        request: Request,
        item: Any = Depends(load),
        owner: Any = Depends(parent_load),
        session: AsyncSession = Depends(get_session),
    ):
        identifier = getattr(item, pk)
        getattr(owner, attribute).remove(item)
        await session.delete(item)
        await session.commit()
        logger.info(f"Removed {child.singular} {identifier} from {parent.singular}.{attribute}")
        return {"status": "ok"}

    routes: Dict[str, Endpoint] = {
        "index": index,
        "create": create,
        "read": read,
        "update": update,
        "destroy": destroy,
    }
    for action, handle in routes.items():
        handle.__name__ = f"{action}_{parent.plural}_{child.plural}"

    # Run each embedded document route through the parent's acl() hook
    return guard_all(routes, parent.model, child.singular)
