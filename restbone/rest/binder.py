"""Bind resource-based, RESTful routes for the registered models onto an app.

All models must be registered before ``create_routes`` is called.
"""

from typing import Dict, Optional

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from restbone.core.config import RestConfig, settings
from restbone.core.logging_config import get_logger
from restbone.models.registry import ModelRegistry

from .acl import Endpoint
from .autoload import top_level_loader
from .embedded import embedded_routes
from .top_level import top_level_routes

logger = get_logger(__name__)


def add_routes(app: FastAPI, routes: Dict[str, Endpoint], prefix: str, singular: str, tag: str) -> None:
    """
    Add the five RESTful routes of one collection.

    The ``.{format}`` variants are added before the plain item routes so
    ``/posts/1.json`` is not read as the id ``1.json``.
    """
    item = f"{prefix}/{{{singular}}}"
    options = {"response_model": None, "tags": [tag]}
    app.add_api_route(f"{prefix}.{{format}}", routes["index"], methods=["GET"], **options)
    app.add_api_route(prefix, routes["index"], methods=["GET"], **options)
    app.add_api_route(prefix, routes["create"], methods=["POST"], **options)
    app.add_api_route(f"{item}.{{format}}", routes["read"], methods=["GET"], **options)
    app.add_api_route(item, routes["read"], methods=["GET"], **options)
    app.add_api_route(item, routes["update"], methods=["PUT"], **options)
    app.add_api_route(item, routes["destroy"], methods=["DELETE"], **options)


def create_routes(
    app: FastAPI,
    registry: Optional[ModelRegistry] = None,
    config: Optional[RestConfig] = None,
    templates: Optional[Jinja2Templates] = None,
) -> None:
    """
    Create resource-based, RESTful routes for the registered models.

    Args:
        app: The application to add routes to.
        registry: The model registry. Defaults to ``restbone.registry``.
        config: Path and pagination settings. Defaults to ``settings.rest``.
        templates: Jinja2 templates for HTML views. JSON only when omitted.
    """
    from restbone import registry as default_registry
    from restbone.server.exception_handlers import setup_resource_handlers

    registry = registry if registry is not None else default_registry
    config = config or settings.rest

    app.state.restbone_templates = templates
    app.state.restbone_registry = registry
    setup_resource_handlers(app)

    # Add routes for each top level model
    for name in registry.get_top_level():
        entry = registry.resource(name)
        top_prefix = config.prefix + entry.plural

        routes = top_level_routes(registry, entry, top_prefix, config)
        add_routes(app, routes, top_prefix, entry.singular, entry.plural)
        logger.info(f"Bound RESTful routes for '{name}' at {top_prefix}")

        # Add routes for embedded documents
        parent_load = top_level_loader(entry.model, entry.singular, [child.attribute for child in entry.children])
        for child in entry.children:
            prefix = f"{top_prefix}/{{{entry.singular}}}/{child.plural}"
            routes = embedded_routes(registry, entry, child, parent_load)
            add_routes(app, routes, prefix, child.singular, entry.plural)
            logger.info(f"Bound embedded routes for '{child.resource}' at {prefix}")
