"""
Main Application Entry Point.

This module builds the FastAPI application: it configures logging and CORS,
registers the exception handlers, includes the health router, binds the
REST routes of the model registry and serves the generated Backbone.js
client models.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from restbone.client.backbone import generate
from restbone.core.config import Settings
from restbone.core.config import settings as default_settings
from restbone.core.database import create_engine, create_sessionmaker, init_db
from restbone.core.logging_config import get_logger, setup_logging
from restbone.models.registry import ModelRegistry
from restbone.rest.binder import create_routes

from .api import health
from .exception_handlers import setup_exception_handlers

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the missing tables of every imported SQLModel table class on
    startup, on the application's own engine when it has one. That engine
    is disposed on shutdown.
    """
    db_engine = getattr(app.state, "db_engine", None)

    # Startup
    try:
        logger.info("Starting up restbone server...")
        await init_db(db_engine)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down restbone server...")
    if db_engine is not None:
        await db_engine.dispose()


def create_app(registry: Optional[ModelRegistry] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application for a model registry.

    Every model must be registered before this is called.

    Args:
        registry: The model registry. Defaults to ``restbone.registry``.
        settings: Application settings. Defaults to the environment settings.

    Returns:
        The configured FastAPI application.
    """
    from restbone import registry as default_registry

    registry = registry if registry is not None else default_registry
    settings = settings or default_settings

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        enable_file=settings.enable_file_logging,
        log_file_dir=settings.log_file_dir,
    )

    app = FastAPI(
        title=settings.project_name,
        description="RESTful routes and Backbone.js client models for the registered SQLModel tables.",
        lifespan=lifespan,
    )

    # A database other than the global one gets its own engine
    if settings.database_url != default_settings.database_url:
        app.state.db_engine = create_engine(settings.database_url)
        app.state.session_maker = create_sessionmaker(app.state.db_engine)
        logger.info(f"Using database {app.state.db_engine.url.render_as_string(hide_password=True)}")

    # Set all CORS enabled origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    setup_exception_handlers(app)
    app.include_router(health.router, tags=["health"])

    templates = Jinja2Templates(directory=settings.templates_dir) if settings.templates_dir else None
    create_routes(app, registry=registry, config=settings.rest, templates=templates)

    script = generate(registry, namespace=settings.backbone.namespace, templates=templates, path=settings.rest.path)
    if settings.backbone.output_file:
        target = Path(settings.backbone.output_file)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(script, encoding="utf-8")
        logger.info(f"Wrote Backbone models to {target}")

    async def backbone_models() -> Response:
        return Response(content=script, media_type="application/javascript")

    app.add_api_route(settings.backbone.script_url, backbone_models, methods=["GET"], include_in_schema=False)
    logger.info(f"Serving Backbone models for {len(registry)} resource(s) at {settings.backbone.script_url}")
    return app
