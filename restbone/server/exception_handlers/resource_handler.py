"""
Exception handlers for the generated resource routes.

``RestboneError`` subclasses carry their own status code and answer
``{"detail": message}``. A missing resource requested from an HTML page is
flashed and sent back to the referring page instead. Pydantic validation
errors raised while building or updating an instance answer 422.
"""

from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError
from starlette.responses import Response

from restbone.core.errors import ResourceNotFoundError, RestboneError
from restbone.core.logging_config import get_logger
from restbone.rest.request import flash, wants_json

logger = get_logger(__name__)


async def restbone_error_handler(request: Request, exc: RestboneError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


async def not_found_handler(request: Request, exc: ResourceNotFoundError) -> Response:
    """Answer 404, or flash the message and redirect back for HTML pages."""
    referer = request.headers.get("referer")
    if referer and not wants_json(request):
        logger.info(f"{exc} Redirecting {request.method} {request.url.path} back to {referer}")
        flash(request, "error", str(exc))
        return RedirectResponse(referer, status_code=status.HTTP_303_SEE_OTHER)
    return await restbone_error_handler(request, exc)


def _errors(exc: ValidationError) -> List[Dict[str, Any]]:
    return [{"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]} for error in exc.errors()]


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning(f"Invalid payload in {request.method} {request.url.path}: {exc.error_count()} error(s)")
    return JSONResponse(status_code=422, content={"detail": _errors(exc)})


def setup_resource_handlers(app: FastAPI) -> None:
    """
    Register the resource route exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(RestboneError, restbone_error_handler)
    app.add_exception_handler(ResourceNotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    logger.debug("Resource exception handlers registered")
