"""
Status endpoints of a restbone server.

``/health`` answers as soon as the application can serve requests, and
``/version`` reports which restbone release generated the routes.
"""

from fastapi import APIRouter

import restbone

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Confirm that the restbone server is accepting requests.",
    response_description="Status object.",
)
async def health_check():
    """Liveness check for load balancers and deployment checks."""
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Report the restbone release serving the resource routes.",
    response_description="Version object.",
)
async def version():
    """
    Get API version.

    Returns the installed restbone package version, which is also the
    version of the generated routes and Backbone.js models.
    """
    return {"version": restbone.__version__}
