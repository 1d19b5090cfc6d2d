"""
REST route binder.

Wires index/create/read/update/destroy routes for every registered model,
and for each of its embedded collections, onto a FastAPI application.
"""

from .binder import add_routes, create_routes
from .request import current_user, flash, get_flashed_messages, read_body, resource, wants_json

__all__ = [
    "add_routes",
    "create_routes",
    "current_user",
    "flash",
    "get_flashed_messages",
    "read_body",
    "resource",
    "wants_json",
]
