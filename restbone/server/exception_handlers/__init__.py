"""
Exception handlers for the restbone server.

This package contains the handlers that turn restbone and validation errors
into HTTP responses, a global handler for everything else, and the setup
functions that register them with a FastAPI application.
"""

from .global_handler import setup_exception_handlers
from .resource_handler import setup_resource_handlers

__all__ = ["setup_exception_handlers", "setup_resource_handlers"]
