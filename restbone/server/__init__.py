"""
Web server for restbone.

Builds a FastAPI application serving the REST routes and the generated
Backbone.js client models of a model registry.
"""

from .main import create_app

__all__ = ["create_app"]
