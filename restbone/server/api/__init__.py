"""API routers that are not generated from the model registry."""

from . import health

__all__ = ["health"]
