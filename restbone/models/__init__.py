"""
Model registry.

This package holds the registry of SQLModel table classes the REST routes
and the Backbone client models are generated from.
"""

from .registry import EmbeddedResource, ModelRegistry, Resource

__all__ = ["EmbeddedResource", "ModelRegistry", "Resource"]
