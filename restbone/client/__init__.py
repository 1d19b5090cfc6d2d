"""
Client-code generation.

Renders Backbone.js models and collections for the registered resources.
"""

from .backbone import BackboneGenerator, generate, generate_file

__all__ = ["BackboneGenerator", "generate", "generate_file"]
