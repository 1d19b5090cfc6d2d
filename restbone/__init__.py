"""
restbone: RESTful routes and Backbone.js client models for SQLModel tables.

Register table classes, then bind their routes onto a FastAPI app and
generate the matching client models::

    import restbone

    restbone.registry.register(Post, embedded={"comments": Comment})
    restbone.create_routes(app)
    script = restbone.generate_backbone(namespace="Blog")
"""

from restbone.models import ModelRegistry

__version__ = "0.1.0"

# The default registry used when none is passed explicitly
registry = ModelRegistry()

from restbone.client.backbone import generate as generate_backbone  # noqa: E402
from restbone.client.backbone import generate_file as generate_backbone_file  # noqa: E402
from restbone.rest import create_routes  # noqa: E402

__all__ = [
    "ModelRegistry",
    "__version__",
    "create_routes",
    "generate_backbone",
    "generate_backbone_file",
    "registry",
]
