"""
Backbone.js client model generation.

Renders the Jinja2 templates shipped in ``restbone/client/templates`` into the
source of one Backbone model and collection per registered resource:

- a common ``Model`` base whose ``set`` moves embedded attribute arrays into
  child collections, and a ``Collection`` base;
- a model/collection pair for each embedded resource;
- a model/collection pair for each top-level resource, with REST URLs and
  one child collection per embedded attribute.

Every class name is prefixed with an optional namespace.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union

from fastapi.templating import Jinja2Templates
from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup
from sqlmodel import SQLModel

from restbone.core.inflection import classify, pluralize, singularize
from restbone.core.logging_config import get_logger
from restbone.models.registry import ModelRegistry

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


def create_jinja_env(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    """Create the Jinja2 environment with the inflection filters."""
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["classify"] = classify
    env.filters["singularize"] = singularize
    env.filters["pluralize"] = pluralize
    return env


def _script_json(data: Any) -> str:
    # A literal "</script>" inside the payload would close the tag early.
    return json.dumps(data).replace("</", "<\\/")


class BackboneGenerator:
    """
    Generates Backbone.js models and collections from a ``ModelRegistry``.

    Args:
        registry: The registry to generate from.
        namespace: Prefix for every generated class name.
        path: URL prefix the REST routes are mounted under.
        templates_dir: Override the shipped templates.
    """

    def __init__(
        self,
        registry: ModelRegistry,
        namespace: str = "",
        path: str = "/",
        templates_dir: Optional[Path] = None,
    ) -> None:
        self.registry = registry
        self.namespace = namespace or ""
        self.path = path.rstrip("/") + "/"
        self.env = create_jinja_env(templates_dir or TEMPLATES_DIR)

    def class_name(self, resource: str) -> str:
        return self.namespace + classify(singularize(resource))

    def common(self) -> str:
        """Generate the shared ``Model`` and ``Collection`` base classes."""
        return self.env.get_template("common.js.j2").render(namespace=self.namespace)

    def embedded_model(self, resource: str) -> str:
        """Generate the model and collection of an embedded resource."""
        return self.env.get_template("embedded.js.j2").render(
            namespace=self.namespace,
            cls=self.class_name(resource),
        )

    def top_level_model(self, resource: str) -> str:
        """Generate the model and collection of a top-level resource."""
        return self.env.get_template("top_level.js.j2").render(
            namespace=self.namespace,
            cls=self.class_name(resource),
            url=self.path + pluralize(resource),
            children=self.registry.get_children(resource),
        )

    def generate(self) -> str:
        """Generate the full client script: bases, embedded, then top-level models."""
        parts = [self.common()]
        parts.extend(self.embedded_model(resource) for resource in self.registry.get_embedded())
        parts.extend(self.top_level_model(resource) for resource in self.registry.get_top_level())
        logger.debug(
            f"Generated Backbone models for {len(self.registry.get_top_level())} top-level and "
            f"{len(self.registry.get_embedded())} embedded resource(s)"
        )
        return "".join(parts)

    def instance_script(self, resource: str, instance: SQLModel) -> Markup:
        """
        Render a ``<script>`` that instantiates the client model of ``instance``.

        The payload is ``instance.to_json_save()`` when the model defines it,
        else the registry serialization (columns plus loaded children).
        """
        singular = singularize(resource)
        name = resource if resource in self.registry else pluralize(resource)
        to_json_save = getattr(instance, "to_json_save", None)
        data = to_json_save() if callable(to_json_save) else self.registry.serialize(name, instance)
        rendered = self.env.get_template("instance.html.j2").render(
            singular=singular,
            cls=self.namespace + classify(singular),
            payload=_script_json(data),
        )
        return Markup(rendered)

    def write(self, file: Union[str, Path]) -> Path:
        """Write the generated script to ``file``."""
        target = Path(file)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.generate(), encoding="utf-8")
        logger.info(f"Wrote Backbone models to {target}")
        return target


def _generator(
    registry: Optional[ModelRegistry],
    namespace: str,
    templates: Optional[Jinja2Templates],
    path: str,
) -> BackboneGenerator:
    from restbone import registry as default_registry

    generator = BackboneGenerator(registry if registry is not None else default_registry, namespace, path)
    if templates is not None:
        # Provide a helper for creating a backbone model inside views
        templates.env.globals["backbone"] = generator.instance_script
    return generator


def generate(
    registry: Optional[ModelRegistry] = None,
    namespace: str = "",
    templates: Optional[Jinja2Templates] = None,
    path: str = "/",
) -> str:
    """
    Generate Backbone models.

    When ``templates`` is given, ``backbone(resource, instance)`` is made
    available to its views to instantiate a client model inline.

    Args:
        registry: The model registry. Defaults to ``restbone.registry``.
        namespace: Prefix for every generated class name.
        templates: View templates to install the ``backbone`` helper on.
        path: URL prefix the REST routes are mounted under.

    Returns:
        The generated JavaScript source.
    """
    return _generator(registry, namespace, templates, path).generate()


def generate_file(
    file: Union[str, Path],
    registry: Optional[ModelRegistry] = None,
    namespace: str = "",
    templates: Optional[Jinja2Templates] = None,
    path: str = "/",
) -> Path:
    """
    Generate Backbone models and write them to a file.

    Args:
        file: Destination path.
        registry: The model registry. Defaults to ``restbone.registry``.
        namespace: Prefix for every generated class name.
        templates: View templates to install the ``backbone`` helper on.
        path: URL prefix the REST routes are mounted under.

    Returns:
        The path written.
    """
    return _generator(registry, namespace, templates, path).write(file)
