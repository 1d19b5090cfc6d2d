"""Model registry.

The registry maps a resource name to a SQLModel table class and records
which resources are embedded in which parent. The route binder and the
Backbone generator both iterate over it.

A top-level resource owns a list of embedded children through an ORM
relationship attribute::

    registry.register(Post, embedded={"comments": Comment})

Models may define optional classmethod hooks which the route binder picks up:

- ``search(params, user)`` returns the ``Select`` used by the index route.
- ``filter(body)`` returns a cleaned create/update payload.
- ``acl(user, action, obj)`` returns whether ``action`` is allowed.

Any hook may return an awaitable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union

from sqlalchemy import inspect as sa_inspect
from sqlmodel import SQLModel

from restbone.core.errors import RegistryError, UnknownResourceError
from restbone.core.inflection import pluralize, singularize
from restbone.core.logging_config import get_logger

logger = get_logger(__name__)

EmbeddedSpec = Union[Type[SQLModel], Tuple[Type[SQLModel], str]]


@dataclass(frozen=True)
class EmbeddedResource:
    """A child collection held by a parent's relationship attribute."""

    resource: str
    attribute: str
    model: Type[SQLModel]

    @property
    def singular(self) -> str:
        return singularize(self.resource)

    @property
    def plural(self) -> str:
        return pluralize(self.resource)


@dataclass
class Resource:
    """A registered top-level model and its embedded children."""

    name: str
    model: Type[SQLModel]
    children: List[EmbeddedResource] = field(default_factory=list)

    @property
    def singular(self) -> str:
        return singularize(self.name)

    @property
    def plural(self) -> str:
        return pluralize(self.name)


def _is_table(model: Any) -> bool:
    return isinstance(model, type) and issubclass(model, SQLModel) and getattr(model, "__table__", None) is not None


def _resource_name(model: Type[SQLModel], name: Optional[str]) -> str:
    return name or str(model.__tablename__)


class ModelRegistry:
    """
    In-memory registry of resource names to SQLModel table classes.

    Notes:
        - A table class is either top-level or embedded, never both.
        - The same child may be embedded by several parents.
        - Lookups of unknown names raise ``UnknownResourceError``.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._top_level: Dict[str, Resource] = {}
        self._embedded: Dict[str, Type[SQLModel]] = {}

    def register(
        self,
        model: Type[SQLModel],
        *,
        name: Optional[str] = None,
        embedded: Optional[Mapping[str, EmbeddedSpec]] = None,
    ) -> Type[SQLModel]:
        """
        Register a top-level model and its embedded children.

        Args:
            model: The SQLModel table class.
            name: Resource name. Defaults to the model's ``__tablename__``.
            embedded: Parent attribute name to child table class, or to a
                ``(child, resource_name)`` pair.

        Returns:
            The model, so the call can be used inline.

        Raises:
            RegistryError: If the model or any child cannot be registered.
        """
        if not _is_table(model):
            raise RegistryError(f"{model!r} is not a SQLModel table class")
        resource_name = _resource_name(model, name)
        if resource_name in self._top_level or resource_name in self._embedded:
            raise RegistryError(f"Resource '{resource_name}' is already registered")
        if model in self._embedded.values():
            raise RegistryError(f"{model.__name__} is already registered as an embedded model")

        entry = Resource(name=resource_name, model=model)
        for attribute, spec in (embedded or {}).items():
            entry.children.append(self._embedded_resource(entry, attribute, spec))

        self._top_level[resource_name] = entry
        for child in entry.children:
            self._embedded.setdefault(child.resource, child.model)
        logger.debug(
            f"Registered resource '{resource_name}' ({model.__name__}) "
            f"with {len(entry.children)} embedded collection(s)"
        )
        return model

    def _embedded_resource(self, parent: Resource, attribute: str, spec: EmbeddedSpec) -> EmbeddedResource:
        if isinstance(spec, tuple):
            child, child_name = spec
        else:
            child, child_name = spec, None
        if not _is_table(child):
            raise RegistryError(f"Embedded {attribute!r} of '{parent.name}' is not a SQLModel table class")
        if not hasattr(parent.model, attribute):
            raise RegistryError(f"{parent.model.__name__} has no attribute '{attribute}'")
        if any(existing.model is child for existing in self._top_level.values()) or child is parent.model:
            raise RegistryError(f"{child.__name__} is already registered as a top-level model")

        resource_name = _resource_name(child, child_name)
        known = self._embedded.get(resource_name)
        if known is not None and known is not child:
            raise RegistryError(f"Embedded resource '{resource_name}' is already bound to {known.__name__}")
        if resource_name in self._top_level:
            raise RegistryError(f"Resource '{resource_name}' is already registered")

        child_entry = EmbeddedResource(resource=resource_name, attribute=attribute, model=child)
        if child_entry.singular == parent.singular:
            raise RegistryError(f"Embedded resource '{resource_name}' shadows its parent's route parameter")
        return child_entry

    def get_top_level(self) -> List[str]:
        """Top-level resource names in registration order."""
        return list(self._top_level)

    def get_embedded(self) -> List[str]:
        """Embedded resource names in the order they were first declared."""
        return list(self._embedded)

    def get_children(self, resource: str) -> List[EmbeddedResource]:
        """The embedded collections of a top-level resource."""
        return list(self.resource(resource).children)

    def has_children(self, resource: str) -> bool:
        return bool(self.resource(resource).children)

    def resource(self, name: str) -> Resource:
        """
        Retrieve a top-level resource entry.

        Raises:
            UnknownResourceError: If no top-level resource has this name.
        """
        try:
            return self._top_level[name]
        except KeyError:
            raise UnknownResourceError(name) from None

    def model(self, resource: str) -> Type[SQLModel]:
        """
        Retrieve the table class of a top-level or embedded resource.

        Raises:
            UnknownResourceError: If nothing is registered under this name.
        """
        if resource in self._top_level:
            return self._top_level[resource].model
        if resource in self._embedded:
            return self._embedded[resource]
        raise UnknownResourceError(resource)

    def find(self, model: Type[SQLModel]) -> Optional[str]:
        """The resource name a table class is registered under, if any."""
        for name, entry in self._top_level.items():
            if entry.model is model:
                return name
        for name, child in self._embedded.items():
            if child is model:
                return name
        return None

    def serialize(self, resource: str, instance: SQLModel) -> Dict[str, Any]:
        """
        Convert an instance into a JSON-ready dict.

        Column values come from ``model_dump``. For top-level resources every
        embedded attribute that is already loaded is added as a list of child
        dicts. A model's own ``to_json_save()`` takes precedence.
        """
        to_json_save = getattr(instance, "to_json_save", None)
        if callable(to_json_save):
            return to_json_save()

        data = instance.model_dump(mode="json")
        if resource not in self._top_level:
            return data

        unloaded = sa_inspect(instance).unloaded
        for child in self._top_level[resource].children:
            if child.attribute in unloaded:
                continue
            data[child.attribute] = [
                self.serialize(child.resource, item) for item in getattr(instance, child.attribute) or []
            ]
        return data

    def clear(self) -> None:
        """Forget every registration."""
        self._top_level.clear()
        self._embedded.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._top_level or name in self._embedded

    def __len__(self) -> int:
        return len(self._top_level)
