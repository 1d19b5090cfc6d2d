"""Create/update payload handling shared by top-level and embedded routes."""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Type

from sqlalchemy import inspect as sa_inspect
from sqlmodel import SQLModel

from .acl import call_hook


def assignable_fields(model: Type[SQLModel]) -> FrozenSet[str]:
    """Model fields a request may set: every field except the primary key."""
    primary_keys = {column.name for column in sa_inspect(model).primary_key}
    return frozenset(name for name in model.model_fields if name not in primary_keys)


async def prepare(model: Type[SQLModel], body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Drop body keys the model does not have, then apply ``model.filter``.

    Args:
        model: The table class the payload is for.
        body: The parsed request body.
    """
    allowed = assignable_fields(model)
    payload = {key: value for key, value in body.items() if key in allowed}
    hook = getattr(model, "filter", None)
    if callable(hook):
        payload = await call_hook(hook, payload)
    return payload


def build(model: Type[SQLModel], payload: Dict[str, Any]) -> SQLModel:
    """Validate ``payload`` into a new instance. Raises pydantic's ``ValidationError``."""
    return model.model_validate(payload)


def assign(model: Type[SQLModel], instance: SQLModel, payload: Dict[str, Any]) -> SQLModel:
    """
    Validate ``payload`` merged over the current values, then copy the
    changed fields onto ``instance``.
    """
    merged = {**instance.model_dump(), **payload}
    validated = model.model_validate(merged)
    for key in payload:
        setattr(instance, key, getattr(validated, key))
    return instance
