"""Error types raised by the registry, the route binder and the autoloaders.

Each HTTP-facing error carries the status code the exception handlers in
``restbone.server.exception_handlers`` answer with.
"""

from __future__ import annotations

from typing import Any


class RestboneError(Exception):
    """Base class for all restbone errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class RegistryError(RestboneError):
    """A model could not be registered."""


class UnknownResourceError(RegistryError, KeyError):
    """No model is registered under the requested resource name."""

    def __init__(self, resource: str) -> None:
        super().__init__(f"No model registered for resource '{resource}'")
        self.resource = resource


class ResourceNotFoundError(RestboneError):
    """The resource named in the URL does not exist."""

    status_code = 404

    def __init__(self, singular: str, identifier: Any = None) -> None:
        super().__init__(f"The {singular} could not be found.")
        self.singular = singular
        self.identifier = identifier


class AuthorizationError(RestboneError):
    """A model's ``acl`` hook refused the action."""

    status_code = 403

    def __init__(self, action: str, resource: str) -> None:
        super().__init__("auth")
        self.action = action
        self.resource = resource


class InvalidQueryError(RestboneError):
    """Pagination or ordering parameters could not be applied."""

    status_code = 400


class InvalidBodyError(RestboneError):
    """The request body is not a JSON object or form."""

    status_code = 400
