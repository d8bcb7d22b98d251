"""Error hierarchy shared by every layer of the provider.

Each error carries the HTTP-style status an outer transport should answer with.
Callers can tell "bad request shape" (ClientError) apart from "well-formed request
whose target does not exist" (UnprocessableError).
"""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for all provider errors."""

    status: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ClientError(ProviderError):
    """Malformed request: bad filter target, unknown payload property, empty payload."""

    status = 400


class UnsupportedFieldError(ClientError):
    """Filter or sort on a field with no storage backing (typically computed).

    List and count requests demote this error to a logged skip.
    """


class EntityValidationError(ClientError):
    """Save-time validation failure addressable per public field."""

    def __init__(self, message: str, field_errors: dict[str, list[str]] | None = None):
        super().__init__(message)
        self.field_errors: dict[str, list[str]] = field_errors or {}

    def add_field_error(self, public_name: str, message: str) -> None:
        """Attach a message to a public field."""
        self.field_errors.setdefault(public_name, []).append(message)


class UnprocessableError(ProviderError):
    """Identifier does not resolve to an entity of this resource."""

    status = 422


class PermissionDeniedError(ProviderError):
    """Caller may not perform the operation. Never includes entity contents."""

    status = 403


class ServerConfigurationError(ProviderError):
    """Resource metadata is internally inconsistent (a modeling bug, not a caller mistake)."""

    status = 500
