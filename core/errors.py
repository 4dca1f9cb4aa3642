"""
core/errors.py -- Domain error taxonomy for Inkwell.

Every error carries a stable machine-readable code and the HTTP status the API
layer translates it into. Stores and services raise these; api/main.py owns
the single exception handler that turns them into the JSON error envelope.
Nothing below knows about FastAPI.

Layer rule: core/ is the kernel. No imports from api/, auth/, or blog/.
"""

from __future__ import annotations

from typing import Optional


class InkwellError(Exception):
    """Root exception for all Inkwell domain errors."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, fields: Optional[dict[str, str]] = None) -> None:
        self.message = message or self.default_message
        self.fields = fields
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "detail": None,
            "fields": self.fields,
        }


class ValidationError(InkwellError):
    """Request shape is wrong. fields maps each bad field to a message."""

    status_code = 400
    code = "validation_error"
    default_message = "Validation failed."

    def __init__(self, fields: dict[str, str], message: Optional[str] = None) -> None:
        super().__init__(message, fields=dict(fields))


class InvalidId(InkwellError):
    status_code = 400
    code = "invalid_id"
    default_message = "Invalid identifier format."


class InvalidCredentials(InkwellError):
    """Login failed. The message never says which half of the pair was wrong."""

    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid username or password."


class InvalidToken(InkwellError):
    """Bearer credential missing, malformed, tampered with, or expired.

    One message for every case so callers cannot tell them apart.
    """

    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required."


class Forbidden(InkwellError):
    status_code = 403
    code = "forbidden"
    default_message = "You do not have permission to modify this resource."


class NotFound(InkwellError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found."


class Conflict(InkwellError):
    """A unique field (username or email) is already taken."""

    status_code = 409
    code = "conflict"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(
            f"An account with this {field} already exists.",
            fields={field: f"This {field} is already taken"},
        )


class ConstraintViolation(InkwellError):
    """Raised by a store when a unique constraint rejects a write.

    Distinct from every other write failure so the service layer can turn it
    into Conflict(field) without parsing driver errors itself.
    """

    status_code = 409
    code = "conflict"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Unique constraint violated on {field}.")


class StoreUnavailable(InkwellError):
    """The database could not be reached or refused the operation.

    The original driver error is chained (raise ... from exc) for the server
    log; the client only ever sees the generic message.
    """

    status_code = 500
    code = "internal_error"


class ConfigurationError(InkwellError):
    """Fatal misconfiguration, e.g. the token signing secret is unset."""

    status_code = 500
    code = "internal_error"
    default_message = "Server is misconfigured."
