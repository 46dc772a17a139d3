from typing import Any, Mapping, Optional


class AppError(Exception):
    """Base class for errors surfaced by the store's client interface.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, constraint names)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(AppError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_message = "Invalid input"


class NotFoundError(AppError):
    """Raised when a requested row does not exist or is not visible to the principal."""

    http_status = 404
    default_message = "Not found"


class AccessDeniedError(NotFoundError):
    """Raised when a row-level policy rejects an operation.

    Same status, message and payload as NotFoundError: a caller cannot tell
    "exists but forbidden" from "does not exist". Only the class differs.
    """


class ConflictError(AppError):
    """Raised when a uniqueness constraint is violated (e.g., duplicate week plan).

    http_status is 409.
    """

    http_status = 409
    default_message = "Conflict"


class InvalidReferenceError(AppError):
    """Raised when a write references a parent row that does not exist.

    http_status is 422.
    """

    http_status = 422
    default_message = "Referenced row does not exist"


class UnauthorizedError(AppError):
    """Raised when an operation needs an authenticated principal and the session has none.

    http_status is 401.
    """

    http_status = 401
    default_message = "Unauthorized"
