from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class PreconditionError(AppException):
    """Input required to compute an invoice is missing.

    The HTTP layer uses ``status_code``; other callers can inspect ``resource``.
    """

    def __init__(self, resource: str, identifier: Any = None, status_code: int = 422):
        self.resource = resource
        message = f"Invoice cannot be computed: {resource} unavailable"
        if identifier is not None:
            message = f"Invoice cannot be computed: {resource} with id={identifier} not found"
        super().__init__(
            message=message,
            status_code=status_code,
            details={"resource": resource},
        )
