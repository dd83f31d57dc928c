from src.core.exceptions.base import (
    AppException,
    NotFoundError,
    PreconditionError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "PreconditionError",
]
