from src.shared.schemas.base import (
    ApiResponse,
    BaseSchema,
    FrozenSchema,
    SuccessResponse,
    ErrorResponse,
    ErrorDetail,
)

__all__ = [
    "ApiResponse",
    "BaseSchema",
    "FrozenSchema",
    "SuccessResponse",
    "ErrorResponse",
    "ErrorDetail",
]
