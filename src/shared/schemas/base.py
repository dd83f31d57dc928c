from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Base Pydantic schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class FrozenSchema(BaseModel):
    """Immutable schema, buildable from ORM attributes. Engine inputs and results use it."""

    model_config = ConfigDict(from_attributes=True, frozen=True)


class ErrorDetail(BaseSchema):
    """One error, optionally tied to a request field."""

    field: str | None = None
    message: str


class SuccessResponse(BaseSchema, Generic[T]):
    """Envelope for successful responses."""

    success: bool = True
    data: T
    message: str | None = None


# Routers declare ApiResponse[...] as their response model
ApiResponse = SuccessResponse


class ErrorResponse(BaseSchema):
    """Envelope for errors; data is always null."""

    success: bool = False
    data: None = None
    message: str
    errors: list[ErrorDetail] = []
