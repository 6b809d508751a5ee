from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every successful response."""
    success: bool = True
    message: str
    data: Optional[T] = None
    count: Optional[int] = Field(None, description="Number of items, only set on list responses.")


class FieldError(BaseModel):
    path: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[FieldError]] = None
