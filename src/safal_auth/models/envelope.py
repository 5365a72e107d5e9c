"""
Response envelope shared by every endpoint that carries domain data.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ApiEnvelope(WireModel, Generic[T]):
    success: Optional[bool] = None
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[str] = None
    errors: Optional[list[str]] = None
    timestamp: Optional[str] = None


class ErrorBody(WireModel):
    """Generic error body returned with 4xx responses."""
    message: Optional[str] = None
    error: Optional[str] = None
    success: Optional[bool] = None
    status_code: Optional[int] = None
