"""Response envelope and pagination schemas shared by every endpoint."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")

# HH:MM, 24-hour clock
TIME_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"
PHONE_PATTERN = r"^\d{10}$"


class Pagination(BaseModel):
    """Pagination metadata."""

    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        """Compute page count for a result set."""
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit))


class PageParams(BaseModel):
    """Page number and size requested by the caller."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        """Rows to skip."""
        return (self.page - 1) * self.limit


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping every successful response."""

    success: bool = True
    message: str | None = None
    data: DataT | None = None
    pagination: Pagination | None = None


class MessageResponse(BaseModel):
    """Envelope for responses that carry only a message."""

    success: bool = True
    message: str
