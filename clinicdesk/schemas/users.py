"""User schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr

from clinicdesk.core.roles import Role


class UserResponse(BaseModel):
    """Account details safe to return to clients."""

    id: UUID
    email: EmailStr
    role: Role
    is_active: bool = True
    created_at: datetime | None = None
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserStatusUpdate(BaseModel):
    """Schema for activating or deactivating an account."""

    is_active: bool
