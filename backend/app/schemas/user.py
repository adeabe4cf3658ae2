from datetime import datetime

from pydantic import EmailStr, Field

from app.models.user import UserRole
from app.schemas.auth import UserOut
from app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Admin creates a user (admin or customer)."""
    id: str | None = None
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    role: UserRole = UserRole.CUSTOMER


class UserUpdate(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    role: UserRole
    # Empty / omitted keeps the current password
    password: str | None = None
    # Required when a customer changes their own password
    current_password: str | None = None


class UserDetail(UserOut):
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserCreatedResponse(CamelModel):
    success: bool = True
    user: UserOut
