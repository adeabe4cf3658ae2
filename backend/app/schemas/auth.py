from pydantic import EmailStr, Field

from app.models.user import UserRole
from app.schemas.common import CamelModel


class UserOut(CamelModel):
    """Public view of a user; the password hash is never part of it."""
    id: str
    name: str
    email: str
    role: UserRole


# ── Self-registration ────────────────────────────────────────

class RegisterRequest(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    role: UserRole = UserRole.CUSTOMER


# ── Login ────────────────────────────────────────────────────

class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenResponse(CamelModel):
    success: bool = True
    user: UserOut
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


# ── Token refresh ────────────────────────────────────────────

class RefreshRequest(CamelModel):
    refresh_token: str
