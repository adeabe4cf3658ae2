"""Auth routes: register, login, refresh, logout, me.

Route overview:
  POST /register  — self-registration (customers; first admin bootstrap)
  POST /login     — email + password login
  POST /refresh   — exchange a refresh token for new access + refresh tokens
  POST /logout    — revoke the presented access token
  GET  /me        — return the current user profile
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user
from app.auth.jwt import create_access_token, create_refresh_token, decode_token
from app.auth.password import hash_password, verify_password
from app.auth.revocation import TokenRevocation
from app.database import get_db
from app.middleware.exceptions import ConflictError, PermissionDeniedError
from app.models.user import User, UserRole
from app.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserOut,
)
from app.schemas.common import SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def normalize_email(email: str) -> str:
    return email.strip().lower()


def _build_token_response(user: User) -> TokenResponse:
    return TokenResponse(
        user=UserOut.model_validate(user),
        access_token=create_access_token(user_id=user.id, role=user.role.value),
        refresh_token=create_refresh_token(user_id=user.id, role=user.role.value),
    )


async def email_taken(db: AsyncSession, email: str, exclude_id: str | None = None) -> bool:
    query = select(User.id).where(User.email == email)
    if exclude_id:
        query = query.where(User.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


# ── POST /register ──────────────────────────────────────────

@router.post("/register", response_model=TokenResponse)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Self-registration. Admin accounts can only be self-created while none exists."""
    email = normalize_email(body.email)
    if await email_taken(db, email):
        raise ConflictError("A user with this email already exists")

    role = body.role
    if role == UserRole.ADMIN:
        existing_admin = await db.execute(
            select(User.id).where(User.role == UserRole.ADMIN).limit(1)
        )
        if existing_admin.first() is not None:
            raise PermissionDeniedError("Admin accounts are created by an existing admin")

    user = User(
        name=body.name.strip(),
        email=email,
        hashed_password=hash_password(body.password),
        role=role,
    )
    db.add(user)
    await db.flush()

    logger.info("Registered %s user %s", user.role.value, user.id)
    return _build_token_response(user)


# ── POST /login ──────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Email + password login. Unknown email and wrong password look the same."""
    result = await db.execute(select(User).where(User.email == normalize_email(body.email)))
    user = result.scalar_one_or_none()

    if not verify_password(body.password, user.hashed_password if user else None):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return _build_token_response(user)


# ── POST /refresh ────────────────────────────────────────────

@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    payload = decode_token(body.refresh_token)
    if not payload.get("sub") or payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    if await TokenRevocation.is_revoked(body.refresh_token) or await TokenRevocation.is_user_revoked(
        payload["sub"], payload.get("iat")
    ):
        raise HTTPException(status_code=401, detail="Refresh token has been revoked")

    result = await db.execute(select(User).where(User.id == payload["sub"]))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    # Rotate: the presented refresh token is single-use
    await TokenRevocation.revoke_token(body.refresh_token, payload.get("exp", 0))
    return _build_token_response(user)


# ── POST /logout ─────────────────────────────────────────────

@router.post("/logout", response_model=SuccessResponse)
async def logout(user: User = Depends(get_current_user)):
    payload: dict = getattr(user, "_token_payload", {})
    revoked = await TokenRevocation.revoke_token(user._token, payload.get("exp", 0))  # type: ignore[attr-defined]
    if not revoked:
        return SuccessResponse(message="Token revocation unavailable; token stays valid until expiry")
    return SuccessResponse(message="Logged out")


# ── GET /me ──────────────────────────────────────────────────

@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    return user
