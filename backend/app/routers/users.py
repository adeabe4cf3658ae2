"""User management.

Admins manage every account; a customer may read and update only their
own profile (name, email, password) and cannot change roles. Changing
your own password as a customer needs ``currentPassword``.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, is_admin, require_admin
from app.auth.password import hash_password, verify_password
from app.auth.revocation import TokenRevocation
from app.database import get_db
from app.middleware.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from app.models.registration import Registration
from app.models.user import User
from app.routers.auth import email_taken, normalize_email
from app.schemas.common import SuccessResponse
from app.schemas.auth import UserOut
from app.schemas.user import UserCreate, UserCreatedResponse, UserDetail, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

async def _get_user(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User", user_id)
    return user


def _check_self_or_admin(current: User, user_id: str) -> None:
    if not is_admin(current) and current.id != user_id:
        raise PermissionDeniedError("You can only access your own account")


# ── Routes ───────────────────────────────────────────────────

@router.get("", response_model=list[UserDetail])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return result.scalars().all()


@router.post("", response_model=UserCreatedResponse)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    email = normalize_email(body.email)
    if await email_taken(db, email):
        raise ConflictError("A user with this email already exists")

    user = User(
        name=body.name.strip(),
        email=email,
        hashed_password=hash_password(body.password),
        role=body.role,
    )
    if body.id:
        user.id = body.id
    db.add(user)
    await db.flush()

    logger.info("Admin %s created user %s", _admin.id, user.id)
    return UserCreatedResponse(user=UserOut.model_validate(user))


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current: User = Depends(get_current_user),
):
    _check_self_or_admin(current, user_id)
    return await _get_user(db, user_id)


@router.put("/{user_id}", response_model=SuccessResponse)
async def update_user(
    user_id: str,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current: User = Depends(get_current_user),
):
    _check_self_or_admin(current, user_id)
    user = await _get_user(db, user_id)

    if body.role != user.role and not is_admin(current):
        raise PermissionDeniedError("Only admins can change roles")

    email = normalize_email(body.email)
    if email != user.email and await email_taken(db, email, exclude_id=user.id):
        raise ConflictError("A user with this email already exists")

    if body.password and not is_admin(current) and not verify_password(
        body.current_password or "", user.hashed_password
    ):
        raise ValidationError("Current password is incorrect", error_code="INVALID_CURRENT_PASSWORD")

    user.name = body.name.strip()
    user.email = email
    user.role = body.role
    password_changed = bool(body.password)
    if password_changed:
        user.hashed_password = hash_password(body.password)
    await db.flush()

    if password_changed:
        # Existing sessions end; the client logs in again with the new password
        await TokenRevocation.revoke_all_user_tokens(user.id)
    return SuccessResponse(message="User updated")


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if user_id == admin.id:
        raise ConflictError("You cannot delete your own account")
    user = await _get_user(db, user_id)

    # Keep registrations; they lose their owner link
    owned = await db.execute(select(Registration).where(Registration.user_id == user.id))
    for registration in owned.scalars().all():
        registration.user_id = None
    await db.delete(user)
    await db.flush()

    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return SuccessResponse(message="User deleted")
