"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_user  → decode JWT, check revocation, load user from DB
  require_role(...) → restrict to specific roles
  require_admin     → shorthand for require_role(UserRole.ADMIN)
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import decode_token
from app.auth.revocation import TokenRevocation
from app.database import get_db
from app.models.user import User, UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# ── Core user dependency ────────────────────────────────────

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode the JWT, load the user, and return it.

    Also stashes the decoded payload and raw token on the user object as
    `_token_payload` / `_token` so logout can revoke the exact token.
    """
    payload = decode_token(token)
    user_id: str | None = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if await TokenRevocation.is_revoked(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # All tokens issued before a password change
    if await TokenRevocation.is_user_revoked(user_id, payload.get("iat")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    user._token_payload = payload  # type: ignore[attr-defined]
    user._token = token  # type: ignore[attr-defined]
    return user


# ── Role-based access control ───────────────────────────────

def require_role(*roles: UserRole):
    """Dependency factory: restrict to one or more roles.

    Usage:
        @router.get("/admin-only")
        async def admin_view(user: User = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(r.value for r in roles)}",
            )
        return user

    return _check


require_admin = require_role(UserRole.ADMIN)


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN
