"""First-run admin seeding.

When ADMIN_EMAIL and ADMIN_PASSWORD are set and no admin account exists
yet, one is created at startup. An existing admin is never modified.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.password import hash_password
from app.models.user import User, UserRole

logger = logging.getLogger("incorpdesk.seeding")


async def ensure_admin(
    db: AsyncSession,
    email: str,
    password: str,
    name: str = "Administrator",
) -> User | None:
    """Create the first admin; return it, or None if nothing was created."""
    if not email or not password:
        return None

    result = await db.execute(select(User).where(User.role == UserRole.ADMIN).limit(1))
    if result.scalar_one_or_none() is not None:
        return None

    email = email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is not None:
        # Promote the existing account rather than fail on the unique email
        user.role = UserRole.ADMIN
        logger.info("Promoted existing user %s to admin", user.id)
    else:
        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(password),
            role=UserRole.ADMIN,
        )
        db.add(user)
        logger.info("Seeded admin account %s", email)
    await db.flush()
    return user
