"""JWT token revocation using a Redis blacklist.

Allows revoking tokens on logout or password change. Tokens are
blacklisted until their natural expiry. Without ``REDIS_URL`` there is
nowhere to keep the blacklist, so revocation is a no-op and tokens stay
valid until they expire (development mode).
"""

import logging
import time

from app.utils.cache import get_redis

logger = logging.getLogger(__name__)


class TokenRevocation:
    """Manage JWT token revocation with Redis."""

    @staticmethod
    async def revoke_token(token: str, expires_at: float) -> bool:
        """Add token to revocation list.

        Args:
            token: JWT token to revoke
            expires_at: Unix timestamp when token naturally expires

        Returns:
            True if revoked (or already expired), False if not stored
        """
        redis_client = await get_redis()
        if redis_client is None:
            return False

        # No need to store after natural expiry
        ttl = int(expires_at - time.time())
        if ttl <= 0:
            return True

        try:
            await redis_client.setex(f"revoked:{token}", ttl, str(int(time.time())))
            return True
        except Exception as e:
            logger.error(f"Failed to revoke token: {e}")
            return False

    @staticmethod
    async def is_revoked(token: str) -> bool:
        """Check if token is revoked."""
        redis_client = await get_redis()
        if redis_client is None:
            return False

        try:
            exists = await redis_client.exists(f"revoked:{token}")
            return exists > 0
        except Exception as e:
            logger.error(f"Failed to check token revocation: {e}")
            # Fail closed
            return True

    @staticmethod
    async def revoke_all_user_tokens(user_id: str, duration: int = 86400) -> bool:
        """Reject every token issued to a user before now.

        Used on password change. Tokens issued after the revocation
        timestamp stay valid, so the user can log in again immediately.
        """
        redis_client = await get_redis()
        if redis_client is None:
            return False

        try:
            await redis_client.setex(
                f"revoked:user:{user_id}",
                duration,
                str(int(time.time())),
            )
            return True
        except Exception as e:
            logger.error(f"Failed to revoke user tokens: {e}")
            return False

    @staticmethod
    async def is_user_revoked(user_id: str, issued_at: float | None = None) -> bool:
        """Check whether a token issued at ``issued_at`` predates a user-wide revocation."""
        redis_client = await get_redis()
        if redis_client is None:
            return False

        try:
            revoked_at = await redis_client.get(f"revoked:user:{user_id}")
        except Exception as e:
            logger.error(f"Failed to check user revocation: {e}")
            return True
        if revoked_at is None:
            return False
        if issued_at is None:
            return True
        return int(issued_at) < int(revoked_at)
