"""Password hashing with passlib's bcrypt scheme."""

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Verified against when the email is unknown so login timing does not
# reveal which accounts exist.
_DUMMY_HASH = pwd_context.hash("incorpdesk-dummy-password")


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    """Constant-time check; a missing hash still costs one bcrypt verify."""
    if not hashed:
        pwd_context.verify(plain, _DUMMY_HASH)
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Stored value is not a recognisable hash
        return False
