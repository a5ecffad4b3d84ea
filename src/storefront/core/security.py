"""Password hashing helpers."""

import bcrypt

from src.storefront.core.errors import ValidationError

# bcrypt only reads this many bytes of input.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash ``password`` with a fresh bcrypt salt.

    Raises:
        ValidationError: If the UTF-8 encoded password is longer than bcrypt accepts
    """
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check ``password`` against a stored bcrypt hash."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash or over-long password
        return False
