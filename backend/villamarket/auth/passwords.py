"""Password hashing with bcrypt (used directly, without passlib)."""

import bcrypt

# bcrypt only looks at the first 72 bytes of the secret.
_BCRYPT_MAX_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash suitable for ``User.hashed_password``."""
    return bcrypt.hashpw(_secret(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a login attempt against a stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_secret(password), hashed.encode("utf-8"))
    except ValueError:
        return False
