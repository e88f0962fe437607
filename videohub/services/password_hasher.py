"""Password hashing with bcrypt."""

import bcrypt

DEFAULT_ROUNDS = 10

# bcrypt only considers the first 72 bytes; longer inputs are rejected by recent releases
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password using bcrypt with a fresh random salt.

    Args:
        password: Plain-text password to hash
        rounds: bcrypt cost factor

    Returns:
        Bcrypt hash string; hashing the same password twice gives different strings
    """
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        password: Plain-text password to check
        password_hash: Stored bcrypt hash to verify against

    Returns:
        True if the password matches; False on mismatch or an unusable hash
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # Stored value is not a bcrypt hash ("Invalid salt")
        return False
