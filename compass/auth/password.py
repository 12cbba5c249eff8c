"""Password hashing and credential validation."""
import re

import bcrypt

MIN_PASSWORD_LENGTH = 6
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,50}$")


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password as string
    """
    salt = bcrypt.gensalt(rounds=10)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches the stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def normalize_username(username: str) -> str:
    return username.strip()


def validate_credentials(username: str, password: str) -> tuple[bool, str | None]:
    """
    Validate a username/password pair submitted for registration.

    Requirements:
    - Username of 3 to 50 characters: letters, digits, '_', '.', '-'
    - Password of at least 6 characters, not only whitespace

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not USERNAME_PATTERN.match(normalize_username(username)):
        return False, "Username must be 3-50 characters of letters, digits, '_', '.' or '-'"

    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"

    if not password.strip():
        return False, "Password cannot be blank"

    return True, None
