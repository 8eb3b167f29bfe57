"""
Password handling utilities.

Uses bcrypt for salted, adaptive password hashing.
"""

import logging
from typing import Optional

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt work factor (higher = more secure but slower)
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of input
BCRYPT_MAX_BYTES = 72


class PasswordHandler:
    """
    Handles password hashing and verification using bcrypt.

    Usage:
        handler = PasswordHandler()
        hashed = handler.hash("my_password")
        is_valid = handler.verify("my_password", hashed)
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        """
        Initialize password handler.

        Args:
            rounds: bcrypt work factor (default: 12)
        """
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        A fresh salt is generated on every call, so hashing the same password
        twice gives two different digests.

        Args:
            password: Plain text password

        Returns:
            Hashed password string (includes salt and cost)

        Raises:
            ValueError: If the password is empty or longer than 72 bytes
        """
        if not password:
            raise ValueError("Password cannot be empty")

        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password cannot be longer than {BCRYPT_MAX_BYTES} bytes")

        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(encoded, salt)

        return hashed.decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """
        Verify a password against a hash.

        Never raises: malformed hashes and library errors count as a mismatch.

        Args:
            password: Plain text password to verify
            hashed: Previously hashed password

        Returns:
            True if password matches, False otherwise
        """
        if not password or not hashed:
            return False

        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                hashed.encode("utf-8")
            )
        except (ValueError, TypeError) as e:
            logger.warning(f"Password verification error: {e}")
            return False


def normalize_email(email: str) -> Optional[str]:
    """
    Normalize an email address for lookup and uniqueness checks.

    Trims surrounding whitespace and lowercases the whole address.

    Args:
        email: Email address as entered

    Returns:
        Normalized email or None if empty

    Examples:
        normalize_email("  A@x.com ") -> "a@x.com"
    """
    if not email:
        return None

    normalized = email.strip().lower()
    return normalized or None
