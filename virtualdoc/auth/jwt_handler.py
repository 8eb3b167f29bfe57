"""
JWT token handler.

Generates and validates the bearer tokens handed out at sign up / sign in.
Tokens are self-contained (HS256, signed with the process-wide secret) and
are not stored server side, so they stay valid until they expire.
"""

import time
import uuid
import logging
from typing import Optional
from dataclasses import dataclass, asdict, field

from jose import jwt, JWTError

logger = logging.getLogger(__name__)

# Token configuration
DEFAULT_SECRET_KEY = "virtualdoc-secret-key-change-in-production"
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_SECONDS = 86400 * 7  # 7 days


@dataclass
class TokenPayload:
    """JWT token payload."""
    user_id: str
    email: str
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    jti: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TokenPayload":
        return cls(
            user_id=data["user_id"],
            email=data["email"],
            exp=int(data["exp"]),
            iat=int(data["iat"]),
            jti=data.get("jti", ""),
        )


class JWTHandler:
    """
    Handles JWT token generation and validation.

    The secret is read once at construction and never logged.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        expires_in: int = ACCESS_TOKEN_EXPIRE_SECONDS
    ):
        """
        Initialize JWT handler.

        Args:
            secret_key: Secret key for signing tokens.
                       Falls back to a development default when missing.
            expires_in: Token lifetime in seconds (default: 7 days)
        """
        self._secret_key = secret_key or DEFAULT_SECRET_KEY
        self.expires_in = expires_in

        if self._secret_key == DEFAULT_SECRET_KEY:
            logger.warning(
                "Using default JWT secret key. "
                "Set JWT_SECRET environment variable in production!"
            )

    def create_access_token(
        self,
        user_id: str,
        email: str,
        expires_in: Optional[int] = None,
        issued_at: Optional[int] = None
    ) -> str:
        """
        Create an access token.

        Args:
            user_id: Account identifier
            email: Account email
            expires_in: Custom lifetime in seconds (default: handler TTL)
            issued_at: Issue timestamp (default: now)

        Returns:
            Encoded JWT token string
        """
        now = int(time.time()) if issued_at is None else int(issued_at)
        ttl = self.expires_in if expires_in is None else expires_in
        exp = now + ttl

        payload = TokenPayload(
            user_id=user_id,
            email=email,
            exp=exp,
            iat=now,
        )

        token = jwt.encode(payload.to_dict(), self._secret_key, algorithm=ALGORITHM)
        logger.debug(f"Created access token for user {user_id}, expires in {ttl}s")
        return token

    def verify_token(self, token: str) -> Optional[TokenPayload]:
        """
        Verify and decode a token.

        Bad signatures, corrupt tokens, missing claims and expired tokens all
        give the same result.

        Args:
            token: JWT token string

        Returns:
            TokenPayload if valid, None if invalid or expired
        """
        if not token:
            return None

        try:
            data = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM])
            payload = TokenPayload.from_dict(data)
        except JWTError as e:
            logger.debug(f"Token verification failed: {e}")
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Token payload malformed: {e}")
            return None

        # Check expiration
        if payload.exp < int(time.time()):
            logger.debug("Token expired")
            return None

        return payload
