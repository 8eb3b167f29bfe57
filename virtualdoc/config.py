"""Configuration module for the VirtualDoc backend."""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_USERS_FILE = Path(__file__).parent.parent / "data" / "users.json"

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:3000",
    "http://localhost:3001",
]


def _cors_origins_from_env() -> List[str]:
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",")]
    origins = [o for o in origins if o]
    return origins or list(DEFAULT_CORS_ORIGINS)


@dataclass
class AuthConfig:
    """Credential and token settings."""
    jwt_secret: Optional[str] = field(default_factory=lambda: os.getenv("JWT_SECRET"))
    jwt_expire_seconds: int = field(default_factory=lambda: int(os.getenv("JWT_EXPIRE_SECONDS", str(86400 * 7))))
    bcrypt_rounds: int = field(default_factory=lambda: int(os.getenv("BCRYPT_ROUNDS", "12")))
    min_password_length: int = 6


@dataclass
class ChatConfig:
    """Stream Chat credentials (optional)."""
    api_key: str = field(default_factory=lambda: os.getenv("STREAM_CHAT_API_KEY", ""))
    api_secret: str = field(default_factory=lambda: os.getenv("STREAM_CHAT_API_SECRET", ""))
    doctor_id: str = "dr-sarah-johnson"
    doctor_name: str = "Dr. Sarah Johnson"

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.api_secret)


@dataclass
class Config:
    """Main configuration container."""
    auth: AuthConfig = field(default_factory=AuthConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)

    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development").lower())
    users_file: Path = field(default_factory=lambda: Path(os.getenv("USERS_FILE", str(DEFAULT_USERS_FILE))))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5001")))

    # Comma separated, e.g. "https://app.example.com, https://www.example.com"
    cors_origins: List[str] = field(default_factory=_cors_origins_from_env)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def validate(self):
        """
        Check required settings.

        A missing JWT secret is tolerated outside production (the JWT handler
        falls back to a development key), but is fatal in production.
        """
        if not self.auth.jwt_secret:
            if self.is_production:
                raise RuntimeError("Missing required environment variable: JWT_SECRET")
            logger.warning("JWT_SECRET is not set")

        if not self.chat.enabled:
            logger.warning("StreamChat not configured - chat features will be disabled")


def load_config() -> Config:
    """Load configuration from environment variables."""
    return Config()
