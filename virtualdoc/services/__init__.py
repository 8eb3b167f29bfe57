"""
Services layer for VirtualDoc.

Business logic shared by the HTTP API and the admin scripts.
"""

from dataclasses import dataclass

from ..config import Config, load_config
from ..auth import AccountStore, JWTHandler, PasswordHandler
from .account_service import AccountService, AuthResult
from .chat_service import ChatService

__all__ = [
    "AccountService",
    "AuthResult",
    "ChatService",
    "Services",
    "create_services",
]


@dataclass
class Services:
    """Container for all services, built once at startup."""
    config: Config
    jwt: JWTHandler
    accounts: AccountStore
    account_service: AccountService
    chat: ChatService


def create_services(config: Config = None, chat_client=None) -> Services:
    """
    Factory function to create all services with proper dependencies.

    Args:
        config: Optional Config (loads from env if not provided)
        chat_client: Optional pre-built Stream client

    Returns:
        Services container
    """
    cfg = config or load_config()
    cfg.validate()

    jwt = JWTHandler(secret_key=cfg.auth.jwt_secret, expires_in=cfg.auth.jwt_expire_seconds)
    accounts = AccountStore(
        file_path=cfg.users_file,
        password_handler=PasswordHandler(rounds=cfg.auth.bcrypt_rounds)
    )
    account_service = AccountService(
        jwt,
        accounts,
        min_password_length=cfg.auth.min_password_length
    )
    chat = ChatService(cfg.chat, client=chat_client)

    return Services(
        config=cfg,
        jwt=jwt,
        accounts=accounts,
        account_service=account_service,
        chat=chat
    )
