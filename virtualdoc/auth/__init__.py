"""
Authentication module for VirtualDoc.

Provides bcrypt password hashing, JWT bearer tokens and the account store.
"""

from .jwt_handler import JWTHandler, TokenPayload
from .password import PasswordHandler, normalize_email
from .users import (
    Account,
    AccountStore,
    AccountStoreError,
    DuplicateAccountError,
    PROFILE_FIELDS,
)

__all__ = [
    "JWTHandler",
    "TokenPayload",
    "PasswordHandler",
    "normalize_email",
    "Account",
    "AccountStore",
    "AccountStoreError",
    "DuplicateAccountError",
    "PROFILE_FIELDS",
]
