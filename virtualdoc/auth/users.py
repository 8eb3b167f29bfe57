"""
Account storage and management.

Stores accounts in a JSON file keyed by normalized email, which doubles as
the unique email index. All read-modify-write cycles run under one lock, so
the uniqueness check in ``create_account`` is atomic with the insert.
"""

import json
import logging
import os
import threading
import uuid
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, asdict, field

from ..config import DEFAULT_USERS_FILE
from .password import PasswordHandler, normalize_email

logger = logging.getLogger(__name__)

# Optional profile / medical keys, stored as-is (camelCase, as sent by clients)
PROFILE_FIELDS = frozenset({
    "phone",
    "dateOfBirth",
    "gender",
    "bloodType",
    "height",
    "weight",
    "address",
    "emergencyContact",
    "medicalHistory",
    "insurance",
    "familyHistory",
    "smokingStatus",
    "alcoholConsumption",
    "exerciseFrequency",
    "dietaryRestrictions",
    "notes",
    "preferredLanguage",
})

DEFAULT_LANGUAGE = "en"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AccountStoreError(Exception):
    """Raised when the backing file cannot be read or written."""


class DuplicateAccountError(AccountStoreError):
    """Raised when an account with the same normalized email exists."""


@dataclass
class Account:
    """Account data model."""
    account_id: str
    email: str  # Normalized email (unique key)
    password_hash: str
    first_name: str
    last_name: str
    profile: Dict[str, Any] = field(default_factory=lambda: {"preferredLanguage": DEFAULT_LANGUAGE})
    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Account":
        return cls(
            account_id=data["account_id"],
            email=data["email"],
            password_hash=data["password_hash"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            profile=data.get("profile") or {"preferredLanguage": DEFAULT_LANGUAGE},
            created_at=data.get("created_at", _now()),
            updated_at=data.get("updated_at", _now())
        )

    @property
    def preferred_language(self) -> str:
        return self.profile.get("preferredLanguage") or DEFAULT_LANGUAGE

    def to_public_dict(self) -> dict:
        """Full profile as returned to clients. Never includes the password hash."""
        data = {
            "id": self.account_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
        }
        data.update(self.profile)
        data["preferredLanguage"] = self.preferred_language
        data["createdAt"] = self.created_at
        data["updatedAt"] = self.updated_at
        return data

    def to_summary_dict(self) -> dict:
        """Short account view returned by sign up / sign in."""
        return {
            "id": self.account_id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.profile.get("phone"),
            "preferredLanguage": self.preferred_language,
        }


class AccountStore:
    """
    JSON-based account storage.

    Accounts are indexed by normalized email (primary key). This class is
    the only place a password hash is written.
    """

    def __init__(
        self,
        file_path: Optional[Path] = None,
        password_handler: Optional[PasswordHandler] = None
    ):
        """
        Initialize account store.

        Args:
            file_path: Path to accounts JSON file (default: data/users.json)
            password_handler: Hasher used for new passwords (default: bcrypt, 12 rounds)
        """
        self.file_path = Path(file_path) if file_path else DEFAULT_USERS_FILE
        self.password_handler = password_handler or PasswordHandler()
        self._lock = threading.RLock()
        self._dummy_hash: Optional[str] = None
        self._ensure_file()

    def _ensure_file(self):
        """Ensure the storage file and directory exist."""
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self._save_all({})

    def _load_all(self) -> dict[str, dict]:
        """Load all accounts from file."""
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            raise AccountStoreError(f"Account file {self.file_path} is corrupt") from e

        if not isinstance(data, dict):
            raise AccountStoreError(f"Account file {self.file_path} does not hold an object")
        return data

    def _save_all(self, accounts: dict[str, dict]):
        """Save all accounts to file (write to a temp file, then replace)."""
        tmp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(accounts, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.file_path)

    def create_account(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        profile: Optional[Dict[str, Any]] = None
    ) -> Account:
        """
        Create a new account.

        Args:
            email: Email address (will be normalized)
            password: Plain text password (hashed before storage)
            first_name: Given name
            last_name: Family name
            profile: Optional profile fields (unknown keys are dropped)

        Returns:
            Created Account object

        Raises:
            ValueError: If email or password is missing
            DuplicateAccountError: If the normalized email is already taken
        """
        normalized = normalize_email(email)
        if not normalized:
            raise ValueError("Email is required")

        password_hash = self.password_handler.hash(password)

        account_profile = {"preferredLanguage": DEFAULT_LANGUAGE}
        account_profile.update({k: v for k, v in (profile or {}).items() if k in PROFILE_FIELDS})

        account = Account(
            account_id=str(uuid.uuid4()),
            email=normalized,
            password_hash=password_hash,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            profile=account_profile
        )

        with self._lock:
            accounts = self._load_all()
            if normalized in accounts:
                raise DuplicateAccountError(f"Account with email {normalized} already exists")

            accounts[normalized] = account.to_dict()
            self._save_all(accounts)

        logger.info(f"Created account {account.account_id}")
        return account

    def get_by_email(self, email: str) -> Optional[Account]:
        """
        Get account by email.

        Args:
            email: Email address (will be normalized)

        Returns:
            Account if found, None otherwise
        """
        normalized = normalize_email(email)
        if not normalized:
            return None

        with self._lock:
            data = self._load_all().get(normalized)

        if data:
            return Account.from_dict(data)
        return None

    def get_by_id(self, account_id: str) -> Optional[Account]:
        """
        Get account by account ID.

        Args:
            account_id: Account's unique ID

        Returns:
            Account if found, None otherwise
        """
        with self._lock:
            accounts = self._load_all()
        for data in accounts.values():
            if data.get("account_id") == account_id:
                return Account.from_dict(data)
        return None

    def update_profile(
        self,
        account_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_updates: Optional[Dict[str, Any]] = None
    ) -> Optional[Account]:
        """
        Update the non-credential fields of an account.

        Profile keys replace stored values one by one; nested groups
        (address, insurance, ...) are replaced whole.

        Args:
            account_id: Account's unique ID
            first_name: New given name (None keeps the current one)
            last_name: New family name (None keeps the current one)
            profile_updates: Profile keys to set (unknown keys are dropped)

        Returns:
            Updated Account, or None if the account doesn't exist
        """
        with self._lock:
            accounts = self._load_all()
            key = next(
                (k for k, data in accounts.items() if data.get("account_id") == account_id),
                None
            )
            if key is None:
                return None

            account = Account.from_dict(accounts[key])
            if first_name is not None:
                account.first_name = first_name.strip()
            if last_name is not None:
                account.last_name = last_name.strip()
            for name, value in (profile_updates or {}).items():
                if name in PROFILE_FIELDS:
                    account.profile[name] = value

            account.updated_at = _now()
            accounts[key] = account.to_dict()
            self._save_all(accounts)

        logger.debug(f"Updated account {account_id}")
        return account

    def verify_password(self, email: str, password: str) -> Optional[Account]:
        """
        Verify an account's password.

        Unknown emails still pay for one bcrypt check, so the time taken
        does not tell whether the email is registered.

        Args:
            email: Email address
            password: Password to verify

        Returns:
            Account if password is valid, None otherwise
        """
        account = self.get_by_email(email)
        if not account:
            self.password_handler.verify(password, self._get_dummy_hash())
            return None

        if self.password_handler.verify(password, account.password_hash):
            return account
        return None

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.password_handler.hash(uuid.uuid4().hex)
        return self._dummy_hash

    def delete_account(self, account_id: str) -> bool:
        """
        Delete an account.

        Args:
            account_id: Account's unique ID

        Returns:
            True if deleted, False if not found
        """
        with self._lock:
            accounts = self._load_all()
            key = next(
                (k for k, data in accounts.items() if data.get("account_id") == account_id),
                None
            )
            if key is None:
                return False

            del accounts[key]
            self._save_all(accounts)

        logger.info(f"Deleted account {account_id}")
        return True

    def list_accounts(self) -> List[Account]:
        """List all accounts."""
        with self._lock:
            accounts = self._load_all()
        return [Account.from_dict(data) for data in accounts.values()]

    def account_exists(self, email: str) -> bool:
        """
        Check if an account exists.

        Args:
            email: Email address to check

        Returns:
            True if account exists
        """
        return self.get_by_email(email) is not None

    def status(self) -> str:
        """Return "connected" when the backing file is readable, "disconnected" otherwise."""
        try:
            with self._lock:
                self._load_all()
        except (OSError, AccountStoreError) as e:
            logger.warning(f"Account store unavailable: {e}")
            return "disconnected"
        return "connected" if self.file_path.exists() else "disconnected"
