"""
Account service.

Sign up, sign in and profile management on top of the account store and the
JWT handler. This is the only component that talks to both.
"""

import functools
import logging
from typing import Any, Dict, Mapping, Optional, Tuple
from dataclasses import dataclass

from ..auth import Account, AccountStore, AccountStoreError, DuplicateAccountError, JWTHandler, normalize_email
from ..auth.password import BCRYPT_MAX_BYTES
from ..errors import AuthError, ConflictError, InternalError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid email or password"

# Keys a profile update may never change
PROTECTED_KEYS = frozenset({"password", "email", "id", "_id", "passwordHash", "createdAt", "updatedAt"})

# Flat medical form field -> (nested group or None, stored key)
MEDICAL_FIELD_MAP = {
    "dateOfBirth": (None, "dateOfBirth"),
    "gender": (None, "gender"),
    "bloodType": (None, "bloodType"),
    "height": (None, "height"),
    "weight": (None, "weight"),
    "allergies": ("medicalHistory", "allergies"),
    "currentMedications": ("medicalHistory", "medications"),
    "medicalConditions": ("medicalHistory", "conditions"),
    "surgeries": ("medicalHistory", "surgeries"),
    "insuranceProvider": ("insurance", "provider"),
    "insurancePolicyNumber": ("insurance", "policyNumber"),
    "emergencyContactName": ("emergencyContact", "name"),
    "emergencyContactPhone": ("emergencyContact", "phone"),
    "emergencyContactRelation": ("emergencyContact", "relationship"),
    "familyHistory": (None, "familyHistory"),
    "smokingStatus": (None, "smokingStatus"),
    "alcoholConsumption": (None, "alcoholConsumption"),
    "exerciseFrequency": (None, "exerciseFrequency"),
    "dietaryRestrictions": (None, "dietaryRestrictions"),
    "notes": (None, "notes"),
}


@dataclass
class AuthResult:
    """Account plus the bearer token issued for it."""
    account: Account
    token: str

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "user": self.account.to_summary_dict()
        }


def _text(fields: Mapping[str, Any], key: str) -> Optional[str]:
    value = fields.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def _store_failures_are_internal(func):
    """Re-raise account store failures as InternalError (HTTP 500)."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AccountStoreError as e:
            logger.error(f"Account store failure in {func.__name__}: {e}")
            raise InternalError("Internal server error") from e
    return wrapper


class AccountService:
    """
    Service for account authentication and profile management.

    Handles:
    - Sign up (validation + uniqueness + hash + persist + token)
    - Sign in (lookup + verify + token)
    - Profile read / partial update
    - Medical form update
    """

    def __init__(
        self,
        jwt_handler: JWTHandler,
        account_store: AccountStore,
        min_password_length: int = MIN_PASSWORD_LENGTH
    ):
        """
        Initialize account service.

        Args:
            jwt_handler: Token issuer / verifier
            account_store: Credential store
            min_password_length: Shortest accepted password
        """
        self.jwt = jwt_handler
        self.accounts = account_store
        self.min_password_length = min_password_length

    @_store_failures_are_internal
    def sign_up(self, fields: Mapping[str, Any]) -> AuthResult:
        """
        Register a new account.

        Args:
            fields: firstName, lastName, email, password, confirmPassword

        Returns:
            AuthResult with the new account and its token

        Raises:
            ValidationError: Missing fields, mismatched or bad password
            ConflictError: Email already registered
        """
        first_name = _text(fields, "firstName")
        last_name = _text(fields, "lastName")
        email = _text(fields, "email")
        password = _text(fields, "password")
        confirm_password = _text(fields, "confirmPassword")

        if not all(value and value.strip() for value in (first_name, last_name, email)) or not password:
            raise ValidationError("All required fields must be provided")

        if password != confirm_password:
            raise ValidationError("Passwords do not match")

        if len(password) < self.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.min_password_length} characters long"
            )

        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"Password cannot be longer than {BCRYPT_MAX_BYTES} bytes")

        normalized = normalize_email(email)

        # Fast path only; the store's locked insert is what guarantees uniqueness
        if self.accounts.account_exists(normalized):
            raise ConflictError("User with this email already exists")

        try:
            account = self.accounts.create_account(
                email=normalized,
                password=password,
                first_name=first_name,
                last_name=last_name
            )
        except DuplicateAccountError:
            logger.info("Concurrent sign up lost the race for the same email")
            raise ConflictError("User with this email already exists") from None

        token = self.jwt.create_access_token(account.account_id, account.email)

        logger.info(f"Account registered: {account.account_id}")
        return AuthResult(account=account, token=token)

    @_store_failures_are_internal
    def sign_in(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        """
        Sign in with email and password.

        Args:
            email: Email address (normalized before lookup)
            password: Password

        Returns:
            AuthResult with a freshly issued token

        Raises:
            ValidationError: Email or password missing
            AuthError: Unknown email or wrong password (same message)
        """
        if not email or not isinstance(email, str) or not password or not isinstance(password, str):
            raise ValidationError("Email and password are required")

        account = self.accounts.verify_password(email, password)
        if account is None:
            raise AuthError(INVALID_CREDENTIALS)

        token = self.jwt.create_access_token(account.account_id, account.email)

        logger.info(f"Account signed in: {account.account_id}")
        return AuthResult(account=account, token=token)

    @_store_failures_are_internal
    def get_profile(self, account_id: str) -> Account:
        """
        Get an account by ID.

        Raises:
            NotFoundError: Account no longer exists
        """
        account = self.accounts.get_by_id(account_id)
        if account is None:
            raise NotFoundError("User not found")
        return account

    @_store_failures_are_internal
    def update_profile(self, account_id: str, patch: Mapping[str, Any]) -> Account:
        """
        Apply a partial update to the non-credential fields of an account.

        ``password`` and ``email`` (and other immutable keys) are dropped
        without error, so this route cannot change credentials.

        Args:
            account_id: Authenticated account ID
            patch: Arbitrary update object (camelCase keys)

        Returns:
            Updated account

        Raises:
            ValidationError: firstName / lastName set blank
            NotFoundError: Account no longer exists
        """
        updates = {k: v for k, v in dict(patch or {}).items() if k not in PROTECTED_KEYS}

        first_name = updates.pop("firstName", None)
        last_name = updates.pop("lastName", None)
        for label, value in (("firstName", first_name), ("lastName", last_name)):
            if value is not None and (not isinstance(value, str) or not value.strip()):
                raise ValidationError(f"{label} cannot be empty")

        account = self.accounts.update_profile(
            account_id,
            first_name=first_name,
            last_name=last_name,
            profile_updates=updates
        )
        if account is None:
            raise NotFoundError("User not found")

        logger.info(f"Profile updated: {account_id}")
        return account

    @_store_failures_are_internal
    def update_medical_info(self, account_id: str, form: Mapping[str, Any]) -> Account:
        """
        Map a flat medical form onto the nested profile structure and save it.

        Empty values are skipped. Each nested group present in the form
        replaces the stored group.

        Raises:
            NotFoundError: Account no longer exists
        """
        updates: Dict[str, Any] = {}
        for form_key, (group, key) in MEDICAL_FIELD_MAP.items():
            value = (form or {}).get(form_key)
            if not value:
                continue
            if group is None:
                updates[key] = value
            else:
                updates.setdefault(group, {})[key] = value

        account = self.accounts.update_profile(account_id, profile_updates=updates)
        if account is None:
            raise NotFoundError("User not found")

        logger.info(f"Medical info updated: {account_id} ({len(updates)} fields)")
        return account

    def authenticate(self, token: str) -> Optional[Tuple[str, str]]:
        """
        Verify a bearer token.

        Returns:
            (account_id, email) if valid, None otherwise
        """
        payload = self.jwt.verify_token(token)
        if payload is None:
            return None
        return payload.user_id, payload.email
