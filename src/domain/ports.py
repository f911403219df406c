"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import Account, HashedCredential, NewAccount


class ConflictSubject(str, Enum):
    """Which identity key(s) collided with an already-registered account."""

    EMAIL = "email"
    USERNAME = "username"
    BOTH = "both"


class RegistrationStatus(str, Enum):
    """
    Final outcome of a registration attempt.

    - CREATED: a new account row was written
    - RECONCILED: an existing email-matched account had its confirmation
      flags set instead of a second account being created
    - FAILED: the attempt ended in one of the domain errors
    """

    CREATED = "created"
    RECONCILED = "reconciled"
    FAILED = "failed"


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def find_by_identity(self, username: str, email: str) -> list["Account"]:
        """
        Find every account sharing the username or the email.

        Email comparison is case-insensitive; username comparison is exact.

        Args:
            username: Requested username
            email: Requested email (any casing)

        Returns:
            Matching accounts, empty if the identity is unseen
        """
        ...

    def create_account(self, account: "NewAccount") -> "Account":
        """
        Insert a new account.

        The store enforces uniqueness of username and lower(email)
        atomically; a violation detected at write time is reported as
        ConflictError, any other write failure as PersistenceError.

        Args:
            account: Validated account payload with hashed credential

        Returns:
            The stored account including its assigned identifier

        Raises:
            ConflictError: username and/or email taken by a concurrent write
            PersistenceError: store unavailable or write failed
        """
        ...

    def confirm_account(self, account_id: int) -> "Account":
        """
        Set both email_confirmed and identity_confirmed to true.

        No other column is modified.

        Args:
            account_id: Identifier of the account to confirm

        Returns:
            The updated account

        Raises:
            PersistenceError: account vanished or store failure
        """
        ...


class CredentialHasher(Protocol):
    """Port interface for one-way password hashing."""

    def hash_password(self, password: str) -> "HashedCredential":
        """Derive a fresh salt and the salted hash of a plaintext password."""
        ...

    def verify(self, password: str, salt: str, password_hash: str) -> bool:
        """Re-derive the hash with the stored salt and compare it."""
        ...
