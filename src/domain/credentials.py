"""
Credential hasher - bcrypt salted password hashing.

The salt is generated per call and stored alongside the hash. Verification
re-derives the hash from the stored salt and compares in constant time.
"""

import secrets
from dataclasses import dataclass

import bcrypt

from .exceptions import ValidationError
from .models import HashedCredential

MIN_ROUNDS = 10

# bcrypt only consumes the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class BcryptCredentialHasher:
    """
    Implements CredentialHasher protocol via bcrypt.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    rounds: int = MIN_ROUNDS

    def __post_init__(self) -> None:
        if self.rounds < MIN_ROUNDS:
            raise ValueError(f"bcrypt rounds must be >= {MIN_ROUNDS}, got {self.rounds}")

    def hash_password(self, password: str) -> HashedCredential:
        """
        Hash password using bcrypt with a fresh salt.

        Args:
            password: Plaintext password

        Returns:
            HashedCredential pairing the salt and the salted hash

        Raises:
            ValidationError: If the password exceeds bcrypt's input limit
        """
        encoded = password.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError("Password too long")

        salt = bcrypt.gensalt(rounds=self.rounds)
        password_hash = bcrypt.hashpw(encoded, salt)
        return HashedCredential(salt=salt.decode(), password_hash=password_hash.decode())

    def verify(self, password: str, salt: str, password_hash: str) -> bool:
        """Re-derive the hash with the stored salt and compare with the stored hash."""
        encoded = password.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        derived = bcrypt.hashpw(encoded, salt.encode())
        return secrets.compare_digest(derived, password_hash.encode())
