"""
Domain layer - Pure business logic with zero framework imports.

This package contains the registration decision logic: upload filtering,
field validation, duplicate resolution, confirmation reconciliation and
credential hashing. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .credentials import BcryptCredentialHasher
from .duplicates import Match, NoMatch, resolve_duplicates
from .exceptions import (
    ConflictError,
    InternalError,
    PersistenceError,
    RegistrationError,
    UnsupportedMediaError,
    ValidationError,
)
from .models import Account, HashedCredential, NewAccount, RegistrationRequest, UploadedDocument
from .ports import AccountRepository, ConflictSubject, CredentialHasher, RegistrationStatus
from .registration import register
from .state_machine import RegistrationResult, RegistrationState, transition

__all__ = [
    "Account",
    "AccountRepository",
    "BcryptCredentialHasher",
    "ConflictError",
    "ConflictSubject",
    "CredentialHasher",
    "HashedCredential",
    "InternalError",
    "Match",
    "NewAccount",
    "NoMatch",
    "PersistenceError",
    "RegistrationError",
    "RegistrationRequest",
    "RegistrationResult",
    "RegistrationState",
    "RegistrationStatus",
    "UnsupportedMediaError",
    "UploadedDocument",
    "ValidationError",
    "register",
    "resolve_duplicates",
    "transition",
]
