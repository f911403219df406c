"""
Domain models - Accounts, credentials and the registration envelope.

Plain dataclasses shared by the domain services and the adapters.
Secret-bearing fields are excluded from ``repr`` so that logging a model
never writes a password, hash, salt or document content.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import BinaryIO


@dataclass(frozen=True)
class HashedCredential:
    """A salted password hash together with the salt that produced it."""

    salt: str = field(repr=False)
    password_hash: str = field(repr=False)


@dataclass(frozen=True)
class NewAccount:
    """Account payload handed to the repository for insertion."""

    username: str
    email: str
    credential: HashedCredential = field(repr=False)
    full_name: str
    country: str
    postcode: str
    city: str
    address: str
    phone_number: str
    date_of_birth: date
    registration_time: datetime


@dataclass(frozen=True)
class Account:
    """A registered identity as stored by the repository."""

    id: int
    username: str
    email: str
    password_hash: str = field(repr=False)
    password_salt: str = field(repr=False)
    full_name: str
    country: str
    postcode: str
    city: str
    address: str
    phone_number: str
    date_of_birth: date
    registration_time: datetime
    email_confirmed: bool = False
    identity_confirmed: bool = False

    @property
    def fully_confirmed(self) -> bool:
        return self.email_confirmed and self.identity_confirmed


@dataclass(frozen=True)
class UploadedDocument:
    """
    Identity-verification document attached to a registration request.

    Only the declared media type is inspected; the stream is a reference
    owned by the transport layer and is never read by the domain.
    """

    media_type: str | None
    filename: str | None = None
    stream: BinaryIO | None = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class RegistrationRequest:
    """Raw registration input exactly as received from the client."""

    name: str | None = None
    address: str | None = None
    city: str | None = None
    phone_number: str | None = None
    postcode: str | None = None
    country: str | None = None
    username: str | None = None
    email: str | None = None
    password: str | None = field(default=None, repr=False)
    date_of_birth: str | None = None
    document: UploadedDocument | None = None


@dataclass(frozen=True)
class ValidatedRegistration:
    """Registration fields after the presence check and date parsing."""

    name: str
    address: str
    city: str
    phone_number: str
    postcode: str
    country: str
    username: str
    email: str
    password: str = field(repr=False)
    date_of_birth: date
