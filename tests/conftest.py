"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory repository and bcrypt hasher
- Registration request and account factories
- PostgreSQL connection pool (tests needing it are skipped when the
  database is not reachable)
"""

from collections.abc import Callable, Generator
from dataclasses import replace
from datetime import date, datetime, timezone

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryAccountRepository
from src.adapters.repository.postgres import run_migrations
from src.config.settings import get_settings
from src.domain.credentials import BcryptCredentialHasher
from src.domain.models import Account, RegistrationRequest

VALID_FIELDS = {
    "name": "Alice Example",
    "address": "1 Main Street",
    "city": "Springfield",
    "phone_number": "+1 555 0100",
    "postcode": "12345",
    "country": "US",
    "username": "alice",
    "email": "a@x.com",
    "password": "correct horse battery staple",
    "date_of_birth": "1990-04-01",
}

FORM_FIELDS = {
    "name": "Alice Example",
    "address": "1 Main Street",
    "city": "Springfield",
    "phoneNumber": "+1 555 0100",
    "postcode": "12345",
    "country": "US",
    "username": "alice",
    "email": "a@x.com",
    "password": "correct horse battery staple",
    "dateOfBirth": "1990-04-01",
}


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    """Fresh in-memory repository for each test."""
    return InMemoryAccountRepository()


@pytest.fixture(scope="session")
def hasher() -> BcryptCredentialHasher:
    """bcrypt hasher with the minimum allowed work factor."""
    return BcryptCredentialHasher(rounds=10)


@pytest.fixture
def make_request() -> Callable[..., RegistrationRequest]:
    """Factory for registration requests with valid defaults."""

    def _make(**overrides: object) -> RegistrationRequest:
        return RegistrationRequest(**{**VALID_FIELDS, **overrides})

    return _make


@pytest.fixture
def make_account(hasher: BcryptCredentialHasher) -> Callable[..., Account]:
    """Factory for stored accounts with a real salted hash."""
    credential = hasher.hash_password("existing-password")
    base = Account(
        id=1,
        username="existing",
        email="existing@x.com",
        password_hash=credential.password_hash,
        password_salt=credential.salt,
        full_name="Existing User",
        country="US",
        postcode="54321",
        city="Shelbyville",
        address="2 Side Street",
        phone_number="+1 555 0199",
        date_of_birth=date(1985, 1, 1),
        registration_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    def _make(**overrides: object) -> Account:
        return replace(base, **overrides)

    return _make


@pytest.fixture(scope="session")
def pg_pool() -> Generator[ConnectionPool, None, None]:
    """Connection pool against the configured database, migrated once."""
    settings = get_settings()
    try:
        with psycopg.connect(settings.database_url, connect_timeout=2):
            pass
    except psycopg.OperationalError as exc:
        pytest.skip(f"PostgreSQL not available: {exc}")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_accounts(pg_pool: ConnectionPool) -> Generator[ConnectionPool, None, None]:
    """Empty the accounts table before a test."""
    with pg_pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.commit()
    yield pg_pool


@pytest.fixture
def form_fields() -> dict[str, str]:
    """Multipart form fields of a valid registration, as the client sends them."""
    return dict(FORM_FIELDS)
