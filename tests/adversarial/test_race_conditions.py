"""
Adversarial tests for race condition attack prevention.

Verifies that concurrent registrations for the same identity never create
more than one account, even when every request passes the duplicate
pre-check before any of them writes.

Security rationale:
- The duplicate pre-check and the insert are a check-then-act sequence
- Only the storage-layer uniqueness constraint closes the window
- The loser must surface as ConflictError, never as a second account
"""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryAccountRepository
from src.adapters.repository.postgres import PostgresAccountRepository
from src.domain.credentials import BcryptCredentialHasher
from src.domain.exceptions import ConflictError, PersistenceError
from src.domain.models import RegistrationRequest
from src.domain.ports import RegistrationStatus
from src.domain.registration import register
from src.domain.state_machine import RegistrationResult

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial


def race(
    repository,
    hasher: BcryptCredentialHasher,
    requests: list[RegistrationRequest],
) -> list[RegistrationResult]:
    """Run all requests concurrently and collect their results."""
    with ThreadPoolExecutor(max_workers=len(requests)) as executor:
        futures = [
            executor.submit(register, request, repository=repository, hasher=hasher)
            for request in requests
        ]
        return [f.result() for f in futures]


class TestInMemoryRace:
    """Race scenarios against the in-memory repository."""

    def test_concurrent_identical_registrations_exactly_one_succeeds(
        self,
        repository: InMemoryAccountRepository,
        hasher: BcryptCredentialHasher,
        make_request: Callable[..., RegistrationRequest],
        barrier_repository: Callable,
    ) -> None:
        """
        Simulate two identical requests that both pass the duplicate check.

        Expected defense: one CREATED, the other FAILED with ConflictError.
        """
        racing = barrier_repository(repository, 2)

        results = race(racing, hasher, [make_request(), make_request()])

        statuses = sorted(r.status.value for r in results)
        assert statuses == ["created", "failed"]
        failed = next(r for r in results if not r.ok)
        assert isinstance(failed.error, ConflictError)
        assert len(repository) == 1

    def test_high_volume_race(
        self,
        repository: InMemoryAccountRepository,
        hasher: BcryptCredentialHasher,
        make_request: Callable[..., RegistrationRequest],
        barrier_repository: Callable,
    ) -> None:
        """Many concurrent requests, same username with differing emails."""
        num_attackers = 8
        racing = barrier_repository(repository, num_attackers)
        requests = [make_request(email=f"user{i}@x.com") for i in range(num_attackers)]

        results = race(racing, hasher, requests)

        created = [r for r in results if r.status is RegistrationStatus.CREATED]
        assert len(created) == 1, f"Race condition vulnerability: {len(created)} accounts created"
        assert all(isinstance(r.error, ConflictError) for r in results if not r.ok)
        assert len(repository) == 1

    def test_sequential_resubmission_never_creates_twice(
        self,
        repository: InMemoryAccountRepository,
        hasher: BcryptCredentialHasher,
        make_request: Callable[..., RegistrationRequest],
    ) -> None:
        """Immediate re-submission resolves through the pre-check."""
        first = register(make_request(), repository=repository, hasher=hasher)
        second = register(make_request(), repository=repository, hasher=hasher)

        assert [first.status, second.status] == [RegistrationStatus.CREATED, RegistrationStatus.FAILED]


@pytest.mark.integration
class TestPostgresRace:
    """Race scenarios against the PostgreSQL uniqueness constraints."""

    def test_concurrent_registration_attack_exactly_one_succeeds(
        self,
        clean_accounts: ConnectionPool,
        hasher: BcryptCredentialHasher,
        make_request: Callable[..., RegistrationRequest],
        barrier_repository: Callable,
    ) -> None:
        """
        Both requests pass the pre-check; the database decides.

        Expected defense: exactly one row, the loser is a conflict or a
        persistence failure, never a second create.
        """
        num_attackers = 5
        racing = barrier_repository(PostgresAccountRepository(clean_accounts), num_attackers)

        results = race(racing, hasher, [make_request() for _ in range(num_attackers)])

        assert [r.status for r in results].count(RegistrationStatus.CREATED) == 1
        for result in results:
            if not result.ok:
                assert isinstance(result.error, (ConflictError, PersistenceError))

        with clean_accounts.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM accounts")
            count = cursor.fetchone()[0]
        assert count == 1, f"Data corruption: {count} records for same identity (expected 1)"

    def test_case_variant_emails_race(
        self,
        clean_accounts: ConnectionPool,
        hasher: BcryptCredentialHasher,
        make_request: Callable[..., RegistrationRequest],
        barrier_repository: Callable,
    ) -> None:
        """Case-only email variants collide at the lower(email) unique index."""
        racing = barrier_repository(PostgresAccountRepository(clean_accounts), 2)
        requests = [
            make_request(username="upper", email="RACE@X.COM"),
            make_request(username="lower", email="race@x.com"),
        ]

        results = race(racing, hasher, requests)

        assert [r.status for r in results].count(RegistrationStatus.CREATED) == 1
        failed = next(r for r in results if not r.ok)
        assert isinstance(failed.error, ConflictError)
