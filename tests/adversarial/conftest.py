"""
Shared fixtures for adversarial tests.

Provides repositories that hold every caller at the duplicate pre-check
until all concurrent requests have passed it, so the storage-layer
uniqueness guarantee is what decides the outcome.
"""

import threading
from collections.abc import Callable

import pytest

from src.domain.models import Account


class BarrierRepository:
    """
    Wraps a repository and synchronizes callers after the duplicate lookup.

    Every find_by_identity call returns its (empty) result only once
    ``parties`` callers have performed the lookup, reproducing the
    check-then-act race deterministically.
    """

    def __init__(self, inner, parties: int) -> None:
        self._inner = inner
        self._barrier = threading.Barrier(parties, timeout=10)

    def find_by_identity(self, username: str, email: str) -> list[Account]:
        found = self._inner.find_by_identity(username, email)
        self._barrier.wait()
        return found

    def create_account(self, account):
        return self._inner.create_account(account)

    def confirm_account(self, account_id: int) -> Account:
        return self._inner.confirm_account(account_id)


@pytest.fixture
def barrier_repository() -> Callable[[object, int], BarrierRepository]:
    """Factory wrapping a repository so that ``parties`` lookups rendezvous."""
    return BarrierRepository
