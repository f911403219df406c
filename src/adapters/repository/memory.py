"""
In-memory repository adapter - Implements AccountRepository protocol.

Process-local store with the same uniqueness rules as the PostgreSQL
schema (exact username, lower-cased email). A lock makes check-and-insert
atomic so that concurrent registrations behave like they do against the
database: one insert wins, the others get ConflictError.
"""

import threading
from dataclasses import replace

from src.domain.exceptions import ConflictError, PersistenceError
from src.domain.models import Account, NewAccount
from src.domain.ports import ConflictSubject


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with a dict guarded by a lock.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: dict[int, Account] = {}
        self._next_id = 1

    def find_by_identity(self, username: str, email: str) -> list[Account]:
        normalized_email = email.lower()
        with self._lock:
            return [
                account
                for account in self._accounts.values()
                if account.username == username or account.email.lower() == normalized_email
            ]

    def create_account(self, account: NewAccount) -> Account:
        normalized_email = account.email.lower()
        with self._lock:
            username_taken = any(a.username == account.username for a in self._accounts.values())
            email_taken = any(a.email.lower() == normalized_email for a in self._accounts.values())
            if username_taken and email_taken:
                raise ConflictError(ConflictSubject.BOTH)
            if username_taken:
                raise ConflictError(ConflictSubject.USERNAME)
            if email_taken:
                raise ConflictError(ConflictSubject.EMAIL)

            stored = Account(
                id=self._next_id,
                username=account.username,
                email=account.email,
                password_hash=account.credential.password_hash,
                password_salt=account.credential.salt,
                full_name=account.full_name,
                country=account.country,
                postcode=account.postcode,
                city=account.city,
                address=account.address,
                phone_number=account.phone_number,
                date_of_birth=account.date_of_birth,
                registration_time=account.registration_time,
            )
            self._accounts[stored.id] = stored
            self._next_id += 1
            return stored

    def confirm_account(self, account_id: int) -> Account:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise PersistenceError(f"Account {account_id} not found")
            confirmed = replace(account, email_confirmed=True, identity_confirmed=True)
            self._accounts[account_id] = confirmed
            return confirmed

    def add(self, account: Account) -> Account:
        """Store a fully-formed account as-is, keeping its id and flags."""
        with self._lock:
            self._accounts[account.id] = account
            self._next_id = max(self._next_id, account.id + 1)
            return account

    def get(self, account_id: int) -> Account | None:
        with self._lock:
            return self._accounts.get(account_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)
