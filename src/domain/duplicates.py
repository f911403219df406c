"""
Duplicate resolver - Classify a request's identity keys against the store.

The classification distinguishes which key collided (email, username or
both) so that callers can answer with a specific conflict, or reconcile an
email-only match instead of rejecting it.
"""

from dataclasses import dataclass

from .models import Account
from .ports import AccountRepository, ConflictSubject


@dataclass(frozen=True)
class NoMatch:
    """No existing account shares the username or the email."""


@dataclass(frozen=True)
class Match:
    """
    At least one existing account shares an identity key.

    ``account`` is the email-matched account when there is one, otherwise
    the username-matched account.
    """

    account: Account
    email_collided: bool
    username_collided: bool

    @property
    def email_only(self) -> bool:
        return self.email_collided and not self.username_collided

    @property
    def subject(self) -> ConflictSubject:
        if self.email_collided and self.username_collided:
            return ConflictSubject.BOTH
        if self.username_collided:
            return ConflictSubject.USERNAME
        return ConflictSubject.EMAIL


DuplicateCheck = NoMatch | Match


def resolve_duplicates(repository: AccountRepository, username: str, email: str) -> DuplicateCheck:
    """
    Look up existing accounts by username OR case-insensitive email.

    Args:
        repository: Account persistence port
        username: Requested username (exact comparison)
        email: Requested email (compared lower-cased)

    Returns:
        NoMatch, or Match with per-key collision flags
    """
    normalized_email = email.lower()
    candidates = repository.find_by_identity(username, normalized_email)

    email_match: Account | None = None
    username_match: Account | None = None
    for account in candidates:
        if email_match is None and account.email.lower() == normalized_email:
            email_match = account
        if username_match is None and account.username == username:
            username_match = account

    if email_match is None and username_match is None:
        return NoMatch()

    return Match(
        account=email_match or username_match,
        email_collided=email_match is not None,
        username_collided=username_match is not None,
    )
