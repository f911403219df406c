"""
Confirmation reconciler - Re-submission path for partially confirmed accounts.

A user who registered without an identity document can submit the form
again with the same email. Instead of creating a second account, the
existing account has both confirmation flags set.
"""

import logging

from .duplicates import Match
from .exceptions import ConflictError
from .models import Account
from .ports import AccountRepository, ConflictSubject

logger = logging.getLogger(__name__)


def reconcile_confirmation(repository: AccountRepository, match: Match) -> Account:
    """
    Confirm an email-only matched account that is not yet fully confirmed.

    Only the two confirmation flags change; password, salt and every other
    field keep their stored values.

    Args:
        repository: Account persistence port
        match: Duplicate match keyed on email only

    Returns:
        The updated account

    Raises:
        ConflictError: If the matched account is already fully confirmed
        ValueError: If the match is not an email-only match
    """
    if not match.email_only:
        raise ValueError(f"reconciliation requires an email-only match, got {match.subject.value}")

    if match.account.fully_confirmed:
        raise ConflictError(ConflictSubject.EMAIL)

    account = repository.confirm_account(match.account.id)
    logger.info("Confirmation flags set for account id=%s", account.id)
    return account
