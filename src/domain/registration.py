"""
Registration orchestrator - Runs one registration attempt end to end.

Stage order:
    upload filter -> field validation -> duplicate resolution
        -> confirmation reconciliation (email-only, not fully confirmed)
        -> or credential hashing -> account creation

Each stage's result becomes an event for the pure ``transition`` function
in ``state_machine``; the loop stops at a terminal state. Every exception is
mapped to one member of the domain error taxonomy, so callers always get a
RegistrationResult and never a raw exception.

The duplicate pre-check only produces friendlier errors. Two concurrent
requests can both pass it; the repository's uniqueness constraint decides,
and the loser surfaces as ConflictError from the create stage.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from .confirmation import reconcile_confirmation
from .duplicates import DuplicateCheck, Match, resolve_duplicates
from .exceptions import InternalError, RegistrationError
from .models import HashedCredential, NewAccount, RegistrationRequest, ValidatedRegistration
from .ports import AccountRepository, CredentialHasher
from .state_machine import (
    AccountCreated,
    AccountReconciled,
    CredentialHashed,
    DuplicatesResolved,
    Event,
    FieldsValidated,
    RegistrationResult,
    RegistrationState,
    StageFailed,
    UploadAccepted,
    transition,
)
from .upload import check_upload
from .validation import validate_request

logger = logging.getLogger(__name__)


@dataclass
class _Attempt:
    """Values carried between stages of one attempt."""

    request: RegistrationRequest
    registration: ValidatedRegistration | None = None
    check: DuplicateCheck | None = None
    credential: HashedCredential | None = None


def register(
    request: RegistrationRequest,
    *,
    repository: AccountRepository,
    hasher: CredentialHasher,
) -> RegistrationResult:
    """
    Register a new account, or reconcile a re-submitted one.

    Args:
        request: Raw registration request including the optional document
        repository: Account persistence port
        hasher: Password hashing port

    Returns:
        RegistrationResult with status CREATED, RECONCILED or FAILED
    """
    attempt = _Attempt(request=request)
    state = RegistrationState.VALIDATING_UPLOAD
    result: RegistrationResult | None = None

    while result is None:
        event = _run_stage(state, attempt, repository, hasher)
        try:
            state, result = transition(state, event)
        except ValueError as exc:
            logger.error("Registration state machine rejected event: %s", exc)
            result = RegistrationResult.failure(InternalError(str(exc)))

    _log_result(result, request)
    return result


def _run_stage(
    state: RegistrationState,
    attempt: _Attempt,
    repository: AccountRepository,
    hasher: CredentialHasher,
) -> Event:
    try:
        return _STAGES[state](attempt, repository, hasher)
    except RegistrationError as exc:
        return StageFailed(exc)
    except Exception as exc:
        logger.exception("Unexpected error during registration stage %s", state.value)
        return StageFailed(InternalError(str(exc) or type(exc).__name__))


def _validate_upload(attempt: _Attempt, repository: AccountRepository, hasher: CredentialHasher) -> Event:
    check_upload(attempt.request.document)
    return UploadAccepted()


def _validate_fields(attempt: _Attempt, repository: AccountRepository, hasher: CredentialHasher) -> Event:
    attempt.registration = validate_request(attempt.request)
    return FieldsValidated()


def _resolve_duplicates(attempt: _Attempt, repository: AccountRepository, hasher: CredentialHasher) -> Event:
    registration = _require(attempt.registration)
    attempt.check = resolve_duplicates(repository, registration.username, registration.email)
    return DuplicatesResolved(attempt.check)


def _reconcile(attempt: _Attempt, repository: AccountRepository, hasher: CredentialHasher) -> Event:
    check = _require(attempt.check)
    if not isinstance(check, Match):
        raise InternalError("reconciliation reached without a duplicate match")
    return AccountReconciled(reconcile_confirmation(repository, check))


def _hash_credential(attempt: _Attempt, repository: AccountRepository, hasher: CredentialHasher) -> Event:
    registration = _require(attempt.registration)
    attempt.credential = hasher.hash_password(registration.password)
    return CredentialHashed()


def _persist(attempt: _Attempt, repository: AccountRepository, hasher: CredentialHasher) -> Event:
    registration = _require(attempt.registration)
    credential = _require(attempt.credential)
    new_account = NewAccount(
        username=registration.username,
        email=registration.email,
        credential=credential,
        full_name=registration.name,
        country=registration.country,
        postcode=registration.postcode,
        city=registration.city,
        address=registration.address,
        phone_number=registration.phone_number,
        date_of_birth=registration.date_of_birth,
        registration_time=datetime.now(timezone.utc),
    )
    return AccountCreated(repository.create_account(new_account))


_STAGES = {
    RegistrationState.VALIDATING_UPLOAD: _validate_upload,
    RegistrationState.VALIDATING_FIELDS: _validate_fields,
    RegistrationState.RESOLVING_DUPLICATES: _resolve_duplicates,
    RegistrationState.RECONCILING: _reconcile,
    RegistrationState.HASHING: _hash_credential,
    RegistrationState.PERSISTING: _persist,
}


def _require(value):
    if value is None:
        raise InternalError("registration stage ran out of order")
    return value


def _log_result(result: RegistrationResult, request: RegistrationRequest) -> None:
    if result.account is not None:
        logger.info(
            "Registration %s: account id=%s username=%s",
            result.status.value,
            result.account.id,
            result.account.username,
        )
        return

    error = result.error
    if error is None:
        return
    level = logging.ERROR if error.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "Registration failed (%s) for username=%s: %s",
        type(error).__name__,
        request.username,
        error.message,
    )
