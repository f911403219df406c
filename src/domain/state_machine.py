"""
Registration state machine - Pure transition function.

States
======

- VALIDATING_UPLOAD: Identity document media type is being checked
- VALIDATING_FIELDS: Required field presence is being checked
- RESOLVING_DUPLICATES: Existing accounts are looked up by identity keys
- RECONCILING: Confirmation flags of an email-matched account are being set
- HASHING: The password is being salted and hashed
- PERSISTING: The new account is being written
- DONE: Terminal, account created or reconciled
- FAILED: Terminal, one of the domain errors

Valid Transitions:
    VALIDATING_UPLOAD    -> VALIDATING_FIELDS  (upload accepted or absent)
    VALIDATING_FIELDS    -> RESOLVING_DUPLICATES
    RESOLVING_DUPLICATES -> HASHING            (no match)
    RESOLVING_DUPLICATES -> RECONCILING        (email-only match, not fully confirmed)
    RESOLVING_DUPLICATES -> FAILED             (any other match: conflict)
    RECONCILING          -> DONE
    HASHING              -> PERSISTING
    PERSISTING           -> DONE
    any non-terminal     -> FAILED             (stage raised a domain error)

``transition`` performs no I/O. The orchestrator runs the stage for the
current state, turns its result into an event and asks ``transition`` for
the next state.
"""

from dataclasses import dataclass
from enum import Enum

from .duplicates import DuplicateCheck, Match, NoMatch
from .exceptions import ConflictError, RegistrationError
from .models import Account
from .ports import RegistrationStatus


class RegistrationState(str, Enum):
    """States of a single registration attempt."""

    VALIDATING_UPLOAD = "validating_upload"
    VALIDATING_FIELDS = "validating_fields"
    RESOLVING_DUPLICATES = "resolving_duplicates"
    RECONCILING = "reconciling"
    HASHING = "hashing"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (RegistrationState.DONE, RegistrationState.FAILED)


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a registration attempt: an account or exactly one domain error."""

    status: RegistrationStatus
    state: RegistrationState
    account: Account | None = None
    error: RegistrationError | None = None

    @property
    def ok(self) -> bool:
        return self.status is not RegistrationStatus.FAILED

    @classmethod
    def failure(cls, error: RegistrationError) -> "RegistrationResult":
        return cls(status=RegistrationStatus.FAILED, state=RegistrationState.FAILED, error=error)


@dataclass(frozen=True)
class UploadAccepted:
    """The document is absent or has a whitelisted media type."""


@dataclass(frozen=True)
class FieldsValidated:
    """All required fields are present."""


@dataclass(frozen=True)
class DuplicatesResolved:
    check: DuplicateCheck


@dataclass(frozen=True)
class AccountReconciled:
    account: Account


@dataclass(frozen=True)
class CredentialHashed:
    """The password hash and salt are ready."""


@dataclass(frozen=True)
class AccountCreated:
    account: Account


@dataclass(frozen=True)
class StageFailed:
    error: RegistrationError


Event = (
    UploadAccepted
    | FieldsValidated
    | DuplicatesResolved
    | AccountReconciled
    | CredentialHashed
    | AccountCreated
    | StageFailed
)

Transition = tuple[RegistrationState, RegistrationResult | None]


def _resolve(check: DuplicateCheck) -> Transition:
    if isinstance(check, NoMatch):
        return RegistrationState.HASHING, None
    if isinstance(check, Match) and check.email_only and not check.account.fully_confirmed:
        return RegistrationState.RECONCILING, None
    return RegistrationState.FAILED, RegistrationResult.failure(ConflictError(check.subject))


def transition(state: RegistrationState, event: Event) -> Transition:
    """
    Compute the next state for an event observed in ``state``.

    Args:
        state: Current, non-terminal state
        event: Result of running the current state's stage

    Returns:
        Tuple of (next state, result). The result is set exactly when the
        next state is terminal.

    Raises:
        ValueError: If the event is not valid in the given state
    """
    if state.terminal:
        raise ValueError(f"no transition out of terminal state {state.value}")

    if isinstance(event, StageFailed):
        return RegistrationState.FAILED, RegistrationResult.failure(event.error)

    if state is RegistrationState.VALIDATING_UPLOAD and isinstance(event, UploadAccepted):
        return RegistrationState.VALIDATING_FIELDS, None
    if state is RegistrationState.VALIDATING_FIELDS and isinstance(event, FieldsValidated):
        return RegistrationState.RESOLVING_DUPLICATES, None
    if state is RegistrationState.RESOLVING_DUPLICATES and isinstance(event, DuplicatesResolved):
        return _resolve(event.check)
    if state is RegistrationState.RECONCILING and isinstance(event, AccountReconciled):
        return RegistrationState.DONE, RegistrationResult(
            status=RegistrationStatus.RECONCILED,
            state=RegistrationState.DONE,
            account=event.account,
        )
    if state is RegistrationState.HASHING and isinstance(event, CredentialHashed):
        return RegistrationState.PERSISTING, None
    if state is RegistrationState.PERSISTING and isinstance(event, AccountCreated):
        return RegistrationState.DONE, RegistrationResult(
            status=RegistrationStatus.CREATED,
            state=RegistrationState.DONE,
            account=event.account,
        )

    raise ValueError(f"invalid event {type(event).__name__} in state {state.value}")
