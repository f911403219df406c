"""
Domain exceptions - Registration error taxonomy.

Every failure leaving the registration core is exactly one of these types.
Each carries the HTTP-equivalent status the API layer should answer with,
and a message that is safe to show to the client (never a password or
document content).
"""

from .ports import ConflictSubject


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RegistrationError):
    """A required field is missing, empty, or malformed."""

    status_code = 400


class UnsupportedMediaError(RegistrationError):
    """The identity document's declared media type is not whitelisted."""

    status_code = 415

    def __init__(self, media_type: str | None) -> None:
        super().__init__(f"Unsupported media type: {media_type or 'unknown'}")
        self.media_type = media_type


_CONFLICT_MESSAGES = {
    ConflictSubject.BOTH: "Username and email already registered",
    ConflictSubject.USERNAME: "Username already taken",
    ConflictSubject.EMAIL: "Email already registered",
}


class ConflictError(RegistrationError):
    """The identity is already registered (and fully confirmed, for email)."""

    status_code = 400

    def __init__(self, subject: ConflictSubject) -> None:
        super().__init__(_CONFLICT_MESSAGES[subject])
        self.subject = subject


class PersistenceError(RegistrationError):
    """The store was unavailable or a write failed for a non-uniqueness reason."""

    status_code = 500


class InternalError(RegistrationError):
    """Any failure that does not fit another category."""

    status_code = 500
