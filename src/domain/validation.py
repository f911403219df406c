"""
Request validator - Presence check over the registration field set.

Presence is a boolean gate: a single missing field fails the whole
request with one generic error, without itemizing which field was absent.
"""

from datetime import date, datetime

from .exceptions import ValidationError
from .models import RegistrationRequest, ValidatedRegistration

REQUIRED_FIELDS = (
    "name",
    "address",
    "city",
    "phone_number",
    "postcode",
    "country",
    "username",
    "email",
    "password",
    "date_of_birth",
)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def parse_date_of_birth(value: str) -> date:
    """
    Parse a date of birth given as an ISO date or ISO datetime.

    Raises:
        ValidationError: If the value is not an ISO calendar date
    """
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        raise ValidationError("Invalid date of birth") from None


def validate_request(request: RegistrationRequest) -> ValidatedRegistration:
    """
    Check that every required field is present and non-empty.

    Text fields are stripped of surrounding whitespace; the password is
    passed through untouched.

    Args:
        request: Raw registration request

    Returns:
        ValidatedRegistration with a parsed date of birth

    Raises:
        ValidationError: If any required field is missing or blank, or the
            date of birth cannot be parsed
    """
    if any(_is_blank(getattr(request, name)) for name in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields")

    return ValidatedRegistration(
        name=request.name.strip(),
        address=request.address.strip(),
        city=request.city.strip(),
        phone_number=request.phone_number.strip(),
        postcode=request.postcode.strip(),
        country=request.country.strip(),
        username=request.username.strip(),
        email=request.email.strip(),
        password=request.password,
        date_of_birth=parse_date_of_birth(request.date_of_birth),
    )
