"""
Upload filter - Gatekeeping of the identity-verification document.

The decision is a pure function of the declared media type: no wildcard
matching and no content sniffing. The document itself is optional.
"""

from .exceptions import UnsupportedMediaError
from .models import UploadedDocument

ALLOWED_MEDIA_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "application/pdf",
    }
)


def is_accepted_media_type(media_type: str | None) -> bool:
    """Return True if the declared media type is on the whitelist."""
    if not media_type:
        return False
    return media_type.strip().lower() in ALLOWED_MEDIA_TYPES


def check_upload(document: UploadedDocument | None) -> None:
    """
    Accept or reject the attached document.

    Args:
        document: Uploaded document, or None when the request carries none

    Raises:
        UnsupportedMediaError: If a document is present with a declared
            media type outside the whitelist
    """
    if document is None:
        return
    if not is_accepted_media_type(document.media_type):
        raise UnsupportedMediaError(document.media_type)
