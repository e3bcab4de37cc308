"""Common exception classes for the address book.

Every error a caller can recover from derives from
``AddressBookError`` and carries the HTTP status and machine readable
code it is reported with.  The application registers a single handler
for the base class in ``main.py``.
"""

from typing import Optional


class AddressBookError(Exception):
    """Generic exception class which other exceptions should inherit from."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str = "", *, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> dict:
        return {"code": self.error_code, "message": self.message}


class ValidationError(AddressBookError):
    """Address fields are missing, empty or malformed."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class UnauthenticatedError(AddressBookError):
    """Identity headers are missing from the request."""

    status_code = 401
    error_code = "UNAUTHENTICATED"


class ForbiddenError(AddressBookError):
    """The requester neither owns the address nor holds the admin capability."""

    status_code = 403
    error_code = "FORBIDDEN"


class NotFoundError(AddressBookError):
    """No live address with the given id exists in the tenant."""

    status_code = 404
    error_code = "ADDRESS_NOT_FOUND"


class DuplicateAddressError(AddressBookError):
    """The user already has a live address with identical content."""

    status_code = 409
    error_code = "ADDRESS_DUPLICATE"
