"""
Error variants raised by the repository layer and the auth dependencies.

Every error carries an ErrorKind. The HTTP boundary turns a kind into a
status code through STATUS_BY_KIND, which has an entry for every member of
the enum.
"""

import enum
from typing import Dict, Optional


class ErrorKind(str, enum.Enum):
    """
    Closed set of failure kinds.

    - VALIDATION: empty update payload, bad filter value, immutable field
    - DUPLICATE: unique-key collision on create
    - NOT_FOUND: no row matched get/update/remove
    - UNAUTHORIZED: missing/invalid credentials or insufficient role
    - TRANSPORT: the database could not execute the statement
    """
    VALIDATION = "VALIDATION"
    DUPLICATE = "DUPLICATE"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    TRANSPORT = "TRANSPORT"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.DUPLICATE: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.TRANSPORT: 500,
}


class JoblyError(Exception):
    """Base error; subclasses only pin the kind and a default message."""

    kind: ErrorKind = ErrorKind.TRANSPORT
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(JoblyError):
    kind = ErrorKind.VALIDATION
    default_message = "Bad Request"


class DuplicateError(JoblyError):
    kind = ErrorKind.DUPLICATE
    default_message = "Duplicate"


class NotFoundError(JoblyError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not Found"


class UnauthorizedError(JoblyError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Unauthorized"


class TransportError(JoblyError):
    kind = ErrorKind.TRANSPORT
    default_message = "Internal Server Error"
