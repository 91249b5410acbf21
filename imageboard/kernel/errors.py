"""
Typed job failures.

Every failure carries a stable ``kind`` and the HTTP status it maps to, so
callers branch on the kind instead of matching message text.
"""

from enum import Enum
from typing import Iterable, List, Optional


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    POLICY = "PolicyError"
    AUTHENTICATION = "AuthenticationError"
    UNCONFIRMED_EMAIL = "UnconfirmedEmailError"
    INSUFFICIENT_PRIVILEGE = "InsufficientPrivilegeError"
    DUPLICATE_NAME = "DuplicateNameError"
    DUPLICATE_EMAIL = "DuplicateEmailError"
    NOT_FOUND = "NotFoundError"
    SERVICE_UNAVAILABLE = "ServiceUnavailableError"


class JobError(Exception):
    """Base class for all errors a job run can end with."""

    kind: ErrorKind
    status_code: int = 500
    default_message: str = "Job failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class ValidationError(JobError):
    """Arguments missing or malformed."""

    kind = ErrorKind.VALIDATION
    status_code = 400

    def __init__(self, message: Optional[str] = None, missing: Iterable[str] = ()):
        self.missing: List[str] = list(missing)
        if message is None:
            message = (
                "Missing required arguments: " + ", ".join(self.missing)
                if self.missing
                else "Invalid arguments"
            )
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.missing:
            data["missing"] = self.missing
        return data


class PolicyError(JobError):
    """Value present but violates a business rule."""

    kind = ErrorKind.POLICY
    status_code = 400


class AuthenticationError(JobError):
    kind = ErrorKind.AUTHENTICATION
    status_code = 401
    default_message = "Not logged in"


class UnconfirmedEmailError(JobError):
    kind = ErrorKind.UNCONFIRMED_EMAIL
    status_code = 403
    default_message = "You need to confirm your e-mail address"


class InsufficientPrivilegeError(JobError):
    kind = ErrorKind.INSUFFICIENT_PRIVILEGE
    status_code = 403
    default_message = "Insufficient privileges"


class DuplicateNameError(JobError):
    kind = ErrorKind.DUPLICATE_NAME
    status_code = 409


class DuplicateEmailError(JobError):
    kind = ErrorKind.DUPLICATE_EMAIL
    status_code = 409


class NotFoundError(JobError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Not found"


class ServiceUnavailableError(JobError):
    """An external collaborator (e.g. reverse search) could not be reached."""

    kind = ErrorKind.SERVICE_UNAVAILABLE
    status_code = 503
