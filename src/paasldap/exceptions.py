"""Exceptions for paasldap."""

from __future__ import annotations

from typing import ClassVar

from .models.directory import StructuredError
from .models.enums import DirectoryStatus, ErrorKind

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DirectoryError",
    "DirectoryResultError",
    "InvalidRequestError",
    "NotAuthenticatedError",
    "NotFoundError",
    "TransportError",
]


class DirectoryError(Exception):
    """A directory operation failed.

    Every failure of a `~paasldap.storage.ldap.DirectoryClient` operation is
    raised as a subclass of this exception. It carries the LDAP result code,
    its symbolic name, and the diagnostic message from the server, plus the
    kind of failure so that callers never need to interpret numeric codes.

    Parameters
    ----------
    code
        LDAP result code.
    name
        Symbolic name of the result code.
    message
        Diagnostic message from the server or from local validation.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.directory
    """Kind of failure."""

    status: ClassVar[DirectoryStatus] = DirectoryStatus.bad_request
    """Coarse classification of the failure."""

    def __init__(self, code: int, name: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.name = name
        self.message = message

    @property
    def status_code(self) -> int:
        """HTTP status code used when reporting this error."""
        if self.status == DirectoryStatus.internal_error:
            return 500
        return 400

    def to_structured(self) -> StructuredError:
        """Convert the exception to the structured error reported to clients.

        Returns
        -------
        StructuredError
            The code, name, and message of the failure.
        """
        return StructuredError(
            code=self.code, name=self.name, message=self.message
        )


class InvalidRequestError(DirectoryError):
    """Request fields failed validation.

    Raised before any request is sent to the directory server. Uses the
    ``unwillingToPerform`` result code so that clients see the same shape as
    a server-side rejection.
    """

    kind = ErrorKind.validation

    def __init__(self, message: str) -> None:
        super().__init__(53, "unwillingToPerform", message)


class AuthenticationError(DirectoryError):
    """Bind failed, or a write needs an authenticated identity."""

    kind = ErrorKind.authentication


class AuthorizationError(DirectoryError):
    """The bound identity is not allowed to perform the operation."""

    kind = ErrorKind.authorization


class NotFoundError(DirectoryError):
    """The target DN does not exist."""

    kind = ErrorKind.not_found


class ConflictError(DirectoryError):
    """The target DN already exists."""

    kind = ErrorKind.conflict


class TransportError(DirectoryError):
    """The directory server could not be reached or the exchange failed."""

    kind = ErrorKind.transport
    status = DirectoryStatus.internal_error


class DirectoryResultError(DirectoryError):
    """The directory server reported some other failure."""


class NotAuthenticatedError(Exception):
    """The request has no valid session.

    Rendered as a 401 response with a body of ``{"auth": false}``.
    """
