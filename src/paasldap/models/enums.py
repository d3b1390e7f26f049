"""Enums used in paasldap models.

Notes
-----
These are kept in a separate module because the exception classes need them
and the models module imports the exceptions.
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "DirectoryStatus",
    "ErrorKind",
]


class DirectoryStatus(Enum):
    """Coarse classification of a failed directory operation."""

    bad_request = "bad_request"
    """Bad input or rejected by directory policy."""

    internal_error = "internal_error"
    """The directory could not be reached or the protocol exchange failed."""


class ErrorKind(Enum):
    """The class of a directory operation failure."""

    validation = "validation"
    """Request fields failed validation before contacting the directory."""

    authentication = "authentication"
    """Bad credentials, or a write was attempted without binding."""

    authorization = "authorization"
    """The bound identity lacks rights for the requested operation."""

    not_found = "not_found"
    """The target DN does not exist."""

    conflict = "conflict"
    """The target DN already exists."""

    transport = "transport"
    """Network or server fault unrelated to the request itself."""

    directory = "directory"
    """Any other failure reported by the directory server."""
