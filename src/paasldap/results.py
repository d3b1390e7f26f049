"""Translation of LDAP result codes into structured errors.

This is the only module that interprets numeric LDAP result codes. Everything
else works with the `~paasldap.models.enums.ErrorKind` carried by the raised
exception.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ldap3.core.results import RESULT_CODES

from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DirectoryError,
    DirectoryResultError,
    NotFoundError,
    TransportError,
)
from .models.directory import StructuredError
from .models.enums import ErrorKind

__all__ = [
    "CLIENT_RESULT_CODES",
    "error_for_result",
    "kind_for_code",
    "result_name",
    "translate_result",
]

CLIENT_RESULT_CODES = {
    81: "serverDown",
    82: "localError",
    83: "encodingError",
    84: "decodingError",
    85: "timeout",
    86: "authUnknown",
    87: "filterError",
    88: "userCanceled",
    89: "paramError",
    90: "noMemory",
    91: "connectError",
}
"""Client-side result codes not returned by servers.

These are the codes used by LDAP client libraries to report local failures,
such as being unable to reach the server.
"""

_KINDS = {
    7: ErrorKind.authentication,
    8: ErrorKind.authentication,
    13: ErrorKind.authentication,
    48: ErrorKind.authentication,
    49: ErrorKind.authentication,
    50: ErrorKind.authorization,
    32: ErrorKind.not_found,
    68: ErrorKind.conflict,
    51: ErrorKind.transport,
    52: ErrorKind.transport,
    80: ErrorKind.transport,
    81: ErrorKind.transport,
    85: ErrorKind.transport,
    91: ErrorKind.transport,
}

_EXCEPTIONS: dict[ErrorKind, type[DirectoryError]] = {
    ErrorKind.authentication: AuthenticationError,
    ErrorKind.authorization: AuthorizationError,
    ErrorKind.not_found: NotFoundError,
    ErrorKind.conflict: ConflictError,
    ErrorKind.transport: TransportError,
    ErrorKind.directory: DirectoryResultError,
}


def result_name(code: int) -> str:
    """Return the symbolic name of an LDAP result code.

    Parameters
    ----------
    code
        LDAP result code.

    Returns
    -------
    str
        Name from the standard result code table, such as ``noSuchObject``,
        or ``unknown`` if the code is not recognized.
    """
    if code in RESULT_CODES:
        return RESULT_CODES[code]
    return CLIENT_RESULT_CODES.get(code, "unknown")


def kind_for_code(code: int) -> ErrorKind:
    """Return the kind of failure indicated by an LDAP result code."""
    return _KINDS.get(code, ErrorKind.directory)


def translate_result(result: Mapping[str, Any]) -> StructuredError | None:
    """Convert an LDAP result into a structured error.

    Parameters
    ----------
    result
        Result of an LDAP operation as returned by ldap3, with at least the
        ``result`` key holding the numeric code. The ``message`` key, if
        present, holds the diagnostic message from the server.

    Returns
    -------
    StructuredError or None
        The structured error, or `None` if the result indicates success.
    """
    code = int(result.get("result", 0))
    if code == 0:
        return None
    name = result_name(code)
    message = result.get("message") or result.get("description") or name
    return StructuredError(code=code, name=name, message=message)


def error_for_result(result: Mapping[str, Any]) -> DirectoryError:
    """Build the exception corresponding to a failed LDAP result.

    Parameters
    ----------
    result
        Result of an LDAP operation as returned by ldap3.

    Returns
    -------
    DirectoryError
        Exception of the subclass matching the kind of failure.

    Raises
    ------
    ValueError
        Raised if the result indicates success.
    """
    error = translate_result(result)
    if not error:
        raise ValueError("LDAP result indicates success")
    exc_class = _EXCEPTIONS[kind_for_code(error.code)]
    return exc_class(error.code, error.name, error.message)
