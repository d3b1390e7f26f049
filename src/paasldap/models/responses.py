"""Response bodies for the paasldap API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .directory import GroupPayload, StructuredError, UserPayload

__all__ = [
    "AuthStatus",
    "DirectoryResponse",
    "ErrorResponse",
    "GroupListResponse",
    "GroupResponse",
    "UserListResponse",
    "UserResponse",
    "VersionInfo",
]


class AuthStatus(BaseModel):
    """Result of a login or logout."""

    auth: bool = Field(
        ...,
        title="Authenticated",
        description="Whether the client now holds a valid session",
    )

    error: str | None = Field(
        None,
        title="Error",
        description="Why authentication failed",
        examples=["invalidCredentials: Invalid Credentials"],
    )


class DirectoryResponse(BaseModel):
    """Acknowledgement of a successful directory operation."""

    ok: bool = Field(True, title="Whether the operation succeeded")

    error: StructuredError | None = Field(None, title="Failure details")


class ErrorResponse(DirectoryResponse):
    """A failed directory operation."""

    ok: bool = Field(False, title="Whether the operation succeeded")

    error: StructuredError = Field(..., title="Failure details")


class UserListResponse(DirectoryResponse):
    """All users in the directory."""

    users: list[UserPayload] = Field(..., title="Users")


class UserResponse(DirectoryResponse):
    """A single user."""

    user: UserPayload = Field(..., title="User")


class GroupListResponse(DirectoryResponse):
    """All groups in the directory."""

    groups: list[GroupPayload] = Field(..., title="Groups")


class GroupResponse(DirectoryResponse):
    """A single group."""

    group: GroupPayload = Field(..., title="Group")


class VersionInfo(BaseModel):
    """Version of the running server."""

    version: str = Field(..., title="Version", examples=["1.0.0"])
