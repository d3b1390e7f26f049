"""Representation of directory users and groups."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..constants import GROUP_EMPTY_MEMBER

__all__ = [
    "GroupAttributes",
    "GroupPayload",
    "GroupRecord",
    "GroupWrite",
    "StructuredError",
    "UserAttributes",
    "UserPayload",
    "UserRecord",
    "UserWriteOptional",
    "UserWriteRequired",
]


@dataclass
class UserRecord:
    """A user entry read from the directory.

    Only ever built from a directory search result.
    """

    dn: str
    """DN of the entry, ``uid=<uid>,ou=people,<base DN>``."""

    cn: str = ""
    """Common name."""

    sn: str = ""
    """Surname."""

    mail: str = ""
    """Email address."""

    uid: str = ""
    """User ID, the RDN value of the entry."""

    member_of: list[str] = field(default_factory=list)
    """DNs of groups containing this user, maintained by the server."""


@dataclass
class GroupRecord:
    """A group entry read from the directory."""

    dn: str
    """DN of the entry, ``cn=<gid>,ou=groups,<base DN>``."""

    cn: str = ""
    """Common name, which is also the group ID."""

    member: list[str] = field(default_factory=list)
    """Raw ``member`` values, possibly including the empty placeholder."""

    @property
    def members(self) -> list[str]:
        """Member DNs with the empty placeholder removed."""
        return [m for m in self.member if m != GROUP_EMPTY_MEMBER]


@dataclass
class UserWriteRequired:
    """Fields for creating a user.

    All fields must be non-empty. This is checked by the directory client
    rather than here so that a missing field is reported the same way as any
    other rejected write.
    """

    cn: str = ""
    sn: str = ""
    mail: str = ""
    userpassword: str = ""

    @property
    def is_complete(self) -> bool:
        """Whether every field is set."""
        return all((self.cn, self.sn, self.mail, self.userpassword))


@dataclass
class UserWriteOptional:
    """Fields for modifying a user.

    Empty fields are left unchanged. At least one field must be set.
    """

    cn: str = ""
    sn: str = ""
    mail: str = ""
    userpassword: str = ""

    @property
    def changes(self) -> dict[str, str]:
        """Directory attributes to replace, keyed by attribute name."""
        attributes = {
            "cn": self.cn,
            "sn": self.sn,
            "mail": self.mail,
            "userPassword": self.userpassword,
        }
        return {k: v for k, v in attributes.items() if v}


@dataclass
class GroupWrite:
    """Fields for creating or modifying a group.

    ``groupOfNames`` has no settable attributes other than its name and its
    members, both of which are managed separately, so this is empty.
    """


class StructuredError(BaseModel):
    """A failed directory operation as reported to clients."""

    code: int = Field(
        ..., title="Result code", description="LDAP result code", examples=[32]
    )

    name: str = Field(
        ...,
        title="Result name",
        description="Symbolic name of the LDAP result code",
        examples=["noSuchObject"],
    )

    message: str = Field(
        ...,
        title="Message",
        description="Diagnostic message from the directory server",
        examples=["No such object"],
    )


class UserAttributes(BaseModel):
    """Attributes of a user in API responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    cn: str = Field("", title="Common name", examples=["admin"])

    sn: str = Field("", title="Surname", examples=["user"])

    mail: str = Field("", title="Email", examples=["adminuser@example.com"])

    uid: str = Field("", title="User ID", examples=["adminuser"])

    member_of: list[str] = Field(
        [],
        title="Group memberships",
        description="DNs of the groups containing this user",
        examples=[["cn=admins,ou=groups,dc=example,dc=com"]],
    )


class UserPayload(BaseModel):
    """A user in API responses."""

    dn: str = Field(
        ...,
        title="DN",
        examples=["uid=adminuser,ou=people,dc=example,dc=com"],
    )

    attributes: UserAttributes = Field(..., title="Attributes")


class GroupAttributes(BaseModel):
    """Attributes of a group in API responses."""

    cn: str = Field("", title="Common name", examples=["admins"])

    member: list[str] = Field(
        [],
        title="Members",
        description=(
            "DNs of the group members. An empty group has a single empty"
            " string as its only member."
        ),
        examples=[["uid=adminuser,ou=people,dc=example,dc=com"]],
    )


class GroupPayload(BaseModel):
    """A group in API responses."""

    dn: str = Field(
        ..., title="DN", examples=["cn=admins,ou=groups,dc=example,dc=com"]
    )

    attributes: GroupAttributes = Field(..., title="Attributes")
