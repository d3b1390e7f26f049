"""Conversion between directory entries, records, and API payloads.

Directory entries arrive as mappings from attribute names to values. The
values may be lists or scalars depending on whether the client library knows
the schema, and attribute names may differ in case from the ones requested,
so lookups here accept both.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .models.directory import (
    GroupAttributes,
    GroupPayload,
    GroupRecord,
    UserAttributes,
    UserPayload,
    UserRecord,
)

__all__ = [
    "group_from_entry",
    "group_from_payload",
    "group_to_payload",
    "user_from_entry",
    "user_from_payload",
    "user_to_payload",
]


def _get_values(attributes: Mapping[str, Any], name: str) -> list[str]:
    """Get all values of an attribute, matching the name without case."""
    wanted = name.lower()
    for key, value in attributes.items():
        if key.lower() != wanted:
            continue
        if value is None:
            return []
        if isinstance(value, str | bytes):
            value = [value]
        return [v.decode() if isinstance(v, bytes) else str(v) for v in value]
    return []


def _get_value(attributes: Mapping[str, Any], name: str) -> str:
    values = _get_values(attributes, name)
    return values[0] if values else ""


def user_from_entry(dn: str, attributes: Mapping[str, Any]) -> UserRecord:
    """Build a user record from a directory search result.

    Parameters
    ----------
    dn
        DN of the entry.
    attributes
        Attributes of the entry.

    Returns
    -------
    UserRecord
        The corresponding record. Missing attributes are empty.
    """
    return UserRecord(
        dn=dn,
        cn=_get_value(attributes, "cn"),
        sn=_get_value(attributes, "sn"),
        mail=_get_value(attributes, "mail"),
        uid=_get_value(attributes, "uid"),
        member_of=_get_values(attributes, "memberOf"),
    )


def group_from_entry(dn: str, attributes: Mapping[str, Any]) -> GroupRecord:
    """Build a group record from a directory search result.

    The ``member`` attribute is kept as is, including the empty placeholder
    value of an empty group.
    """
    return GroupRecord(
        dn=dn,
        cn=_get_value(attributes, "cn"),
        member=_get_values(attributes, "member"),
    )


def user_to_payload(user: UserRecord) -> UserPayload:
    """Convert a user record to its API representation."""
    return UserPayload(
        dn=user.dn,
        attributes=UserAttributes(
            cn=user.cn,
            sn=user.sn,
            mail=user.mail,
            uid=user.uid,
            member_of=list(user.member_of),
        ),
    )


def group_to_payload(group: GroupRecord) -> GroupPayload:
    """Convert a group record to its API representation."""
    return GroupPayload(
        dn=group.dn,
        attributes=GroupAttributes(cn=group.cn, member=list(group.member)),
    )


def user_from_payload(payload: UserPayload) -> UserRecord:
    """Convert the API representation of a user back to a record."""
    return UserRecord(
        dn=payload.dn,
        cn=payload.attributes.cn,
        sn=payload.attributes.sn,
        mail=payload.attributes.mail,
        uid=payload.attributes.uid,
        member_of=list(payload.attributes.member_of),
    )


def group_from_payload(payload: GroupPayload) -> GroupRecord:
    """Convert the API representation of a group back to a record."""
    return GroupRecord(
        dn=payload.dn,
        cn=payload.attributes.cn,
        member=list(payload.attributes.member),
    )
