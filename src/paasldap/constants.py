"""Constants for paasldap."""

__all__ = [
    "CONFIG_PATH",
    "COOKIE_NAME",
    "GROUP_ATTRIBUTES",
    "GROUP_EMPTY_MEMBER",
    "GROUP_FILTER",
    "GROUP_OBJECT_CLASS",
    "GROUPS_OU",
    "LOGGER_NAME",
    "PEOPLE_OU",
    "USER_ATTRIBUTES",
    "USER_FILTER",
    "USER_OBJECT_CLASS",
]

CONFIG_PATH = "/etc/paasldap/paasldap.yaml"
"""Default configuration path."""

COOKIE_NAME = "PAASLDAPAuthTicket"
"""Default name of the session cookie."""

LOGGER_NAME = "paasldap"
"""Name of the application logger."""

PEOPLE_OU = "ou=people"
"""RDN of the subtree holding user entries, relative to the base DN."""

GROUPS_OU = "ou=groups"
"""RDN of the subtree holding group entries, relative to the base DN."""

USER_OBJECT_CLASS = "inetOrgPerson"
"""Object class of user entries."""

USER_FILTER = f"(&(objectClass={USER_OBJECT_CLASS}))"
"""Search filter used for all user searches."""

USER_ATTRIBUTES = ["dn", "cn", "sn", "mail", "uid", "memberOf"]
"""Attributes retrieved by user searches.

The server ignores ``dn`` since it is not a real attribute, but it is kept in
the list so that the projection matches existing deployments exactly.
"""

GROUP_OBJECT_CLASS = "groupOfNames"
"""Object class of group entries."""

GROUP_FILTER = f"(&(objectClass={GROUP_OBJECT_CLASS}))"
"""Search filter used for all group searches."""

GROUP_ATTRIBUTES = ["cn", "member"]
"""Attributes retrieved by group searches."""

GROUP_EMPTY_MEMBER = ""
"""Placeholder ``member`` value for a group with no real members.

The ``groupOfNames`` object class requires at least one ``member`` value, so
new groups are created with this single placeholder.
"""
