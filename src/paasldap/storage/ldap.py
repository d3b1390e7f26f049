"""LDAP storage layer for paasldap."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from ldap3 import (
    MODIFY_ADD,
    MODIFY_DELETE,
    MODIFY_REPLACE,
    NONE,
    SUBTREE,
    Connection,
    Server,
)
from ldap3.core.exceptions import LDAPException
from structlog.stdlib import BoundLogger

from ..config import LDAPConfig
from ..constants import (
    GROUP_ATTRIBUTES,
    GROUP_EMPTY_MEMBER,
    GROUP_FILTER,
    GROUP_OBJECT_CLASS,
    USER_ATTRIBUTES,
    USER_FILTER,
    USER_OBJECT_CLASS,
)
from ..exceptions import InvalidRequestError, NotFoundError, TransportError
from ..models.directory import (
    GroupRecord,
    GroupWrite,
    UserRecord,
    UserWriteOptional,
    UserWriteRequired,
)
from ..results import error_for_result, result_name
from ..translate import group_from_entry, user_from_entry

__all__ = ["DirectoryClient"]


class DirectoryClient:
    """One connection to the directory server and its bound identity.

    Every operation either returns its result or raises a subclass of
    `~paasldap.exceptions.DirectoryError`. Operations on one client are
    serialized, since an ldap3 connection must not be used by several threads
    at once. A client is never shared between sessions.

    Parameters
    ----------
    config
        Configuration for the directory server.
    logger
        Logger for debug messages and errors.
    """

    def __init__(self, config: LDAPConfig, logger: BoundLogger) -> None:
        self._url = str(config.url)
        self._server = Server(self._url, get_info=NONE)
        self._people_dn = config.people_dn
        self._groups_dn = config.groups_dn
        self._connection: Connection | None = None
        self._lock = threading.Lock()
        self._logger = logger.bind(ldap_url=self._url)

    @property
    def people_dn(self) -> str:
        """DN of the subtree holding users."""
        return self._people_dn

    @property
    def groups_dn(self) -> str:
        """DN of the subtree holding groups."""
        return self._groups_dn

    def user_dn(self, uid: str) -> str:
        """Return the DN of the user with the given ID."""
        return f"uid={uid},{self._people_dn}"

    def group_dn(self, gid: str) -> str:
        """Return the DN of the group with the given ID."""
        return f"cn={gid},{self._groups_dn}"

    def connect(self) -> None:
        """Open an anonymous connection to the directory server.

        Raises
        ------
        TransportError
            Raised if the server cannot be reached.
        """
        connection = self._open(user=None, password=None)
        with self._lock:
            self._replace_connection(connection)
        self._logger.debug("Opened anonymous LDAP connection")

    def bind(self, username: str, password: str) -> None:
        """Authenticate as the given user.

        A new connection is opened and bound, so the client need not be
        connected first. Only if the bind succeeds does it replace the current
        connection, so on failure the previous identity of the client remains
        in effect.

        Parameters
        ----------
        username
            User ID, bound as ``uid=<username>,ou=people,<base DN>``.
        password
            Password of the user.

        Raises
        ------
        AuthenticationError
            Raised if the credentials are rejected.
        TransportError
            Raised if the server cannot be reached.
        """
        dn = self.user_dn(username)
        logger = self._logger.bind(ldap_bind_dn=dn)
        connection = self._open(user=dn, password=password)
        try:
            connection.bind()
        except LDAPException as e:
            logger.exception("LDAP bind failed")
            self._close_connection(connection)
            raise self._transport_error(e) from e
        if connection.result["result"] != 0:
            error = error_for_result(connection.result)
            logger.warning("LDAP bind rejected", error=error.message)
            self._close_connection(connection)
            raise error
        with self._lock:
            self._replace_connection(connection)
            self._logger = self._logger.bind(ldap_bind_dn=dn)
        logger.debug("Bound to LDAP server")

    def close(self) -> None:
        """Unbind and close the connection. Safe to call more than once."""
        with self._lock:
            self._replace_connection(None)

    def get_all_users(self) -> list[UserRecord]:
        """Return all users, in the order the server returns them."""
        entries = self._search(self._people_dn, USER_FILTER, USER_ATTRIBUTES)
        return [user_from_entry(dn, attrs) for dn, attrs in entries]

    def get_user(self, uid: str) -> UserRecord:
        """Return a single user.

        Parameters
        ----------
        uid
            User ID.

        Returns
        -------
        UserRecord
            The user.

        Raises
        ------
        NotFoundError
            Raised if the user does not exist.
        """
        dn = self.user_dn(uid)
        entries = self._search(dn, USER_FILTER, USER_ATTRIBUTES)
        if not entries:
            raise self._not_found(dn)
        return user_from_entry(*entries[0])

    def add_user(self, uid: str, user: UserWriteRequired) -> None:
        """Create a user.

        Parameters
        ----------
        uid
            User ID.
        user
            Attributes of the new user. All are required.

        Raises
        ------
        InvalidRequestError
            Raised without contacting the server if any field is empty.
        """
        if not user.is_complete:
            msg = "Missing one of required fields: cn, sn, mail, userpassword"
            raise InvalidRequestError(msg)
        dn = self.user_dn(uid)
        attributes = {
            "cn": user.cn,
            "sn": user.sn,
            "mail": user.mail,
            "uid": uid,
            "userPassword": user.userpassword,
        }
        self._execute(
            "add", dn, lambda c: c.add(dn, USER_OBJECT_CLASS, attributes)
        )

    def mod_user(self, uid: str, user: UserWriteOptional) -> None:
        """Replace the supplied attributes of a user.

        Parameters
        ----------
        uid
            User ID.
        user
            Attributes to change. Empty fields are left as they are.

        Raises
        ------
        InvalidRequestError
            Raised without contacting the server if every field is empty.
        """
        changes = user.changes
        if not changes:
            msg = "Requires one of fields: cn, sn, mail, userpassword"
            raise InvalidRequestError(msg)
        dn = self.user_dn(uid)
        modlist = {k: [(MODIFY_REPLACE, [v])] for k, v in changes.items()}
        self._execute("modify", dn, lambda c: c.modify(dn, modlist))

    def del_user(self, uid: str) -> None:
        """Delete a user.

        Group memberships are cleaned up by the server's referential
        integrity overlay, not here.
        """
        dn = self.user_dn(uid)
        self._execute("delete", dn, lambda c: c.delete(dn))

    def get_all_groups(self) -> list[GroupRecord]:
        """Return all groups, in the order the server returns them."""
        entries = self._search(
            self._groups_dn, GROUP_FILTER, GROUP_ATTRIBUTES
        )
        return [group_from_entry(dn, attrs) for dn, attrs in entries]

    def get_group(self, gid: str) -> GroupRecord:
        """Return a single group.

        Raises
        ------
        NotFoundError
            Raised if the group does not exist.
        """
        dn = self.group_dn(gid)
        entries = self._search(dn, GROUP_FILTER, GROUP_ATTRIBUTES)
        if not entries:
            raise self._not_found(dn)
        return group_from_entry(*entries[0])

    def add_group(self, gid: str, group: GroupWrite) -> None:
        """Create an empty group.

        ``groupOfNames`` requires at least one member, so the group is created
        with a single empty placeholder member.
        """
        dn = self.group_dn(gid)
        attributes = {"cn": gid, "member": [GROUP_EMPTY_MEMBER]}
        self._execute(
            "add", dn, lambda c: c.add(dn, GROUP_OBJECT_CLASS, attributes)
        )

    def mod_group(self, gid: str, group: GroupWrite) -> None:
        """Modify a group.

        Groups have no attributes that can be changed this way, so this does
        nothing and always succeeds.
        """
        self._logger.debug("Ignoring group modification", group=gid)

    def del_group(self, gid: str) -> None:
        """Delete a group."""
        dn = self.group_dn(gid)
        self._execute("delete", dn, lambda c: c.delete(dn))

    def add_user_to_group(self, uid: str, gid: str) -> None:
        """Add a user to the ``member`` attribute of a group."""
        self._modify_member(uid, gid, MODIFY_ADD)

    def del_user_from_group(self, uid: str, gid: str) -> None:
        """Remove a user from the ``member`` attribute of a group."""
        self._modify_member(uid, gid, MODIFY_DELETE)

    def _modify_member(self, uid: str, gid: str, operation: str) -> None:
        dn = self.group_dn(gid)
        modlist = {"member": [(operation, [self.user_dn(uid)])]}
        self._execute("modify", dn, lambda c: c.modify(dn, modlist))

    def _search(
        self, base: str, search: str, attributes: list[str]
    ) -> list[tuple[str, dict[str, Any]]]:
        """Perform a subtree search.

        Returns
        -------
        list of tuple
            DN and attributes of each entry found, in server order.
        """
        response = self._execute(
            "search",
            base,
            lambda c: c.search(
                base, search, search_scope=SUBTREE, attributes=attributes
            ),
        )
        return [
            (entry["dn"], dict(entry.get("attributes") or {}))
            for entry in response
            if entry.get("type") == "searchResEntry"
        ]

    def _execute(
        self, operation: str, dn: str, call: Callable[[Connection], Any]
    ) -> list[dict[str, Any]]:
        """Run one LDAP operation and check its result.

        The result and any returned entries are copied off the connection
        while the lock is held, since the next operation on the connection
        replaces them.

        Parameters
        ----------
        operation
            Name of the operation for logging.
        dn
            DN the operation acts on, for logging.
        call
            Function that performs the operation on the connection.

        Returns
        -------
        list of dict
            Entries returned by the operation. Empty except for searches.

        Raises
        ------
        DirectoryError
            Raised if the server reports a failure, or as `TransportError` if
            the exchange itself fails.
        """
        logger = self._logger.bind(ldap_operation=operation, ldap_dn=dn)
        with self._lock:
            if not self._connection:
                msg = "Not connected to LDAP server"
                raise TransportError(81, result_name(81), msg)
            connection = self._connection
            try:
                call(connection)
            except LDAPException as e:
                logger.exception("LDAP operation failed")
                raise self._transport_error(e) from e
            result = dict(connection.result)
            response = list(connection.response or [])
        if result["result"] != 0:
            error = error_for_result(result)
            logger.warning(
                "LDAP operation rejected",
                ldap_result=error.name,
                error=error.message,
            )
            raise error
        logger.debug("LDAP operation succeeded")
        return response

    def _open(self, *, user: str | None, password: str | None) -> Connection:
        connection = Connection(
            self._server,
            user=user,
            password=password,
            auto_bind=False,
            raise_exceptions=False,
        )
        try:
            connection.open()
        except LDAPException as e:
            self._logger.exception("Cannot connect to LDAP server")
            raise TransportError(91, result_name(91), str(e)) from e
        return connection

    def _replace_connection(self, connection: Connection | None) -> None:
        """Swap in a new connection and close the old one.

        Must be called with the lock held.
        """
        old = self._connection
        self._connection = connection
        if old and old is not connection:
            self._close_connection(old)

    def _close_connection(self, connection: Connection) -> None:
        if connection.closed:
            return
        try:
            connection.unbind()
        except LDAPException as e:
            self._logger.warning("Error closing LDAP connection", error=str(e))

    def _not_found(self, dn: str) -> NotFoundError:
        msg = f"No entry found for {dn}"
        self._logger.warning("LDAP entry not found", ldap_dn=dn)
        return NotFoundError(32, result_name(32), msg)

    def _transport_error(self, exc: LDAPException) -> TransportError:
        message = str(exc) or type(exc).__name__
        return TransportError(81, result_name(81), message)
