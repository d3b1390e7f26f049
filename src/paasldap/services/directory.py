"""Create-or-update of directory users and groups."""

from __future__ import annotations

from collections.abc import Callable

from structlog.stdlib import BoundLogger

from ..exceptions import DirectoryError, NotFoundError
from ..models.directory import GroupWrite, UserWriteOptional, UserWriteRequired
from ..storage.ldap import DirectoryClient

__all__ = ["DirectoryService"]


class DirectoryService:
    """Decide whether a write to a user or group creates or updates it.

    The decision is made by first looking up the target. This is not atomic:
    if the same entry is created by someone else between the lookup and the
    create, the create fails with `~paasldap.exceptions.ConflictError`, which
    is returned to the caller rather than retried.

    Parameters
    ----------
    client
        Directory client of the session making the request.
    logger
        Logger to use.
    """

    def __init__(self, client: DirectoryClient, logger: BoundLogger) -> None:
        self._client = client
        self._logger = logger

    def upsert_user(
        self,
        uid: str,
        *,
        cn: str = "",
        sn: str = "",
        mail: str = "",
        userpassword: str = "",
    ) -> None:
        """Create a user if it does not exist, otherwise modify it.

        If the lookup fails with any error other than the user not existing,
        the write is treated as a modification, and the modification reports
        whatever error the directory returns.

        Parameters
        ----------
        uid
            User ID.
        cn
            Common name.
        sn
            Surname.
        mail
            Email address.
        userpassword
            Password.

        Raises
        ------
        DirectoryError
            Raised if the create or modify fails.
        """
        if self._exists(lambda: self._client.get_user(uid)):
            self._logger.info("Modifying user", user=uid)
            update = UserWriteOptional(
                cn=cn, sn=sn, mail=mail, userpassword=userpassword
            )
            self._client.mod_user(uid, update)
        else:
            self._logger.info("Creating user", user=uid)
            create = UserWriteRequired(
                cn=cn, sn=sn, mail=mail, userpassword=userpassword
            )
            self._client.add_user(uid, create)

    def upsert_group(self, gid: str, group: GroupWrite) -> None:
        """Create a group if it does not exist, otherwise modify it."""
        if self._exists(lambda: self._client.get_group(gid)):
            self._logger.info("Modifying group", group=gid)
            self._client.mod_group(gid, group)
        else:
            self._logger.info("Creating group", group=gid)
            self._client.add_group(gid, group)

    def _exists(self, lookup: Callable[[], object]) -> bool:
        """Whether the lookup does not fail with `NotFoundError`."""
        try:
            lookup()
        except NotFoundError:
            return False
        except DirectoryError as e:
            self._logger.debug(
                "Lookup failed, treating as existing", error=e.message
            )
        return True
