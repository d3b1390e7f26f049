"""Registry of authenticated sessions."""

from __future__ import annotations

import threading

from ..util import random_128_bits
from .ldap import DirectoryClient

__all__ = ["SessionStore"]


class SessionStore:
    """Maps session tokens to bound directory clients.

    This is the only state shared between requests. It lives in memory, so
    sessions do not survive a restart and are not shared between processes.
    Sessions have no expiration of their own and last until they are deleted.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, DirectoryClient] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self, client: DirectoryClient) -> str:
        """Register a bound client under a new session token.

        Parameters
        ----------
        client
            Directory client bound as the authenticated user.

        Returns
        -------
        str
            Newly-minted session token, never previously issued.
        """
        with self._lock:
            token = random_128_bits()
            while token in self._sessions:
                token = random_128_bits()
            self._sessions[token] = client
            return token

    def get(self, token: str) -> DirectoryClient | None:
        """Look up the client for a session token.

        Returns
        -------
        DirectoryClient or None
            The client, or `None` if there is no such session.
        """
        with self._lock:
            return self._sessions.get(token)

    def delete(self, token: str) -> DirectoryClient | None:
        """Remove a session.

        Removing a session that does not exist is not an error. The caller is
        responsible for closing the returned client.

        Returns
        -------
        DirectoryClient or None
            The client that was registered, if any.
        """
        with self._lock:
            return self._sessions.pop(token, None)

    def clear(self) -> None:
        """Remove all sessions and close their clients."""
        with self._lock:
            clients = list(self._sessions.values())
            self._sessions.clear()
        for client in clients:
            client.close()
