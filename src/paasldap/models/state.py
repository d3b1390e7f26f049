"""Contents of the encrypted session cookie."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Self

from cryptography.fernet import Fernet, InvalidToken
from fastapi import Request
from safir.dependencies.logger import logger_dependency

from ..dependencies.config import config_dependency

__all__ = ["State"]


def _fernet() -> Fernet:
    secret = config_dependency.config().session_secret.get_secret_value()
    return Fernet(secret.encode())


@dataclass
class State:
    """State stored in the session cookie.

    The cookie holds only the session token. The bound directory connection
    it names lives in the server's session registry.
    """

    session: str | None = None
    """Session token, if the browser has logged in."""

    @classmethod
    async def from_cookie(
        cls, cookie: str, request: Request | None = None
    ) -> Self:
        """Decrypt the session cookie.

        A cookie that cannot be decrypted or parsed yields an empty state, so
        the browser is treated as logged out.

        Parameters
        ----------
        cookie
            The encrypted cookie value.
        request
            The request, used to log invalid cookies. The test suite may omit
            it.

        Returns
        -------
        State
            The state represented by the cookie.
        """
        try:
            data = json.loads(_fernet().decrypt(cookie.encode()))
            session = data.get("session")
        except (InvalidToken, ValueError, AttributeError) as e:
            if request:
                error = type(e).__name__
                if str(e):
                    error += f": {e!s}"
                logger = await logger_dependency(request)
                logger.warning(
                    "Discarding invalid session cookie", error=error
                )
            return cls()
        return cls(session=session if isinstance(session, str) else None)

    def is_empty(self) -> bool:
        """Whether there is nothing to store, so the cookie can be dropped."""
        return self.session is None

    def to_cookie(self) -> str:
        """Encrypt the state for storage in the session cookie."""
        data = {"session": self.session} if self.session else {}
        return _fernet().encrypt(json.dumps(data).encode()).decode()
