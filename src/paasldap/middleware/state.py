"""Session cookie middleware."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import override

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import CookieParameters
from ..models.state import State

__all__ = ["SessionCookieMiddleware"]


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """Decrypt the session cookie on the way in and update it on the way out.

    The decrypted `~paasldap.models.state.State` is available to handlers as
    ``request.state.cookie``. If a handler replaces it with a different
    state, the new state is encrypted into the response cookie, or the cookie
    is expired if the new state is empty.

    Parameters
    ----------
    app
        The ASGI application.
    cookie_name
        Name of the session cookie.
    parameters
        Attributes of the session cookie.
    """

    def __init__(
        self,
        app: FastAPI,
        *,
        cookie_name: str,
        parameters: CookieParameters,
    ) -> None:
        super().__init__(app)
        self._cookie_name = cookie_name
        self._parameters = parameters

    @override
    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        original = await self._load(request)
        request.state.cookie = replace(original)
        response = await call_next(request)

        current: State = request.state.cookie
        if current == original:
            return response
        if current.is_empty():
            response.delete_cookie(
                self._cookie_name,
                path=self._parameters["path"],
                secure=self._parameters["secure"],
                httponly=self._parameters["httponly"],
            )
        else:
            response.set_cookie(
                self._cookie_name, current.to_cookie(), **self._parameters
            )
        return response

    async def _load(self, request: Request) -> State:
        cookie = request.cookies.get(self._cookie_name)
        if not cookie:
            return State()
        return await State.from_cookie(cookie, request)
