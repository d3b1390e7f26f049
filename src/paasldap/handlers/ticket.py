"""Login and logout handlers (``/ticket``).

A ticket is the encrypted session cookie. Creating one binds a new directory
connection with the supplied credentials and registers it under a fresh
session token. Deleting it unbinds that connection.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import JSONResponse

from ..dependencies.context import RequestContext, context_dependency
from ..exceptions import DirectoryError
from ..models.responses import AuthStatus

router = APIRouter()

__all__ = ["delete_ticket", "post_ticket"]


def _auth_response(status_code: int, error: str | None = None) -> JSONResponse:
    body = AuthStatus(auth=False, error=error)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


@router.post(
    "/ticket",
    response_model=AuthStatus,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Bad credentials", "model": AuthStatus},
        500: {"description": "Directory unreachable", "model": AuthStatus},
    },
    summary="Log in",
    tags=["session"],
)
def post_ticket(
    context: Annotated[RequestContext, Depends(context_dependency)],
    username: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
) -> AuthStatus | JSONResponse:
    """Bind to the directory as a user and start a session.

    On success, the session token is stored in the encrypted session cookie.
    Any session the cookie previously named is ended.
    """
    if not username or not password:
        msg = "Missing one of required fields: username, password"
        return _auth_response(status.HTTP_400_BAD_REQUEST, msg)
    context.rebind_logger(user=username)

    client = context.factory.create_directory_client()
    try:
        client.bind(username, password)
    except DirectoryError as e:
        client.close()
        context.logger.warning("Login failed", error=e.message)
        return _auth_response(e.status_code, f"{e.name}: {e.message}")

    context.start_session(client)
    context.logger.info("Successful login")
    return AuthStatus(auth=True)


@router.delete(
    "/ticket",
    response_model=AuthStatus,
    response_model_exclude_none=True,
    status_code=status.HTTP_401_UNAUTHORIZED,
    summary="Log out",
    tags=["session"],
)
def delete_ticket(
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> JSONResponse:
    """End the session and expire the session cookie.

    Always reports ``{"auth": false}`` with a 401 status, since the client
    is not authenticated afterwards.
    """
    if not context.state.session:
        context.logger.info("Logout of already-logged-out session")
    elif context.end_session():
        context.logger.info("Successful logout")
    else:
        context.logger.info("Logout of unknown session")
    return _auth_response(status.HTTP_401_UNAUTHORIZED)
