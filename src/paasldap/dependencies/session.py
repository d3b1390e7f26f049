"""Session dependency for FastAPI."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from ..exceptions import NotAuthenticatedError
from ..storage.ldap import DirectoryClient
from .context import RequestContext, context_dependency

__all__ = ["authenticate"]


async def authenticate(
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> DirectoryClient:
    """Return the directory client of the session in the request cookie.

    Raises
    ------
    NotAuthenticatedError
        Raised if the request has no session cookie or the session it names
        is not registered.
    """
    if not context.state.session:
        raise NotAuthenticatedError("No session cookie")
    client = context.session_client()
    if not client:
        context.logger.info("Unknown session token")
        raise NotAuthenticatedError("Unknown session")
    return client
