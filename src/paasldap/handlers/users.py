"""Handlers for directory users (``/users``)."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Form

from ..dependencies.context import RequestContext, context_dependency
from ..dependencies.session import authenticate
from ..models.responses import (
    DirectoryResponse,
    UserListResponse,
    UserResponse,
)
from ..storage.ldap import DirectoryClient
from ..translate import user_to_payload

router = APIRouter(tags=["users"])

__all__ = ["delete_user", "get_user", "get_users", "post_user"]


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List users",
)
def get_users(
    client: Annotated[DirectoryClient, Depends(authenticate)],
) -> UserListResponse:
    users = client.get_all_users()
    return UserListResponse(users=[user_to_payload(u) for u in users])


@router.get(
    "/users/{uid}",
    response_model=UserResponse,
    summary="Get user",
)
def get_user(
    uid: str, client: Annotated[DirectoryClient, Depends(authenticate)]
) -> UserResponse:
    return UserResponse(user=user_to_payload(client.get_user(uid)))


@router.post(
    "/users/{uid}",
    response_model=DirectoryResponse,
    summary="Create or modify user",
)
def post_user(
    uid: str,
    client: Annotated[DirectoryClient, Depends(authenticate)],
    context: Annotated[RequestContext, Depends(context_dependency)],
    cn: Annotated[str, Form()] = "",
    sn: Annotated[str, Form()] = "",
    mail: Annotated[str, Form()] = "",
    userpassword: Annotated[str, Form()] = "",
) -> DirectoryResponse:
    """Create the user if it does not exist, otherwise modify it.

    All fields are required when creating a user. When modifying one, only
    the fields given are changed, and at least one must be given.
    """
    service = context.factory.create_directory_service(client)
    service.upsert_user(
        uid, cn=cn, sn=sn, mail=mail, userpassword=userpassword
    )
    return DirectoryResponse()


@router.delete(
    "/users/{uid}",
    response_model=DirectoryResponse,
    summary="Delete user",
)
def delete_user(
    uid: str,
    client: Annotated[DirectoryClient, Depends(authenticate)],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> DirectoryResponse:
    client.del_user(uid)
    context.logger.info("Deleted user", user=uid)
    return DirectoryResponse()
