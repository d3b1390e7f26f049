"""Handlers for directory groups (``/groups``)."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ..dependencies.context import RequestContext, context_dependency
from ..dependencies.session import authenticate
from ..models.directory import GroupWrite
from ..models.responses import (
    DirectoryResponse,
    GroupListResponse,
    GroupResponse,
)
from ..storage.ldap import DirectoryClient
from ..translate import group_to_payload

router = APIRouter(tags=["groups"])

__all__ = [
    "delete_group",
    "delete_group_member",
    "get_group",
    "get_groups",
    "post_group",
    "post_group_member",
]


@router.get(
    "/groups",
    response_model=GroupListResponse,
    summary="List groups",
)
def get_groups(
    client: Annotated[DirectoryClient, Depends(authenticate)],
) -> GroupListResponse:
    groups = client.get_all_groups()
    return GroupListResponse(groups=[group_to_payload(g) for g in groups])


@router.get(
    "/groups/{gid}",
    response_model=GroupResponse,
    summary="Get group",
)
def get_group(
    gid: str, client: Annotated[DirectoryClient, Depends(authenticate)]
) -> GroupResponse:
    return GroupResponse(group=group_to_payload(client.get_group(gid)))


@router.post(
    "/groups/{gid}",
    response_model=DirectoryResponse,
    summary="Create or modify group",
)
def post_group(
    gid: str,
    client: Annotated[DirectoryClient, Depends(authenticate)],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> DirectoryResponse:
    """Create the group if it does not exist.

    A new group has no members. Modifying an existing group changes nothing,
    since membership is managed through the ``members`` routes.
    """
    service = context.factory.create_directory_service(client)
    service.upsert_group(gid, GroupWrite())
    return DirectoryResponse()


@router.delete(
    "/groups/{gid}",
    response_model=DirectoryResponse,
    summary="Delete group",
)
def delete_group(
    gid: str,
    client: Annotated[DirectoryClient, Depends(authenticate)],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> DirectoryResponse:
    client.del_group(gid)
    context.logger.info("Deleted group", group=gid)
    return DirectoryResponse()


@router.post(
    "/groups/{gid}/members/{uid}",
    response_model=DirectoryResponse,
    summary="Add group member",
)
def post_group_member(
    gid: str,
    uid: str,
    client: Annotated[DirectoryClient, Depends(authenticate)],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> DirectoryResponse:
    client.add_user_to_group(uid, gid)
    context.logger.info("Added group member", group=gid, user=uid)
    return DirectoryResponse()


@router.delete(
    "/groups/{gid}/members/{uid}",
    response_model=DirectoryResponse,
    summary="Remove group member",
)
def delete_group_member(
    gid: str,
    uid: str,
    client: Annotated[DirectoryClient, Depends(authenticate)],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> DirectoryResponse:
    client.del_user_from_group(uid, gid)
    context.logger.info("Removed group member", group=gid, user=uid)
    return DirectoryResponse()
