"""Handler for the server version, ``/version``."""

from fastapi import APIRouter

from .. import __version__
from ..models.responses import VersionInfo

router = APIRouter()

__all__ = ["get_version"]


@router.get(
    "/version",
    response_model=VersionInfo,
    summary="Server version",
    tags=["internal"],
)
async def get_version() -> VersionInfo:
    """Return the version of the running server."""
    return VersionInfo(version=__version__)
