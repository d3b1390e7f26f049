"""Application definition for paasldap."""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from safir.dependencies.logger import logger_dependency

from . import __version__
from .dependencies.config import config_dependency
from .dependencies.context import context_dependency
from .exceptions import DirectoryError, NotAuthenticatedError
from .handlers import groups, index, ticket, users
from .logging import configure_uvicorn_logging
from .middleware.state import SessionCookieMiddleware
from .models.responses import AuthStatus, ErrorResponse

__all__ = ["create_app", "create_openapi"]


async def directory_error_handler(
    request: Request, exc: DirectoryError
) -> JSONResponse:
    """Report a failed directory operation as a structured error."""
    logger = await logger_dependency(request)
    logger.info(
        "Directory operation failed",
        kind=exc.kind.value,
        code=exc.code,
        error=exc.message,
    )
    body = ErrorResponse(error=exc.to_structured())
    return JSONResponse(
        status_code=exc.status_code, content=body.model_dump(mode="json")
    )


async def not_authenticated_handler(
    request: Request, exc: NotAuthenticatedError
) -> JSONResponse:
    """Report a missing or unknown session."""
    body = AuthStatus(auth=False)
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=body.model_dump(exclude_none=True),
    )


def create_app(*, load_config: bool = True) -> FastAPI:
    """Create the FastAPI application.

    This is in a function rather than using a global variable (as is more
    typical for FastAPI) because some middleware depends on configuration
    settings and we therefore want to recreate the application between tests.

    Parameters
    ----------
    load_config
        If set to `False`, do not try to load the configuration. This is used
        primarily for OpenAPI schema generation, where constructing the app is
        required but the configuration won't matter.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        config = config_dependency.config()
        await context_dependency.initialize(config)

        yield

        await context_dependency.aclose()

    app = FastAPI(
        title="paasldap",
        description=(
            "paasldap exposes the users and groups of an LDAP directory over"
            " HTTP. Clients log in with their directory credentials and every"
            " later request is performed with that directory identity."
        ),
        version=__version__,
        tags_metadata=[
            {
                "name": "session",
                "description": "Log in and out of the directory.",
            },
            {"name": "users", "description": "Directory users."},
            {"name": "groups", "description": "Directory groups."},
            {
                "name": "internal",
                "description": "Information about the running server.",
            },
        ],
        lifespan=lifespan,
    )

    # Add all of the routes.
    directory_responses: dict[int | str, dict[str, Any]] = {
        400: {"description": "Directory failure", "model": ErrorResponse},
        401: {"description": "Unauthenticated", "model": AuthStatus},
        500: {"description": "Directory unreachable", "model": ErrorResponse},
    }
    app.include_router(index.router)
    app.include_router(ticket.router)
    app.include_router(users.router, responses=directory_responses)
    app.include_router(groups.router, responses=directory_responses)

    # Load configuration if it is available to us and configure Uvicorn
    # logging.
    if load_config:
        config = config_dependency.config()
        configure_uvicorn_logging(config.log_level)

        app.add_middleware(
            SessionCookieMiddleware,
            cookie_name=config.session_cookie_name,
            parameters=config.cookie_parameters,
        )

    app.exception_handler(DirectoryError)(directory_error_handler)
    app.exception_handler(NotAuthenticatedError)(not_authenticated_handler)

    return app


def create_openapi() -> str:
    """Generate the OpenAPI schema.

    Returns
    -------
    str
        OpenAPI schema as serialized JSON.
    """
    app = create_app(load_config=False)
    schema = get_openapi(
        title=app.title,
        description=app.description,
        version=app.version,
        routes=app.routes,
    )
    return json.dumps(schema)
