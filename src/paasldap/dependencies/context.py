"""Request context dependency for FastAPI.

Gathers the configuration, the request logger, the component factory and the
session cookie into one object so that handlers can work with the caller's
session without reaching into the request state or the session registry
directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, Request
from safir.dependencies.logger import logger_dependency
from structlog.stdlib import BoundLogger

from ..config import Config
from ..factory import Factory, ProcessContext
from ..models.state import State
from ..storage.ldap import DirectoryClient

__all__ = [
    "ContextDependency",
    "RequestContext",
    "context_dependency",
]


@dataclass(slots=True)
class RequestContext:
    """Holds the incoming request and its surrounding context."""

    request: Request
    """The incoming request."""

    config: Config
    """paasldap's configuration."""

    logger: BoundLogger
    """The request logger, rebound with discovered context."""

    factory: Factory
    """The component factory."""

    @property
    def state(self) -> State:
        """Decrypted session cookie."""
        return self.request.state.cookie

    @state.setter
    def state(self, state: State) -> None:
        self.request.state.cookie = state

    def session_client(self) -> DirectoryClient | None:
        """Return the directory client of the caller's session, if any."""
        if not self.state.session:
            return None
        return self.factory.session_store.get(self.state.session)

    def start_session(self, client: DirectoryClient) -> None:
        """Register a bound client as the caller's session.

        Any session the cookie already names is ended first, so one browser
        never holds more than one open directory connection.

        Parameters
        ----------
        client
            Directory client bound as the authenticated user.
        """
        self.end_session()
        token = self.factory.session_store.create(client)
        self.state = State(session=token)

    def end_session(self) -> bool:
        """End the session the cookie names and clear the cookie.

        Returns
        -------
        bool
            Whether a registered session was ended. `False` if the cookie
            named no session or one the server no longer knows.
        """
        token = self.state.session
        if not token:
            return False
        self.state = State()
        client = self.factory.session_store.delete(token)
        if not client:
            return False
        client.close()
        return True

    def rebind_logger(self, **values: Any) -> None:
        """Add the given values to the logging context.

        Parameters
        ----------
        **values
            Additional values that should be added to the logging context.
        """
        self.logger = self.logger.bind(**values)
        self.factory.set_logger(self.logger)


class ContextDependency:
    """Provide a per-request context as a FastAPI dependency.

    The configuration and the session registry are shared by every request
    and held in a `~paasldap.factory.ProcessContext`, which is created by
    `initialize` during application startup and closed by `aclose` at
    shutdown.
    """

    def __init__(self) -> None:
        self._process_context: ProcessContext | None = None

    async def __call__(
        self,
        request: Request,
        logger: Annotated[BoundLogger, Depends(logger_dependency)],
    ) -> RequestContext:
        """Create a per-request context and return it."""
        context = self.process_context
        return RequestContext(
            request=request,
            config=context.config,
            logger=logger,
            factory=Factory(context, logger),
        )

    @property
    def process_context(self) -> ProcessContext:
        """The shared process context."""
        if not self._process_context:
            raise RuntimeError("ContextDependency not initialized")
        return self._process_context

    async def aclose(self) -> None:
        """Close all sessions and discard the process context."""
        if self._process_context:
            await self._process_context.aclose()
        self._process_context = None

    async def initialize(self, config: Config) -> None:
        """Create the process context, replacing any existing one.

        Parameters
        ----------
        config
            paasldap configuration.
        """
        await self.aclose()
        self._process_context = await ProcessContext.from_config(config)


context_dependency = ContextDependency()
"""The dependency that will return the per-request context."""
