"""Create paasldap components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

import structlog
from structlog.stdlib import BoundLogger

from .config import Config
from .constants import LOGGER_NAME
from .services.directory import DirectoryService
from .storage.ldap import DirectoryClient
from .storage.session import SessionStore

__all__ = ["Factory", "ProcessContext"]


@dataclass(frozen=True, slots=True)
class ProcessContext:
    """Per-process application context.

    This object holds the per-process singletons that are reused for every
    request and only need to be recreated if the application configuration
    changes.
    """

    config: Config
    """paasldap's configuration."""

    session_store: SessionStore
    """Registry of authenticated sessions."""

    @classmethod
    async def from_config(cls, config: Config) -> Self:
        """Create a new process context from the paasldap configuration.

        Parameters
        ----------
        config
            The paasldap configuration.

        Returns
        -------
        ProcessContext
            Shared context for a paasldap process.
        """
        return cls(config=config, session_store=SessionStore())

    async def aclose(self) -> None:
        """Clean up a process context.

        Called during shutdown, or before recreating the process context using
        a different configuration. Closes the directory connections of all
        sessions.
        """
        self.session_store.clear()


class Factory:
    """Build paasldap components.

    Uses the contents of a `ProcessContext` to construct the components of the
    application on demand.

    Parameters
    ----------
    context
        Shared process context.
    logger
        Logger to use for errors.
    """

    @classmethod
    async def create(cls, config: Config) -> Self:
        """Create a component factory outside of a request.

        Parameters
        ----------
        config
            paasldap configuration.

        Returns
        -------
        Factory
            Newly-created factory. The caller must call `aclose` on the
            returned object during shutdown.
        """
        logger = structlog.get_logger(LOGGER_NAME)
        context = await ProcessContext.from_config(config)
        return cls(context, logger)

    def __init__(self, context: ProcessContext, logger: BoundLogger) -> None:
        self._context = context
        self._logger = logger

    @property
    def session_store(self) -> SessionStore:
        """Registry of authenticated sessions."""
        return self._context.session_store

    async def aclose(self) -> None:
        """Shut down the factory and the process context."""
        await self._context.aclose()

    def create_directory_client(self) -> DirectoryClient:
        """Create a new, unconnected directory client.

        Returns
        -------
        DirectoryClient
            Client for the configured directory server.
        """
        return DirectoryClient(self._context.config.ldap, self._logger)

    def create_directory_service(
        self, client: DirectoryClient
    ) -> DirectoryService:
        """Create the service that creates or updates users and groups.

        Parameters
        ----------
        client
            Directory client of the current session.

        Returns
        -------
        DirectoryService
            Newly-created service.
        """
        return DirectoryService(client, self._logger)

    def set_logger(self, logger: BoundLogger) -> None:
        """Replace the internal logger.

        Used by the context dependency to update the logger for all
        newly-created components when it's rebound with additional context.

        Parameters
        ----------
        logger
            New logger.
        """
        self._logger = logger
