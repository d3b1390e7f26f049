"""Test fixtures."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
import structlog
from asgi_lifespan import LifespanManager
from cryptography.fernet import Fernet
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from paasldap.config import Config
from paasldap.constants import LOGGER_NAME
from paasldap.factory import Factory
from paasldap.main import create_app
from paasldap.storage.ldap import DirectoryClient

from .support.config import configure
from .support.constants import TEST_BASE_DN, TEST_HOSTNAME
from .support.ldap import MockDirectory, patch_ldap


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set default values of environment variables for testing."""
    session_secret = Fernet.generate_key().decode()
    monkeypatch.setenv("PAASLDAP_SESSION_SECRET", session_secret)


@pytest.fixture
def config(environment: None) -> Config:
    """Set up and return the default test configuration.

    Notes
    -----
    This fixture must not be async so that it can be used by the cli tests.
    """
    return configure("base")


@pytest.fixture
def mock_ldap() -> Iterator[MockDirectory]:
    """Replace the ldap3 connection API with a seeded mock directory."""
    yield from patch_ldap(TEST_BASE_DN)


@pytest_asyncio.fixture
async def app(
    config: Config, mock_ldap: MockDirectory
) -> AsyncIterator[FastAPI]:
    """Return a configured test application.

    Wraps the application in a lifespan manager so that startup and shutdown
    events are sent during test execution.
    """
    app = create_app()
    async with LifespanManager(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Return an ``httpx.AsyncClient`` configured to talk to the test app."""
    async with AsyncClient(
        base_url=f"https://{TEST_HOSTNAME}",
        transport=ASGITransport(app=app),
    ) as client:
        yield client


@pytest_asyncio.fixture
async def factory(
    config: Config, mock_ldap: MockDirectory
) -> AsyncIterator[Factory]:
    """Return a component factory outside of the web application."""
    factory = await Factory.create(config)
    yield factory
    await factory.aclose()


@pytest.fixture
def directory_client(factory: Factory) -> Iterator[DirectoryClient]:
    """Return an anonymous directory client connected to the mock."""
    client = factory.create_directory_client()
    client.connect()
    yield client
    client.close()


@pytest.fixture
def logger() -> structlog.stdlib.BoundLogger:
    """Return the application logger."""
    return structlog.get_logger(LOGGER_NAME)
