"""Configuration dependency for FastAPI."""

from __future__ import annotations

import os
from pathlib import Path

from ..config import Config
from ..constants import CONFIG_PATH

__all__ = ["ConfigDependency", "config_dependency"]


class ConfigDependency:
    """Load the paasldap configuration on first use and cache it.

    The path comes from ``PAASLDAP_CONFIG_PATH`` if set, otherwise the
    standard location. The test suite switches between configuration files
    with `set_config_path`. Loading a configuration also configures logging.
    """

    def __init__(self) -> None:
        self._path = Path(os.getenv("PAASLDAP_CONFIG_PATH", CONFIG_PATH))
        self._config: Config | None = None

    async def __call__(self) -> Config:
        """Return the configuration, loading it if needed."""
        return self.config()

    def config(self) -> Config:
        """Return the configuration, loading it if needed.

        Unlike calling the dependency, this is usable from synchronous code
        such as the command-line interface and the cookie encoder.
        """
        if self._config is None:
            self._config = self._load()
        return self._config

    def set_config_path(self, path: Path) -> None:
        """Switch to a different configuration file and load it.

        Parameters
        ----------
        path
            Path to the new configuration file.
        """
        self._path = path
        self._config = self._load()

    def _load(self) -> Config:
        config = Config.from_file(self._path)
        config.configure_logging()
        return config


config_dependency = ConfigDependency()
"""The dependency that will return the current configuration."""
