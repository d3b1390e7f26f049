"""A session-bound HTTP gateway to LDAP users and groups."""

from importlib.metadata import PackageNotFoundError, version

__all__ = ["__version__"]

try:
    __version__ = version("paasldap")
except PackageNotFoundError:
    # The package is not installed, such as when running from a source tree.
    __version__ = "0.0.0"
