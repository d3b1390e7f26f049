"""Configuration for paasldap.

paasldap is configured by a YAML file. Secrets and a few deployment-specific
settings may instead be injected via environment variables, which take
precedence over the file. Every setting that accepts an environment variable
uses the ``PAASLDAP_`` prefix and has an explicit ``validation_alias``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, NotRequired, Self, TypedDict, override

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    UrlConstraints,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import Url
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from safir.logging import LogLevel, Profile, configure_logging

from .constants import COOKIE_NAME, GROUPS_OU, LOGGER_NAME, PEOPLE_OU

LdapDsn = Annotated[
    Url, UrlConstraints(allowed_schemes=["ldap", "ldaps"], host_required=True)
]
"""DSN for connecting to an LDAP server."""

__all__ = [
    "Config",
    "CookieConfig",
    "CookieParameters",
    "LDAPConfig",
    "LdapDsn",
]


class CookieParameters(TypedDict):
    """Settings passed to `fastapi.Response.set_cookie` to set cookies."""

    path: str
    httponly: bool
    secure: bool
    max_age: NotRequired[int]


class CamelCaseSettings(BaseSettings):
    """Base class for Pydantic settings supporting camel-case.

    This base class also forbids all extra attributes. Environment variables
    override values from the configuration file.
    """

    model_config = SettingsConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    @override
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Override the sources of settings.

        Deactivate :file:`.env` and secret file support and allow environment
        variables to override init parameters, since init parameters come
        from the YAML configuration file.
        """
        return (env_settings, init_settings)


class CookieConfig(BaseModel):
    """Attributes of the session cookie."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    path: str = Field("/", title="Cookie path")

    http_only: bool = Field(
        True,
        title="HttpOnly flag",
        description="Whether to hide the cookie from JavaScript",
    )

    secure: bool = Field(
        True,
        title="Secure flag",
        description="Whether to only send the cookie over HTTPS",
    )

    max_age: int | None = Field(
        None,
        title="Cookie lifetime",
        description=(
            "Lifetime of the cookie in seconds. If not set, the cookie lasts"
            " until the browser is closed. This bounds the browser side of"
            " the session only; the server keeps the directory connection"
            " until logout or restart."
        ),
        ge=1,
    )


class LDAPConfig(BaseModel):
    """Configuration for the directory server."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    url: LdapDsn = Field(
        ...,
        title="LDAP server URL",
        description="URL of LDAP server to query for user and group data",
    )

    base_dn: str = Field(
        ...,
        title="Base DN",
        description=(
            "Base DN of the directory. Users are stored under"
            f" ``{PEOPLE_OU},<baseDn>`` and groups under"
            f" ``{GROUPS_OU},<baseDn>``."
        ),
        examples=["dc=example,dc=com"],
    )

    @field_validator("base_dn")
    @classmethod
    def _validate_base_dn(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("baseDn must not be empty")
        return v.strip()

    @property
    def people_dn(self) -> str:
        """DN of the subtree holding user entries."""
        return f"{PEOPLE_OU},{self.base_dn}"

    @property
    def groups_dn(self) -> str:
        """DN of the subtree holding group entries."""
        return f"{GROUPS_OU},{self.base_dn}"


class Config(CamelCaseSettings):
    """Configuration for paasldap."""

    listen_port: int = Field(
        8082,
        title="Listen port",
        description="Port on which ``paasldap run`` listens",
        ge=1,
        le=65535,
    )

    log_level: LogLevel = Field(
        LogLevel.INFO,
        title="Logging level",
        description="Python logging level",
        validation_alias=AliasChoices("PAASLDAP_LOG_LEVEL", "logLevel"),
    )

    log_profile: Profile = Field(
        Profile.production,
        title="Logging profile",
        description="Logging profile (``production`` or ``development``)",
        validation_alias=AliasChoices("PAASLDAP_LOG_PROFILE", "logProfile"),
    )

    ldap: LDAPConfig = Field(..., title="LDAP configuration")

    session_secret: SecretStr = Field(
        ...,
        title="Session encryption key",
        description=(
            "Fernet key used to encrypt the session cookie. Generate one"
            " with ``paasldap generate-session-secret``."
        ),
        validation_alias=AliasChoices(
            "PAASLDAP_SESSION_SECRET", "sessionSecret"
        ),
    )

    session_cookie_name: str = Field(
        COOKIE_NAME,
        title="Session cookie name",
        description="Name of the cookie holding the encrypted session",
    )

    session_cookie: CookieConfig = Field(
        default_factory=CookieConfig,
        title="Session cookie attributes",
    )

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Construct a Config object from a configuration file.

        Parameters
        ----------
        path
            Path to the configuration file in YAML.

        Returns
        -------
        Config
            The corresponding `Config` object.
        """
        with path.open("r") as f:
            return cls(**yaml.safe_load(f))

    @property
    def cookie_parameters(self) -> CookieParameters:
        """Parameters to pass to `fastapi.Response.set_cookie`."""
        parameters = CookieParameters(
            path=self.session_cookie.path,
            httponly=self.session_cookie.http_only,
            secure=self.session_cookie.secure,
        )
        if self.session_cookie.max_age:
            parameters["max_age"] = self.session_cookie.max_age
        return parameters

    def configure_logging(self) -> None:
        """Configure logging based on the paasldap configuration."""
        configure_logging(
            name=LOGGER_NAME,
            profile=self.log_profile,
            log_level=self.log_level,
            add_timestamp=True,
        )
