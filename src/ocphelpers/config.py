"""Configuration for the OpenShift test helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Self

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from safir.logging import LogLevel, Profile, configure_logging
from safir.pydantic import HumanTimedelta

from .constants import (
    ENV_PREFIX,
    MAX_POLL_INTERVAL,
    METADATA_DELAY,
    METADATA_TIMEOUT,
    POLL_INTERVAL,
    ROOT_LOGGER,
)
from .models.resolution import WaitStrategy

__all__ = ["Config", "EnvFirstSettings"]


class EnvFirstSettings(BaseSettings):
    """Settings whose environment variables win over constructor arguments.

    Constructor arguments normally come from the YAML configuration file, and
    an ``OCPHELPERS_``-prefixed environment variable must be able to override
    any of them in a test run.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX, extra="forbid", validate_by_name=True
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Read the environment first, then constructor arguments.

        Dotenv and secret files are not consulted.
        """
        return (env_settings, init_settings)


class Config(EnvFirstSettings):
    """Configuration for resolving image metadata and building volumes."""

    namespace: Annotated[
        str,
        Field(
            title="Namespace",
            description="Namespace in which image streams are created",
        ),
    ] = "default"

    wait_strategy: Annotated[
        WaitStrategy,
        Field(
            title="Wait strategy",
            description=(
                "How to wait for OpenShift to import image metadata. The"
                " fixed strategy sleeps for metadataDelay and then reads the"
                " image stream tag once; the poll strategy polls until the"
                " metadata appears or metadataTimeout expires."
            ),
            validation_alias=AliasChoices(
                ENV_PREFIX + "WAIT_STRATEGY", "waitStrategy"
            ),
        ),
    ] = WaitStrategy.POLL

    metadata_delay: Annotated[
        HumanTimedelta,
        Field(
            title="Fixed metadata delay",
            description="How long the fixed wait strategy sleeps",
            validation_alias=AliasChoices(
                ENV_PREFIX + "METADATA_DELAY", "metadataDelay"
            ),
        ),
    ] = METADATA_DELAY

    metadata_timeout: Annotated[
        HumanTimedelta,
        Field(
            title="Metadata polling timeout",
            description="Limit on the whole resolution with polling",
            validation_alias=AliasChoices(
                ENV_PREFIX + "METADATA_TIMEOUT", "metadataTimeout"
            ),
        ),
    ] = METADATA_TIMEOUT

    poll_interval: Annotated[
        HumanTimedelta,
        Field(
            title="Initial polling interval",
            description="First delay between polls, doubled after each",
            validation_alias=AliasChoices(
                ENV_PREFIX + "POLL_INTERVAL", "pollInterval"
            ),
        ),
    ] = POLL_INTERVAL

    max_poll_interval: Annotated[
        HumanTimedelta,
        Field(
            title="Maximum polling interval",
            description="Upper bound on the delay between polls",
            validation_alias=AliasChoices(
                ENV_PREFIX + "MAX_POLL_INTERVAL", "maxPollInterval"
            ),
        ),
    ] = MAX_POLL_INTERVAL

    debug: Annotated[
        bool,
        Field(
            title="Debug mode",
            description=(
                "Log at debug level in human-readable form, overriding"
                " logLevel and logProfile"
            ),
        ),
    ] = False

    log_profile: Annotated[
        Profile,
        Field(
            title="Logging profile",
            description="Structured JSON logs, or development output",
            validation_alias=AliasChoices(
                ENV_PREFIX + "LOG_PROFILE", "logProfile"
            ),
        ),
    ] = Profile.production

    log_level: Annotated[
        LogLevel,
        Field(
            title="Log level",
            description="Minimum level of messages to log",
            validation_alias=AliasChoices(
                ENV_PREFIX + "LOG_LEVEL", "logLevel"
            ),
        ),
    ] = LogLevel.INFO

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load the configuration from a YAML file.

        Keys use the camelCase aliases. An empty file yields the defaults,
        and environment variables still override what the file sets.

        Parameters
        ----------
        path
            YAML file to read.

        Returns
        -------
        Config
            Parsed configuration.

        Raises
        ------
        pydantic.ValidationError
            Raised if the file contains unknown or invalid settings.
        """
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def configure_logging(self) -> None:
        """Set up structlog and the ``ocphelpers`` logger."""
        if self.debug:
            log_level = LogLevel.DEBUG
            log_profile = Profile.development
        else:
            log_level = self.log_level
            log_profile = self.log_profile

        configure_logging(
            profile=log_profile, log_level=log_level, name=ROOT_LOGGER
        )
