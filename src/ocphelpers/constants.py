"""Global constants."""

from datetime import timedelta
from pathlib import Path

__all__ = [
    "CONFIG_FILE",
    "CONFIG_FILE_ENV_VAR",
    "DEFAULT_TAG",
    "ENV_PREFIX",
    "IMAGE_API_GROUP",
    "IMAGE_API_VERSION",
    "MAX_POLL_INTERVAL",
    "METADATA_DELAY",
    "METADATA_TIMEOUT",
    "POLL_INTERVAL",
    "ROOT_LOGGER",
]

CONFIG_FILE = Path("/etc/ocphelpers/config.yaml")
"""Default path to the configuration file."""

ENV_PREFIX = "OCPHELPERS_"
"""Prefix for environment variables overriding configuration."""

CONFIG_FILE_ENV_VAR = f"{ENV_PREFIX}CONFIG_FILE"
"""Environment variable that overrides the configuration file path."""

DEFAULT_TAG = "latest"
"""Tag assumed for image references that do not specify one."""

IMAGE_API_GROUP = "image.openshift.io"
"""API group of the OpenShift image resources."""

IMAGE_API_VERSION = "v1"
"""API version of the OpenShift image resources."""

METADATA_DELAY = timedelta(seconds=10)
"""Fixed pause used by the fixed wait strategy.

OpenShift imports image metadata asynchronously after an ``ImageStream`` is
created and provides no completion signal that the fixed strategy consults.
"""

METADATA_TIMEOUT = timedelta(minutes=5)
"""Upper bound on polling for imported image metadata."""

POLL_INTERVAL = timedelta(seconds=1)
"""Initial delay between polls for imported image metadata."""

MAX_POLL_INTERVAL = timedelta(seconds=10)
"""Maximum delay between polls once backoff has grown."""

ROOT_LOGGER = "ocphelpers"
"""Root logger name."""
