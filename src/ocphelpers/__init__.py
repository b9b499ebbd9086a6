"""Helpers for provisioning and introspecting OpenShift test workloads."""

from importlib.metadata import PackageNotFoundError, version

from .models.image import ImageReference
from .models.volumes import ConfigMapVolume, EmptyDirVolume, SecretVolume
from .services.metadata import ImageMetadata, ImageMetadataResolver

__all__ = [
    "ConfigMapVolume",
    "EmptyDirVolume",
    "ImageMetadata",
    "ImageMetadataResolver",
    "ImageReference",
    "SecretVolume",
    "__version__",
]


__version__: str
"""The application version string (PEP 440 / SemVer compatible)."""

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0"
