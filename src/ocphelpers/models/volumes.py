"""Descriptors for pod volumes.

Each descriptor holds the parameters of one volume and compiles them on
demand into the Kubernetes ``V1Volume`` object used when assembling a pod
specification.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from collections.abc import Mapping
from typing import override

from kubernetes_asyncio.client import (
    V1ConfigMapVolumeSource,
    V1EmptyDirVolumeSource,
    V1KeyToPath,
    V1SecretVolumeSource,
    V1Volume,
    V1VolumeMount,
)

__all__ = [
    "ConfigMapVolume",
    "EmptyDirVolume",
    "SecretVolume",
    "Volume",
]


class Volume(metaclass=ABCMeta):
    """Base class for pod volume descriptors.

    Parameters
    ----------
    name
        Name of the volume within the pod.

    Raises
    ------
    ValueError
        Raised if the name is empty.
    """

    def __init__(self, name: str) -> None:
        if not name:
            raise ValueError("Volume name must not be empty")
        self._name = name

    @property
    def name(self) -> str:
        """Name of the volume within the pod."""
        return self._name

    def build(self) -> V1Volume:
        """Construct the Kubernetes object for this volume.

        Returns
        -------
        kubernetes_asyncio.client.V1Volume
            Volume suitable for inclusion in a pod specification.
        """
        volume = V1Volume(name=self._name)
        self._add_volume_parameters(volume)
        return volume

    def build_mount(
        self,
        mount_path: str,
        *,
        read_only: bool = False,
        sub_path: str | None = None,
    ) -> V1VolumeMount:
        """Construct a mount of this volume for a container.

        Parameters
        ----------
        mount_path
            Path inside the container at which to mount the volume.
        read_only
            Whether to mount the volume read-only.
        sub_path
            Path within the volume to mount instead of its root, if given.

        Returns
        -------
        kubernetes_asyncio.client.V1VolumeMount
            Volume mount suitable for inclusion in a container.
        """
        return V1VolumeMount(
            name=self._name,
            mount_path=mount_path,
            read_only=read_only,
            sub_path=sub_path,
        )

    @abstractmethod
    def _add_volume_parameters(self, volume: V1Volume) -> None:
        """Add the source of the volume to the Kubernetes object."""


class SecretVolume(Volume):
    """Volume populated from a ``Secret``.

    Parameters
    ----------
    name
        Name of the volume within the pod.
    secret_name
        Name of the ``Secret`` providing the files.
    items
        If given, mapping of keys in the secret to relative paths in the
        volume. Only those keys are projected, in mapping order. Otherwise,
        every key of the secret becomes a file named after the key.
    default_mode
        File mode bits for the projected files, if given.

    Raises
    ------
    ValueError
        Raised if the name or secret name is empty.
    """

    def __init__(
        self,
        name: str,
        secret_name: str,
        items: Mapping[str, str] | None = None,
        *,
        default_mode: int | None = None,
    ) -> None:
        super().__init__(name)
        if not secret_name:
            raise ValueError("Secret name must not be empty")
        self._secret_name = secret_name
        self._items = dict(items) if items else None
        self._default_mode = default_mode

    @property
    def secret_name(self) -> str:
        """Name of the ``Secret`` providing the files."""
        return self._secret_name

    @override
    def _add_volume_parameters(self, volume: V1Volume) -> None:
        volume.secret = V1SecretVolumeSource(
            secret_name=self._secret_name,
            items=_build_items(self._items),
            default_mode=self._default_mode,
        )


class ConfigMapVolume(Volume):
    """Volume populated from a ``ConfigMap``.

    Parameters
    ----------
    name
        Name of the volume within the pod.
    config_map_name
        Name of the ``ConfigMap`` providing the files.
    items
        If given, mapping of keys in the config map to relative paths in the
        volume, with the same semantics as for `SecretVolume`.
    default_mode
        File mode bits for the projected files, if given.

    Raises
    ------
    ValueError
        Raised if the name or config map name is empty.
    """

    def __init__(
        self,
        name: str,
        config_map_name: str,
        items: Mapping[str, str] | None = None,
        *,
        default_mode: int | None = None,
    ) -> None:
        super().__init__(name)
        if not config_map_name:
            raise ValueError("ConfigMap name must not be empty")
        self._config_map_name = config_map_name
        self._items = dict(items) if items else None
        self._default_mode = default_mode

    @property
    def config_map_name(self) -> str:
        """Name of the ``ConfigMap`` providing the files."""
        return self._config_map_name

    @override
    def _add_volume_parameters(self, volume: V1Volume) -> None:
        volume.config_map = V1ConfigMapVolumeSource(
            name=self._config_map_name,
            items=_build_items(self._items),
            default_mode=self._default_mode,
        )


class EmptyDirVolume(Volume):
    """Scratch volume that lives as long as the pod.

    Parameters
    ----------
    name
        Name of the volume within the pod.
    medium
        Storage medium, such as ``Memory``, if not the node default.
    size_limit
        Kubernetes quantity limiting the size of the volume, if given.
    """

    def __init__(
        self,
        name: str,
        *,
        medium: str | None = None,
        size_limit: str | None = None,
    ) -> None:
        super().__init__(name)
        self._medium = medium
        self._size_limit = size_limit

    @override
    def _add_volume_parameters(self, volume: V1Volume) -> None:
        volume.empty_dir = V1EmptyDirVolumeSource(
            medium=self._medium, size_limit=self._size_limit
        )


def _build_items(items: Mapping[str, str] | None) -> list[V1KeyToPath] | None:
    """Convert a key to path mapping into Kubernetes item objects."""
    if not items:
        return None
    return [V1KeyToPath(key=k, path=p) for k, p in items.items()]
