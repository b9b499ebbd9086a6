"""Resolution of container image metadata through OpenShift."""

from __future__ import annotations

import asyncio
import json
import re
from collections.abc import Mapping
from datetime import timedelta
from types import MappingProxyType
from typing import Any

from structlog.stdlib import BoundLogger

from ..constants import (
    MAX_POLL_INTERVAL,
    METADATA_DELAY,
    METADATA_TIMEOUT,
    POLL_INTERVAL,
)
from ..exceptions import (
    ClusterCommunicationError,
    MetadataFormatError,
    MissingFieldError,
)
from ..models.image import ImageReference
from ..models.metadata import MetadataNode, MetadataPath, NodeType
from ..models.resolution import WaitStrategy
from ..storage.imagestream import ImageStreamStorage, ImageStreamTagStorage
from ..timeout import Timeout

__all__ = ["ImageMetadata", "ImageMetadataResolver"]

_PORT_REGEX = re.compile(r"([0-9]+)/([A-Za-z0-9]+)")
"""Key of an exposed port, such as ``8080/tcp``."""


def _label_value(node: MetadataNode) -> str:
    if node.type == NodeType.SCALAR:
        return node.as_string()
    return json.dumps(node.to_json())


class ImageMetadata:
    """Container runtime configuration of a resolved image.

    Wraps the metadata document of one image and provides typed access to
    the commonly needed fields. The document is never modified, so every
    method is a pure read and may be called any number of times.

    Parameters
    ----------
    metadata
        Root of the image metadata document.
    """

    def __init__(self, metadata: MetadataNode) -> None:
        self._metadata = metadata

    @property
    def metadata(self) -> MetadataNode:
        """Full image metadata document."""
        return self._metadata

    def labels(self) -> dict[str, str]:
        """Return the labels of the image.

        Returns
        -------
        dict of str
            Label names to values, in document order. Empty if the image has
            no labels. Values that are not scalars, including JSON
            ``null``, are rendered as JSON.
        """
        node = self._get(MetadataPath.LABELS)
        return {k: _label_value(v) for k, v in node.as_properties()}

    def command(self) -> str:
        """Return the default command of the image.

        Returns
        -------
        str
            First element of the default command.

        Raises
        ------
        MissingFieldError
            Raised if the image does not define a command.
        """
        node = self._get(MetadataPath.COMMAND).get(0)
        if not node.defined:
            raise MissingFieldError(MetadataPath.COMMAND.value)
        return node.as_string()

    def entrypoint(self) -> list[str]:
        """Return the entrypoint of the image.

        Returns
        -------
        list of str
            Entrypoint command and arguments, empty if none is defined.
        """
        node = self._get(MetadataPath.ENTRYPOINT)
        return [n.as_string() for n in node.as_list()]

    def envs(self) -> Mapping[str, str]:
        """Return the environment variables of the image.

        Returns
        -------
        Mapping of str to str
            Read-only mapping of variable names to values. If a variable is
            listed more than once, the last value wins.

        Raises
        ------
        MetadataFormatError
            Raised if an entry is not of the form ``KEY=VALUE``.
        MissingFieldError
            Raised if the image does not define an environment.
        """
        node = self._get(MetadataPath.ENV)
        if not node.defined:
            raise MissingFieldError(MetadataPath.ENV.value)
        env = {}
        for entry in node.as_list():
            setting = entry.as_string()
            key, sep, value = setting.partition("=")
            if not sep:
                msg = f'Invalid environment entry "{setting}"'
                raise MetadataFormatError(msg)
            env[key] = value
        return MappingProxyType(env)

    def exposed_ports(self, protocol: str | None = None) -> set[int]:
        """Return the ports exposed by the image.

        Parameters
        ----------
        protocol
            If given and not blank, only return ports for this protocol
            (such as ``tcp`` or ``udp``), compared case-insensitively.

        Returns
        -------
        set of int
            Exposed port numbers. Empty if the image exposes no ports.

        Raises
        ------
        MetadataFormatError
            Raised if a port is not of the form ``PORT/PROTOCOL``, with a
            decimal port number and an alphanumeric protocol.
        """
        node = self._get(MetadataPath.EXPOSED_PORTS)
        if not node.defined:
            return set()
        wanted = protocol.strip().lower() if protocol else None
        ports = set()
        for key in node.keys():
            match = _PORT_REGEX.fullmatch(key)
            if not match:
                raise MetadataFormatError(f'Invalid exposed port "{key}"')
            port, port_protocol = match.groups()
            if not wanted or port_protocol.lower() == wanted:
                ports.add(int(port))
        return ports

    def user(self) -> str | None:
        """Return the user the image runs as, if set."""
        return self._get_optional_string(MetadataPath.USER)

    def working_dir(self) -> str | None:
        """Return the working directory of the image, if set."""
        return self._get_optional_string(MetadataPath.WORKING_DIR)

    def _get(self, path: MetadataPath) -> MetadataNode:
        return self._metadata.get(*path.value)

    def _get_optional_string(self, path: MetadataPath) -> str | None:
        node = self._get(path)
        if not node.defined:
            return None
        return node.as_string() or None


class ImageMetadataResolver:
    """Resolve the metadata of container images using OpenShift.

    OpenShift inspects an image when it is imported into an ``ImageStream``
    and publishes the result in the corresponding ``ImageStreamTag``. The
    resolver creates the image stream, waits for the import, and reads the
    metadata back.

    Parameters
    ----------
    image_stream_storage
        Storage for ``ImageStream`` objects.
    image_stream_tag_storage
        Storage for ``ImageStreamTag`` objects.
    namespace
        Namespace in which to create image streams.
    wait_strategy
        How to wait for the image import to finish.
    metadata_delay
        Delay used by the fixed wait strategy.
    metadata_timeout
        Upper bound on the whole resolution with the poll wait strategy.
    poll_interval
        Initial delay between polls, doubled after each poll.
    max_poll_interval
        Maximum delay between polls.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        image_stream_storage: ImageStreamStorage,
        image_stream_tag_storage: ImageStreamTagStorage,
        namespace: str,
        wait_strategy: WaitStrategy = WaitStrategy.POLL,
        metadata_delay: timedelta = METADATA_DELAY,
        metadata_timeout: timedelta = METADATA_TIMEOUT,
        poll_interval: timedelta = POLL_INTERVAL,
        max_poll_interval: timedelta = MAX_POLL_INTERVAL,
        logger: BoundLogger,
    ) -> None:
        self._image_stream_storage = image_stream_storage
        self._tag_storage = image_stream_tag_storage
        self._namespace = namespace
        self._wait_strategy = wait_strategy
        self._metadata_delay = metadata_delay
        self._metadata_timeout = metadata_timeout
        self._poll_interval = poll_interval
        self._max_poll_interval = max_poll_interval
        self._logger = logger

    async def prepare(self, image: str | ImageReference) -> ImageMetadata:
        """Import an image into OpenShift and return its metadata.

        Parameters
        ----------
        image
            Image reference, either as a string or already parsed.

        Returns
        -------
        ImageMetadata
            Metadata of the image.

        Raises
        ------
        ClusterCommunicationError
            Raised if a Kubernetes API call fails, or if the image metadata
            is not available after the fixed delay.
        InvalidImageReferenceError
            Raised if the image reference string could not be parsed.
        ResolutionTimeoutError
            Raised if the image metadata did not become available before the
            timeout with the poll wait strategy.
        """
        if isinstance(image, str):
            image = ImageReference.from_str(image)
        logger = self._logger.bind(
            image=str(image),
            namespace=self._namespace,
            wait_strategy=self._wait_strategy.value,
        )

        match self._wait_strategy:
            case WaitStrategy.FIXED:
                tag = await self._prepare_fixed(image, logger)
            case WaitStrategy.POLL:
                tag = await self._prepare_poll(image, logger)

        metadata = MetadataNode.from_json(_get_image_metadata(tag))
        tag_name = image.image_stream_tag_name
        logger.info("Resolved image metadata", tag=tag_name)
        return ImageMetadata(metadata)

    async def _prepare_fixed(
        self, image: ImageReference, logger: BoundLogger
    ) -> dict[str, Any]:
        """Create the image stream and read the tag after a fixed delay.

        Raises
        ------
        ClusterCommunicationError
            Raised if the tag or its metadata do not exist after the delay.
        """
        await self._image_stream_storage.create(
            self._namespace, image.to_image_stream()
        )
        delay = self._metadata_delay.total_seconds()
        logger.info("Waiting for image metadata", delay=delay)
        await asyncio.sleep(delay)

        name = image.image_stream_tag_name
        tag = await self._tag_storage.read(name, self._namespace)
        if not tag:
            msg = "ImageStreamTag not found"
        elif _get_image_metadata(tag) is None:
            msg = "ImageStreamTag has no image metadata"
        else:
            return tag
        raise ClusterCommunicationError(
            msg, kind="ImageStreamTag", namespace=self._namespace, name=name
        )

    async def _prepare_poll(
        self, image: ImageReference, logger: BoundLogger
    ) -> dict[str, Any]:
        """Create the image stream and poll until the tag has metadata.

        Raises
        ------
        ResolutionTimeoutError
            Raised if the metadata does not appear before the timeout.
        """
        timeout = Timeout(
            "Image metadata resolution", self._metadata_timeout, str(image)
        )
        name = image.image_stream_tag_name
        interval = self._poll_interval
        async with timeout.enforce():
            await self._image_stream_storage.create(
                self._namespace, image.to_image_stream()
            )
            logger.info(
                "Waiting for image metadata",
                timeout=self._metadata_timeout.total_seconds(),
            )
            tag = await self._tag_storage.read(name, self._namespace)
            while not tag or _get_image_metadata(tag) is None:
                delay = interval.total_seconds()
                msg = "Image metadata not yet available, waiting"
                logger.debug(msg, tag=name, delay=delay)
                await asyncio.sleep(delay)
                interval = min(interval * 2, self._max_poll_interval)
                tag = await self._tag_storage.read(name, self._namespace)
        return tag


def _get_image_metadata(tag: dict[str, Any]) -> dict[str, Any] | None:
    """Extract the Docker image metadata from an ``ImageStreamTag``."""
    image = tag.get("image") or {}
    return image.get("dockerImageMetadata") or None
