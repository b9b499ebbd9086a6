"""Models for container image references."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Self

from ..constants import DEFAULT_TAG, IMAGE_API_GROUP, IMAGE_API_VERSION
from ..exceptions import InvalidImageReferenceError

__all__ = ["ImageReference"]

# Regexes used to validate the components of an image reference.
_REPOSITORY_REGEX = re.compile("^[a-z0-9]+(?:[._-][a-z0-9]+)*$")
_TAG_REGEX = re.compile(r"^[\w][\w.-]{0,127}$")


@dataclass(frozen=True, slots=True)
class ImageReference:
    """Parsed reference to a container image.

    Only the last path component is treated as the repository, since that is
    the name under which the image stream is registered in OpenShift. Any
    intermediate path components are kept in ``namespace``.
    """

    repository: str
    """Last path component of the image name (for example, ``httpd-24``)."""

    tag: str = DEFAULT_TAG
    """Tag of the image."""

    registry: str | None = None
    """Registry hosting the image, if given."""

    namespace: str | None = None
    """Path between the registry and the repository, if any."""

    digest: str | None = None
    """Digest, if present."""

    @classmethod
    def from_str(cls, reference: str) -> Self:
        """Parse an image reference string into its components.

        Parameters
        ----------
        reference
            Reference of the form ``[registry/][path/]repository[:tag]`` with
            an optional ``@digest`` suffix.

        Returns
        -------
        ImageReference
            Resulting reference.

        Raises
        ------
        InvalidImageReferenceError
            Raised if the reference could not be parsed.
        """
        remainder = reference.strip()
        if not remainder:
            raise InvalidImageReferenceError("Empty image reference")
        remainder, _, digest = remainder.partition("@")

        parts = remainder.split("/")
        registry = None
        if len(parts) > 1 and _is_registry(parts[0]):
            registry = parts.pop(0)
        repository, _, tag = parts.pop().partition(":")
        namespace = "/".join(parts) if parts else None

        if not _REPOSITORY_REGEX.match(repository):
            msg = f'Invalid repository in image reference "{reference}"'
            raise InvalidImageReferenceError(msg)
        if tag and not _TAG_REGEX.match(tag):
            msg = f'Invalid tag in image reference "{reference}"'
            raise InvalidImageReferenceError(msg)
        if any(not p for p in parts):
            msg = f'Empty path component in image reference "{reference}"'
            raise InvalidImageReferenceError(msg)
        return cls(
            repository=repository,
            tag=tag or DEFAULT_TAG,
            registry=registry,
            namespace=namespace,
            digest=digest or None,
        )

    @property
    def major_tag(self) -> str:
        """Tag with any release suffix removed.

        ``1.4-12`` becomes ``1.4``. Tags without a suffix are unchanged.
        """
        return self.tag.split("-", 1)[0]

    @property
    def image_stream_tag_name(self) -> str:
        """Name of the ``ImageStreamTag`` corresponding to this image."""
        return f"{self.repository}:{self.major_tag}"

    def to_image_stream(self) -> dict[str, Any]:
        """Construct an ``ImageStream`` object importing this image.

        The stream has a single tag named after the major tag of the image.
        Insecure registries are allowed, and pods using the stream pull the
        image through the integrated registry.

        Returns
        -------
        dict
            Custom object body suitable for creation in OpenShift.
        """
        return {
            "apiVersion": f"{IMAGE_API_GROUP}/{IMAGE_API_VERSION}",
            "kind": "ImageStream",
            "metadata": {"name": self.repository},
            "spec": {
                "tags": [
                    {
                        "name": self.major_tag,
                        "from": {"kind": "DockerImage", "name": str(self)},
                        "importPolicy": {"insecure": True},
                        "referencePolicy": {"type": "Local"},
                    }
                ]
            },
        }

    def __str__(self) -> str:
        result = self.repository
        if self.namespace:
            result = f"{self.namespace}/{result}"
        if self.registry:
            result = f"{self.registry}/{result}"
        result += f":{self.tag}"
        if self.digest:
            result += f"@{self.digest}"
        return result


def _is_registry(component: str) -> bool:
    """Whether the first path component of a reference names a registry."""
    return "." in component or ":" in component or component == "localhost"
