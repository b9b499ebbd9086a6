"""Storage layer for OpenShift image custom objects."""

from __future__ import annotations

from typing import Any

from kubernetes_asyncio import client
from kubernetes_asyncio.client import ApiClient, ApiException
from structlog.stdlib import BoundLogger

from ..constants import IMAGE_API_GROUP, IMAGE_API_VERSION
from ..exceptions import ClusterCommunicationError

__all__ = [
    "ImageCustomStorage",
    "ImageStreamStorage",
    "ImageStreamTagStorage",
]


class ImageCustomStorage:
    """Access to one kind of object in the ``image.openshift.io`` API group.

    OpenShift serves its image resources outside the core Kubernetes API, so
    they are reached through the generic custom objects API and handled as
    plain dictionaries. Subclasses fix the plural and kind.

    Parameters
    ----------
    api_client
        Kubernetes API client.
    plural
        Plural resource name in the image API group.
    kind
        Object kind, for logging and error reporting.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        api_client: ApiClient,
        plural: str,
        kind: str,
        logger: BoundLogger,
    ) -> None:
        self._api = client.CustomObjectsApi(api_client)
        self._plural = plural
        self._kind = kind
        self._logger = logger

    async def read(self, name: str, namespace: str) -> dict[str, Any] | None:
        """Fetch an object by name.

        Parameters
        ----------
        name
            Name of the object.
        namespace
            Namespace containing the object.

        Returns
        -------
        dict or None
            The object as returned by the API server, or `None` if there is
            no such object.

        Raises
        ------
        ClusterCommunicationError
            Raised if the API server rejects the request.
        """
        try:
            return await self._api.get_namespaced_custom_object(
                IMAGE_API_GROUP,
                IMAGE_API_VERSION,
                namespace,
                self._plural,
                name,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            msg = "Error reading object"
            raise self._error(msg, e, namespace, name) from e

    def _error(
        self, message: str, exc: ApiException, namespace: str, name: str
    ) -> ClusterCommunicationError:
        return ClusterCommunicationError.from_exception(
            message, exc, kind=self._kind, namespace=namespace, name=name
        )


class ImageStreamStorage(ImageCustomStorage):
    """Storage for ``ImageStream`` objects.

    Parameters
    ----------
    api_client
        Kubernetes API client.
    logger
        Logger to use.
    """

    def __init__(self, api_client: ApiClient, logger: BoundLogger) -> None:
        super().__init__(
            api_client=api_client,
            plural="imagestreams",
            kind="ImageStream",
            logger=logger,
        )

    async def create(self, namespace: str, body: dict[str, Any]) -> None:
        """Register an image stream, triggering import of its tags.

        A stream that already exists is reused as is, since its name is the
        image repository and OpenShift keeps importing into it.

        Parameters
        ----------
        namespace
            Namespace in which to create the stream.
        body
            Image stream object.

        Raises
        ------
        ClusterCommunicationError
            Raised if the API server rejects the request for any reason other
            than the stream already existing.
        """
        name = body["metadata"]["name"]
        logger = self._logger.bind(name=name, namespace=namespace)
        logger.debug(f"Creating {self._kind}")
        try:
            await self._api.create_namespaced_custom_object(
                IMAGE_API_GROUP,
                IMAGE_API_VERSION,
                namespace,
                self._plural,
                body,
            )
        except ApiException as e:
            if e.status != 409:
                msg = "Error creating object"
                raise self._error(msg, e, namespace, name) from e
            logger.info(f"{self._kind} already exists, reusing it")


class ImageStreamTagStorage(ImageCustomStorage):
    """Storage for ``ImageStreamTag`` objects.

    OpenShift creates one of these per stream tag once it has imported the
    image, so they are only ever read.

    Parameters
    ----------
    api_client
        Kubernetes API client.
    logger
        Logger to use.
    """

    def __init__(self, api_client: ApiClient, logger: BoundLogger) -> None:
        super().__init__(
            api_client=api_client,
            plural="imagestreamtags",
            kind="ImageStreamTag",
            logger=logger,
        )
