"""Component factory for the OpenShift test helpers."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Self

import structlog
from kubernetes_asyncio import client
from kubernetes_asyncio.client import ApiClient
from safir.kubernetes import initialize_kubernetes
from structlog.stdlib import BoundLogger

from .config import Config
from .constants import ROOT_LOGGER
from .services.metadata import ImageMetadataResolver
from .storage.imagestream import ImageStreamStorage, ImageStreamTagStorage

__all__ = ["Factory"]


class Factory:
    """Build storage and service objects from the configuration.

    Parameters
    ----------
    config
        Configuration.
    api_client
        Shared Kubernetes API client.
    logger
        Logger to pass to created objects.
    """

    @classmethod
    @asynccontextmanager
    async def standalone(cls, config: Config) -> AsyncIterator[Self]:
        """Create a factory talking to the configured Kubernetes cluster.

        Loads the Kubernetes configuration (in-cluster if available, else
        from the user's kubeconfig) and closes the API client on exit.

        Parameters
        ----------
        config
            Configuration.

        Yields
        ------
        Factory
            Newly-created factory. Must be used as a context manager.
        """
        await initialize_kubernetes()
        logger = structlog.get_logger(ROOT_LOGGER)
        api_client = client.ApiClient()
        try:
            yield cls(config, api_client, logger)
        finally:
            await api_client.close()

    def __init__(
        self, config: Config, api_client: ApiClient, logger: BoundLogger
    ) -> None:
        self._config = config
        self._api_client = api_client
        self._logger = logger

    def create_image_metadata_resolver(self) -> ImageMetadataResolver:
        """Create a new image metadata resolver.

        Returns
        -------
        ImageMetadataResolver
            Resolver using the configured namespace and wait strategy.
        """
        return ImageMetadataResolver(
            image_stream_storage=self.create_image_stream_storage(),
            image_stream_tag_storage=self.create_image_stream_tag_storage(),
            namespace=self._config.namespace,
            wait_strategy=self._config.wait_strategy,
            metadata_delay=self._config.metadata_delay,
            metadata_timeout=self._config.metadata_timeout,
            poll_interval=self._config.poll_interval,
            max_poll_interval=self._config.max_poll_interval,
            logger=self._logger,
        )

    def create_image_stream_storage(self) -> ImageStreamStorage:
        """Create storage for ``ImageStream`` objects."""
        return ImageStreamStorage(self._api_client, self._logger)

    def create_image_stream_tag_storage(self) -> ImageStreamTagStorage:
        """Create storage for ``ImageStreamTag`` objects."""
        return ImageStreamTagStorage(self._api_client, self._logger)
