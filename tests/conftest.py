"""Test fixtures for OpenShift test helper tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import timedelta

import pytest
import structlog
from kubernetes_asyncio import client

from ocphelpers.config import Config
from ocphelpers.factory import Factory
from ocphelpers.models.image import ImageReference

from .support.constants import TEST_IMAGE, TEST_NAMESPACE
from .support.data import read_metadata
from .support.openshift import MockOpenShiftImageApi, patch_openshift


@pytest.fixture
def config() -> Config:
    """Construct configuration with delays short enough for tests."""
    return Config(
        namespace=TEST_NAMESPACE,
        metadata_delay=timedelta(seconds=0),
        metadata_timeout=timedelta(seconds=5),
        poll_interval=timedelta(milliseconds=1),
        max_poll_interval=timedelta(milliseconds=10),
    )


@pytest.fixture
def factory(config: Config, mock_openshift: MockOpenShiftImageApi) -> Factory:
    """Create a component factory using the mock OpenShift API."""
    logger = structlog.get_logger(__name__)
    return Factory(config, client.ApiClient(), logger)


@pytest.fixture
def image() -> ImageReference:
    return ImageReference.from_str(TEST_IMAGE)


@pytest.fixture
def mock_openshift() -> Iterator[MockOpenShiftImageApi]:
    for mock in patch_openshift():
        mock.add_image_for_test(TEST_IMAGE, read_metadata("httpd"))
        yield mock
