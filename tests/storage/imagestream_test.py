"""Tests for the OpenShift image custom object storage."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from ocphelpers.exceptions import ClusterCommunicationError
from ocphelpers.factory import Factory
from ocphelpers.models.image import ImageReference

from ..support.constants import TEST_IMAGE, TEST_NAMESPACE
from ..support.openshift import MockOpenShiftImageApi


@pytest.mark.asyncio
async def test_create(factory: Factory, image: ImageReference) -> None:
    body = image.to_image_stream()

    with capture_logs() as logs:
        storage = factory.create_image_stream_storage()
        await storage.create(TEST_NAMESPACE, body)
        stream = await storage.read("httpd-24-rhel7", TEST_NAMESPACE)
        assert stream
        assert stream["spec"] == body["spec"]
        assert await storage.read("httpd-24-rhel7", "other") is None

        # Creating it again is not an error.
        await storage.create(TEST_NAMESPACE, body)

    assert logs == [
        {
            "event": "Creating ImageStream",
            "log_level": "debug",
            "name": "httpd-24-rhel7",
            "namespace": TEST_NAMESPACE,
        },
        {
            "event": "Creating ImageStream",
            "log_level": "debug",
            "name": "httpd-24-rhel7",
            "namespace": TEST_NAMESPACE,
        },
        {
            "event": "ImageStream already exists, reusing it",
            "log_level": "info",
            "name": "httpd-24-rhel7",
            "namespace": TEST_NAMESPACE,
        },
    ]


@pytest.mark.asyncio
async def test_create_error(
    factory: Factory,
    mock_openshift: MockOpenShiftImageApi,
    image: ImageReference,
) -> None:
    mock_openshift.fail_for_test(
        "create_namespaced_custom_object", 422, '{"reason": "Invalid"}'
    )
    storage = factory.create_image_stream_storage()

    with pytest.raises(ClusterCommunicationError) as excinfo:
        await storage.create(TEST_NAMESPACE, image.to_image_stream())
    assert str(excinfo.value) == (
        "Error creating object (ImageStream ocphelpers-test/httpd-24-rhel7,"
        ' status 422): {"reason": "Invalid"}'
    )
    assert excinfo.value.body == '{"reason": "Invalid"}'


@pytest.mark.asyncio
async def test_read_tag(factory: Factory, image: ImageReference) -> None:
    stream_storage = factory.create_image_stream_storage()
    storage = factory.create_image_stream_tag_storage()
    name = image.image_stream_tag_name

    assert await storage.read(name, TEST_NAMESPACE) is None
    await stream_storage.create(TEST_NAMESPACE, image.to_image_stream())
    tag = await storage.read(name, TEST_NAMESPACE)
    assert tag
    assert tag["kind"] == "ImageStreamTag"
    assert tag["metadata"]["name"] == "httpd-24-rhel7:2.4"
    assert tag["image"]["dockerImageReference"] == TEST_IMAGE
    assert tag["image"]["dockerImageMetadata"]["Config"]["User"] == "1001"


@pytest.mark.asyncio
async def test_read_error(
    factory: Factory, mock_openshift: MockOpenShiftImageApi
) -> None:
    mock_openshift.fail_for_test("get_namespaced_custom_object", 403)
    storage = factory.create_image_stream_tag_storage()

    with pytest.raises(ClusterCommunicationError) as excinfo:
        await storage.read("httpd-24-rhel7:2.4", TEST_NAMESPACE)
    assert excinfo.value.status == 403
    assert excinfo.value.kind == "ImageStreamTag"
    assert excinfo.value.name == "httpd-24-rhel7:2.4"
    assert excinfo.value.body == "Injected failure"
