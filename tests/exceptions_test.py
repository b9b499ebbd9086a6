"""Tests for exceptions."""

from __future__ import annotations

import datetime

from kubernetes_asyncio.client import ApiException

from ocphelpers.exceptions import (
    ClusterCommunicationError,
    MissingFieldError,
    ResolutionTimeoutError,
)


def test_resolution_timeout_error_slack() -> None:
    started_at = datetime.datetime(2001, 11, 30, tzinfo=datetime.UTC)
    failed_at = datetime.datetime(2001, 12, 30, tzinfo=datetime.UTC)

    error = ResolutionTimeoutError(
        "Image metadata resolution",
        "example.com/httpd:2.4",
        started_at=started_at,
        failed_at=failed_at,
    )
    assert str(error) == (
        "Image metadata resolution timed out after 2592000.0s"
    )

    slack = error.to_slack().to_slack()
    assert slack == {
        "blocks": [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        "Image metadata resolution timed out after 2592000.0s"
                    ),
                    "verbatim": True,
                },
            },
            {
                "type": "section",
                "fields": [
                    {
                        "type": "mrkdwn",
                        "text": "*Started at*\n2001-11-30 00:00:00",
                        "verbatim": True,
                    },
                    {
                        "type": "mrkdwn",
                        "text": "*Failed at*\n2001-12-30 00:00:00",
                        "verbatim": True,
                    },
                    {
                        "type": "mrkdwn",
                        "text": "*Image*\nexample.com/httpd:2.4",
                        "verbatim": True,
                    },
                ],
            },
            {"type": "divider"},
        ]
    }


def test_cluster_communication_error() -> None:
    exc = ApiException(status=500, reason="Internal Server Error")
    error = ClusterCommunicationError.from_exception(
        "Error reading object",
        exc,
        kind="ImageStreamTag",
        namespace="ns",
        name="httpd:2.4",
    )
    assert error.status == 500
    assert error.body == "Internal Server Error"
    assert str(error) == (
        "Error reading object (ImageStreamTag ns/httpd:2.4, status 500):"
        " Internal Server Error"
    )

    message = error.to_slack()
    assert message.message == (
        "Error reading object (ImageStreamTag ns/httpd:2.4, status 500)"
    )
    headings = [f.heading for f in message.fields]
    assert "Failed at" in headings
    assert "Status" in headings
    assert [b.heading for b in message.blocks] == ["Object", "Error"]

    error = ClusterCommunicationError("Something broke")
    assert str(error) == "Something broke"
    error = ClusterCommunicationError("Something broke", kind="ImageStream")
    assert str(error) == "Something broke (ImageStream)"
    error = ClusterCommunicationError("Lost", kind="ImageStream", name="x")
    assert str(error) == "Lost (ImageStream x)"


def test_missing_field_error() -> None:
    error = MissingFieldError(("Config", "Env"))
    assert error.path == ("Config", "Env")
    assert str(error) == "Image metadata has no value at Config.Env"
