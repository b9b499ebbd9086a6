"""Exceptions for OpenShift test helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Self, override

from kubernetes_asyncio.client import ApiException
from safir.datetime import format_datetime_for_logging
from safir.slack.blockkit import (
    SlackBaseField,
    SlackCodeBlock,
    SlackException,
    SlackMessage,
    SlackTextBlock,
    SlackTextField,
)

__all__ = [
    "ClusterCommunicationError",
    "ImageMetadataError",
    "InvalidImageReferenceError",
    "MetadataFormatError",
    "MissingFieldError",
    "ResolutionTimeoutError",
]


class InvalidImageReferenceError(ValueError):
    """An image reference string could not be parsed."""


class ImageMetadataError(Exception):
    """Base class for errors interpreting image metadata."""


class MetadataFormatError(ImageMetadataError):
    """A field of the image metadata does not have the expected format."""


class MissingFieldError(ImageMetadataError):
    """A required field is absent from the image metadata.

    Parameters
    ----------
    path
        Path to the missing field.
    """

    def __init__(self, path: tuple[str, ...]) -> None:
        self.path = path
        super().__init__(f"Image metadata has no value at {'.'.join(path)}")


class ResolutionTimeoutError(SlackException):
    """Image metadata did not become available in time.

    Parameters
    ----------
    operation
        Description of what was being waited for.
    image
        Image whose metadata was being resolved, if known.
    started_at
        When the wait began.
    failed_at
        When the wait was abandoned.
    """

    def __init__(
        self,
        operation: str,
        image: str | None = None,
        *,
        started_at: datetime,
        failed_at: datetime,
    ) -> None:
        seconds = (failed_at - started_at).total_seconds()
        super().__init__(
            f"{operation} timed out after {seconds}s", failed_at=failed_at
        )
        self.operation = operation
        self.image = image
        self.started_at = started_at

    @override
    def to_slack(self) -> SlackMessage:
        """Render the timeout as a Slack alert.

        Returns
        -------
        safir.slack.blockkit.SlackMessage
            Alert listing when the wait started and stopped, and the image.
        """
        timestamps = {
            "Started at": self.started_at,
            "Failed at": self.failed_at,
        }
        fields: list[SlackBaseField] = [
            SlackTextField(heading=h, text=format_datetime_for_logging(t))
            for h, t in timestamps.items()
        ]
        if self.image:
            fields.append(SlackTextField(heading="Image", text=self.image))
        return SlackMessage(message=str(self), fields=fields)


class ClusterCommunicationError(SlackException):
    """A cluster API call failed or returned unusable data.

    Parameters
    ----------
    message
        What went wrong.
    kind
        Kind of the object involved, if any.
    namespace
        Namespace of the object involved, if any.
    name
        Name of the object involved, if any.
    status
        HTTP status returned by the API server, if any.
    body
        Error response from the API server, if any.
    """

    @classmethod
    def from_exception(
        cls,
        message: str,
        exc: ApiException,
        *,
        kind: str | None = None,
        namespace: str | None = None,
        name: str | None = None,
    ) -> Self:
        """Wrap an exception raised by the Kubernetes client.

        Parameters
        ----------
        message
            What was being attempted.
        exc
            Exception from ``kubernetes_asyncio``.
        kind
            Kind of the object involved.
        namespace
            Namespace of the object involved.
        name
            Name of the object involved.

        Returns
        -------
        ClusterCommunicationError
            Exception carrying the status and response of ``exc``.
        """
        return cls(
            message,
            kind=kind,
            namespace=namespace,
            name=name,
            status=exc.status,
            body=exc.body or exc.reason,
        )

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        namespace: str | None = None,
        name: str | None = None,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.status = status
        self.body = body

    @override
    def __str__(self) -> str:
        summary = self._summary()
        return f"{summary}: {self.body}" if self.body else summary

    @override
    def to_slack(self) -> SlackMessage:
        """Render the failure as a Slack alert.

        Returns
        -------
        safir.slack.blockkit.SlackMessage
            Alert with the summary, HTTP status, object, and server response.
        """
        alert = super().to_slack()
        alert.message = self._summary()
        if self.status:
            status = SlackTextField(heading="Status", text=str(self.status))
            alert.fields.append(status)
        if obj := self._object():
            alert.blocks.append(SlackTextBlock(heading="Object", text=obj))
        if self.body:
            error = SlackCodeBlock(heading="Error", code=self.body)
            alert.blocks.append(error)
        return alert

    def _object(self) -> str | None:
        """Describe the object involved as ``Kind namespace/name``."""
        if not self.name:
            return None
        path = f"{self.namespace}/{self.name}" if self.namespace else self.name
        return f"{self.kind} {path}" if self.kind else path

    def _summary(self) -> str:
        """Summarize the failure on one line, without the server response."""
        details = []
        if obj := self._object() or self.kind:
            details.append(obj)
        if self.status:
            details.append(f"status {self.status}")
        if details:
            return f"{self.message} ({', '.join(details)})"
        return self.message
