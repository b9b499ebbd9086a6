"""Models for resolving image metadata."""

from __future__ import annotations

from enum import Enum

__all__ = ["WaitStrategy"]


class WaitStrategy(str, Enum):
    """How to wait for OpenShift to import image metadata.

    OpenShift imports the metadata of an image asynchronously after the
    ``ImageStream`` is created, so the resolver has to wait before the
    ``ImageStreamTag`` is usable.
    """

    FIXED = "fixed"
    """Sleep for a fixed delay, then read the tag once."""

    POLL = "poll"
    """Read the tag with backoff until metadata appears or time runs out."""
