"""Overall deadline for resolving image metadata."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from safir.datetime import current_datetime

from .exceptions import ResolutionTimeoutError

__all__ = ["Timeout"]


class Timeout:
    """Deadline shared by every step of one metadata resolution.

    Creating the image stream, sleeping, and each poll of the image stream
    tag all draw from the same budget, so a slow API server shortens the
    time left for polling.

    Parameters
    ----------
    operation
        Name of what is being waited for, used in the error message.
    timeout
        Total time allowed.
    image
        Image being resolved, if any, reported when the deadline passes.
    """

    def __init__(
        self, operation: str, timeout: timedelta, image: str | None = None
    ) -> None:
        self._operation = operation
        self._timeout = timeout
        self._image = image
        self._start = current_datetime(microseconds=True)

    def elapsed(self) -> float:
        """Seconds since the deadline started counting."""
        now = current_datetime(microseconds=True)
        return (now - self._start).total_seconds()

    @asynccontextmanager
    async def enforce(self) -> AsyncIterator[None]:
        """Bound the enclosed block by the remaining time.

        Raises
        ------
        ResolutionTimeoutError
            Raised if the block is still running when the deadline passes.
        """
        try:
            async with asyncio.timeout(self.left()):
                yield
        except TimeoutError as e:
            raise self._error() from e

    def left(self) -> float:
        """Seconds remaining before the deadline.

        Returns
        -------
        float
            Remaining time, always positive.

        Raises
        ------
        ResolutionTimeoutError
            Raised if no time remains.
        """
        now = current_datetime(microseconds=True)
        left = (self._timeout - (now - self._start)).total_seconds()
        if left <= 0.0:
            raise self._error()
        return left

    def _error(self) -> ResolutionTimeoutError:
        return ResolutionTimeoutError(
            self._operation,
            self._image,
            started_at=self._start,
            failed_at=current_datetime(microseconds=True),
        )
