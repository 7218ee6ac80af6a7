"""Time source and cancellation primitives for the polling loop."""

from __future__ import annotations

import asyncio
import time
from typing import Optional, Protocol

from csv_import.errors import ImportCancelledError


class Clock(Protocol):
    def monotonic(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class AsyncioClock:
    """Wall-clock implementation backed by ``time`` and ``asyncio``."""

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class CancellationToken:
    """Shared flag a caller trips to stop an in-flight import.

    The flag is checked before each submission, each status fetch and each
    scheduled delay; a request already on the wire is allowed to finish.
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self, job_id: Optional[str] = None) -> None:
        if self._cancelled:
            raise ImportCancelledError(job_id)
