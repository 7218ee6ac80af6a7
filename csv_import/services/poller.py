"""Job status polling.

Fetches the status of one import job at a fixed cadence until the server
reports a terminal state, handing every snapshot to an optional progress
callback first.

Loop per iteration:
1. Check cancellation, fetch a snapshot
2. Invoke the progress callback with it (every snapshot, in fetch order)
3. ``completed`` -> return ``returnValue`` or a result built from progress
4. ``failed`` -> raise ``ImportJobFailedError``
5. ``waiting`` / ``active`` / ``delayed`` -> check deadline and cancellation, sleep, repeat

Fetch errors are never retried here.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

import structlog

from csv_import.config import settings
from csv_import.errors import ImportJobFailedError, ImportTimeoutError
from csv_import.schemas.common import JobState
from csv_import.schemas.jobs import ImportJob, ImportResult
from csv_import.services.clock import AsyncioClock, CancellationToken, Clock

logger = structlog.get_logger(__name__)

JOB_FAILED_MESSAGE = "Import job failed"

# Marks constructor arguments the caller left out
USE_SETTINGS: Any = object()

ProgressCallback = Callable[[ImportJob], Union[None, Awaitable[Any]]]


class StatusSource(Protocol):
    async def fetch_status(self, job_id: str) -> ImportJob: ...


class JobStatusPoller:
    """Poll an import job until it completes or fails.

    Args:
        client: Anything with an async ``fetch_status(job_id)``.
        clock: Time source; ``AsyncioClock`` unless a test injects another.
        interval_ms: Default delay between fetches (``settings.poll_interval_ms``).
        timeout: Overall deadline in seconds. Left out, ``settings.poll_timeout``
            applies; ``None`` polls until a terminal state is seen.
    """

    def __init__(
        self,
        client: StatusSource,
        clock: Optional[Clock] = None,
        interval_ms: Optional[int] = None,
        timeout: Union[float, None, object] = USE_SETTINGS,
    ):
        self._client = client
        self._clock = clock or AsyncioClock()
        self.interval_ms = settings.poll_interval_ms if interval_ms is None else interval_ms
        self.timeout = settings.poll_timeout if timeout is USE_SETTINGS else timeout

    async def poll(
        self,
        job_id: str,
        on_progress: Optional[ProgressCallback] = None,
        interval_ms: Optional[int] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ImportResult:
        """Poll ``job_id`` and return its final ``ImportResult``."""
        interval_ms = self.interval_ms if interval_ms is None else interval_ms
        log = logger.bind(job_id=job_id)
        log.info("import_poll_started", interval_ms=interval_ms, timeout=self.timeout)

        started = self._clock.monotonic()
        polls = 0

        while True:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled(job_id)

            job = await self._client.fetch_status(job_id)
            polls += 1

            if on_progress is not None:
                outcome = on_progress(job)
                if inspect.isawaitable(outcome):
                    await outcome

            if job.state.is_terminal:
                return self._finish(job_id, job, polls, log)

            # waiting / active / delayed
            log.debug(
                "import_poll_pending",
                state=job.state.value,
                stage=job.progress.stage.value if job.progress.stage else None,
                percentage=job.progress.percentage,
            )

            if self.timeout is not None and self._clock.monotonic() - started >= self.timeout:
                log.error("import_poll_timed_out", polls=polls, timeout=self.timeout)
                raise ImportTimeoutError(job_id, self.timeout)

            if cancel_token is not None:
                cancel_token.raise_if_cancelled(job_id)

            await self._clock.sleep(interval_ms / 1000)

    def _finish(self, job_id: str, job: ImportJob, polls: int, log: Any) -> ImportResult:
        """Map a terminal snapshot onto a result or an error."""
        if job.state == JobState.FAILED:
            reason = job.failed_reason or JOB_FAILED_MESSAGE
            log.error("import_job_failed", polls=polls, reason=reason)
            raise ImportJobFailedError(reason, job_id=job_id)

        if job.return_value is not None:
            result = job.return_value
        else:
            log.warning("import_completed_without_return_value")
            result = ImportResult.from_progress(job.progress)
        log.info(
            "import_poll_completed",
            polls=polls,
            imported=result.imported,
            skipped=result.skipped,
            errors=len(result.errors),
        )
        return result
