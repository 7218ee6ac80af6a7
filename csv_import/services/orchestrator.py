"""CSV import orchestration: validate, submit, poll."""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Union

import structlog

from csv_import.errors import ValidationError
from csv_import.schemas.jobs import ImportResult, JobHandle
from csv_import.schemas.validation import ValidationOutcome
from csv_import.services.api_client import ImportJobClient
from csv_import.services.clock import CancellationToken, Clock
from csv_import.services.header_validation import validate_csv_header
from csv_import.services.poller import USE_SETTINGS, JobStatusPoller, ProgressCallback, StatusSource
from csv_import.services.sources import ImportSource, default_source

logger = structlog.get_logger(__name__)


class JobSubmitter(StatusSource, Protocol):
    async def submit(self, csv_content: str) -> JobHandle: ...


class ImportOrchestrator:
    """Single entry point for importing one CSV export.

    Holds no state between runs; concurrent ``run`` calls create independent
    jobs with independent polling loops.
    """

    def __init__(
        self,
        client: JobSubmitter,
        poller: Optional[JobStatusPoller] = None,
        source: Optional[ImportSource] = None,
        validator: Callable[[str, ImportSource], ValidationOutcome] = validate_csv_header,
    ):
        self._client = client
        self._poller = poller or JobStatusPoller(client)
        self._source = source or default_source()
        self._validator = validator

    async def run(
        self,
        csv_content: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ImportResult:
        """Import ``csv_content`` and return the final counts.

        Raises:
            ValidationError: the header check failed; nothing was sent.
            ImportSubmissionError, ImportStatusError, ImportJobFailedError,
            ImportTimeoutError, ImportCancelledError: propagated unchanged.
        """
        outcome = self._validator(csv_content, self._source)
        if not outcome.valid:
            logger.warning("csv_validation_failed", source=self._source.value, error=outcome.error)
            raise ValidationError(outcome.error or "Invalid CSV file")

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        handle = await self._client.submit(csv_content)
        return await self._poller.poll(handle.job_id, on_progress=on_progress, cancel_token=cancel_token)


async def import_csv(
    csv_content: str,
    on_progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    *,
    source: Optional[ImportSource] = None,
    interval_ms: Optional[int] = None,
    timeout: Union[float, None, object] = USE_SETTINGS,
    clock: Optional[Clock] = None,
) -> ImportResult:
    """Run one import against the service configured in ``settings``."""
    async with ImportJobClient() as client:
        poller = JobStatusPoller(client, clock=clock, interval_ms=interval_ms, timeout=timeout)
        orchestrator = ImportOrchestrator(client, poller=poller, source=source)
        return await orchestrator.run(csv_content, on_progress=on_progress, cancel_token=cancel_token)
