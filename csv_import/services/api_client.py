"""Import service HTTP client: job creation and status queries.

Both calls are single-shot: a failure is surfaced immediately as a typed error
and retry policy is left to the caller.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx
import pydantic
import structlog

from csv_import.config import settings
from csv_import.errors import ImportStatusError, ImportSubmissionError
from csv_import.schemas.api import ApiEnvelope
from csv_import.schemas.jobs import ImportJob, JobHandle

logger = structlog.get_logger(__name__)

SUBMIT_FAILED_MESSAGE = "Failed to start CSV import"
STATUS_FAILED_MESSAGE = "Failed to get import status"

# ---------------------------------------------------------------------------
# Endpoints (relative to /api/{version})
# ---------------------------------------------------------------------------

CSV_IMPORT_PATH = "/import/csv"
CSV_IMPORT_STATUS_PATH = "/import/csv/{job_id}"


class _RequestFailed(Exception):
    """Internal: a request did not yield a successful envelope."""

    def __init__(self, message: Optional[str], status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ImportJobClient:
    """Async client for the CSV import endpoints.

    Pass ``http_client`` to reuse an existing ``httpx.AsyncClient`` (its
    ``base_url`` must already point at ``/api/{version}``); otherwise the
    client builds and owns one from ``settings``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        api_version: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if http_client is not None:
            self._http = http_client
            self._owns_http = False
        else:
            base_url = (base_url or settings.api_base_url).rstrip("/")
            version = api_version or settings.api_version
            self._http = httpx.AsyncClient(
                base_url=f"{base_url}/api/{version}",
                timeout=timeout if timeout is not None else settings.request_timeout,
                headers={"Content-Type": "application/json"},
            )
            self._owns_http = True

        token = settings.api_access_token if access_token is None else access_token
        self._auth_headers = {"Authorization": f"Bearer {token}"} if token else {}

    async def __aenter__(self) -> "ImportJobClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def submit(self, csv_content: str) -> JobHandle:
        """Create an import job for the whole CSV text and return its handle."""
        try:
            data = await self._request("POST", CSV_IMPORT_PATH, json={"csvContent": csv_content})
        except _RequestFailed as exc:
            logger.error("import_submit_failed", error=exc.message, status_code=exc.status_code)
            raise ImportSubmissionError(
                exc.message or SUBMIT_FAILED_MESSAGE, status_code=exc.status_code
            ) from exc.__cause__

        try:
            handle = JobHandle.model_validate(data)
        except pydantic.ValidationError as exc:
            logger.error("import_submit_missing_job_id", data=data)
            raise ImportSubmissionError(SUBMIT_FAILED_MESSAGE) from exc

        logger.info("import_job_submitted", job_id=handle.job_id, size_bytes=len(csv_content))
        return handle

    async def fetch_status(self, job_id: str) -> ImportJob:
        """Fetch one status snapshot of ``job_id``."""
        path = CSV_IMPORT_STATUS_PATH.format(job_id=quote(job_id, safe=""))
        try:
            data = await self._request("GET", path)
        except _RequestFailed as exc:
            logger.error("import_status_failed", job_id=job_id, error=exc.message, status_code=exc.status_code)
            raise ImportStatusError(
                exc.message or STATUS_FAILED_MESSAGE, job_id=job_id, status_code=exc.status_code
            ) from exc.__cause__

        if isinstance(data, dict) and data.get("id") is None:
            data = {**data, "id": job_id}

        try:
            job = ImportJob.model_validate(data)
        except pydantic.ValidationError as exc:
            logger.error("import_status_invalid", job_id=job_id, error=str(exc))
            raise ImportStatusError(STATUS_FAILED_MESSAGE, job_id=job_id) from exc

        logger.debug(
            "import_status_fetched",
            job_id=job_id,
            state=job.state.value,
            percentage=job.progress.percentage,
        )
        return job

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the envelope's ``data``.

        Raises ``_RequestFailed`` on transport errors, non-2xx responses,
        undecodable bodies, ``success: false`` or a missing ``data`` payload.
        """
        try:
            response = await self._http.request(method, path, headers=self._auth_headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("import_request_error", method=method, path=path, error=str(exc))
            raise _RequestFailed(None) from exc

        envelope = _parse_envelope(response)
        if response.is_error or envelope is None or not envelope.success:
            message = envelope.error_message() if envelope is not None else None
            raise _RequestFailed(message, status_code=response.status_code)

        if envelope.data is None:
            raise _RequestFailed(None, status_code=response.status_code)
        return envelope.data


def _parse_envelope(response: httpx.Response) -> Optional[ApiEnvelope]:
    try:
        return ApiEnvelope.model_validate(response.json())
    except (ValueError, pydantic.ValidationError):
        return None
