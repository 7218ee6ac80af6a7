"""Error taxonomy for the CSV import client.

Every error raised by the client derives from ``CsvImportError`` so callers can
handle the whole family in one ``except`` clause. Nothing here is recovered
locally: the caller decides whether to retry or what to show the user.
"""

from __future__ import annotations

from typing import Optional


class CsvImportError(Exception):
    """Base class for all import client errors."""


class ValidationError(CsvImportError):
    """The CSV failed local header checks. No request was sent."""


class ImportSubmissionError(CsvImportError):
    """Creating the import job failed or returned no job id."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ImportStatusError(CsvImportError):
    """Fetching the job status failed or returned no usable payload."""

    def __init__(self, message: str, job_id: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.job_id = job_id
        self.status_code = status_code


class ImportJobFailedError(CsvImportError):
    """The server reported the job as failed."""

    def __init__(self, message: str, job_id: str):
        super().__init__(message)
        self.job_id = job_id


class ImportTimeoutError(CsvImportError):
    """The job did not reach a terminal state before the polling deadline."""

    def __init__(self, job_id: str, timeout: float):
        super().__init__(f"Import job {job_id} did not finish within {timeout:g}s")
        self.job_id = job_id
        self.timeout = timeout


class ImportCancelledError(CsvImportError):
    """The caller cancelled the import before it finished."""

    def __init__(self, job_id: Optional[str] = None):
        message = f"Import job {job_id} was cancelled" if job_id else "Import was cancelled"
        super().__init__(message)
        self.job_id = job_id
