"""Shared fixtures: fake clock, scripted status source, in-process import service."""

from __future__ import annotations

import uuid
from typing import Any, Optional, Union

import httpx
import pytest
from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from csv_import.schemas.jobs import ImportJob
from csv_import.services.api_client import ImportJobClient


@pytest.fixture
def anyio_backend():
    return "asyncio"


# ---------------------------------------------------------------------------
# Fake clock
# ---------------------------------------------------------------------------

class FakeClock:
    """Clock that advances instantly when slept on."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Scripted status source
# ---------------------------------------------------------------------------

class ScriptedStatusSource:
    """Returns the scripted snapshots in order; the last one repeats forever.

    A script entry may be an exception instance, which is raised instead.
    """

    def __init__(self, script: list[Union[dict, Exception]]) -> None:
        self.script = script
        self.calls: list[str] = []

    async def fetch_status(self, job_id: str) -> ImportJob:
        entry = self.script[min(len(self.calls), len(self.script) - 1)]
        self.calls.append(job_id)
        if isinstance(entry, Exception):
            raise entry
        return ImportJob.model_validate({"id": job_id, **entry})


@pytest.fixture
def make_status_source():
    return ScriptedStatusSource


def snapshot(state: str, percentage: int = 0, **extra: Any) -> dict:
    progress = {"current": percentage, "total": 100, "percentage": percentage}
    progress.update(extra.pop("progress", {}))
    return {"state": state, "progress": progress, **extra}


@pytest.fixture
def make_snapshot():
    return snapshot


# ---------------------------------------------------------------------------
# In-process import service
# ---------------------------------------------------------------------------

class SubmitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    csv_content: str = Field(..., alias="csvContent")


class FakeImportService:
    """Job store behind the fake import endpoints.

    Each submitted job consumes the next script from ``scripts``; each status
    query returns the job's next snapshot, repeating the last one.
    """

    def __init__(self) -> None:
        self.scripts: list[list[dict]] = []
        self.job_ids: list[str] = []
        self.submissions: list[str] = []
        self.status_calls: list[str] = []
        self._jobs: dict[str, list[dict]] = {}

    def create_job(self, csv_content: str) -> str:
        self.submissions.append(csv_content)
        job_id = self.job_ids.pop(0) if self.job_ids else str(uuid.uuid4())
        self._jobs[job_id] = self.scripts.pop(0) if self.scripts else [snapshot("waiting")]
        return job_id

    def next_snapshot(self, job_id: str) -> Optional[dict]:
        script = self._jobs.get(job_id)
        if script is None:
            return None
        served = self.status_calls.count(job_id)
        self.status_calls.append(job_id)
        return {"id": job_id, **script[min(served, len(script) - 1)]}


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"code": code, "message": message, "statusCode": status_code}},
    )


def create_fake_import_app(service: FakeImportService) -> FastAPI:
    app = FastAPI(title="Fake import service")
    router = APIRouter(prefix="/api/v1", tags=["import"])

    @router.post("/import/csv")
    async def submit_import(req: SubmitRequest):
        if not req.csv_content.strip():
            return _error(400, "VALIDATION_ERROR", "CSV content is required")
        job_id = service.create_job(req.csv_content)
        return {"success": True, "data": {"jobId": job_id}}

    @router.get("/import/csv/{job_id}")
    async def get_import_status(job_id: str):
        job = service.next_snapshot(job_id)
        if job is None:
            return _error(404, "NOT_FOUND", "Import job not found")
        return {"success": True, "data": job}

    app.include_router(router)
    return app


@pytest.fixture
def fake_service() -> FakeImportService:
    return FakeImportService()


@pytest.fixture
async def service_client(fake_service):
    """``ImportJobClient`` wired to the in-process import service."""
    app = create_fake_import_app(fake_service)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver/api/v1") as http:
        yield ImportJobClient(http_client=http, access_token="")
