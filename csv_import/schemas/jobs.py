"""Schemas for import jobs as reported by the import service."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from csv_import.schemas.common import ImportStage, JobState

_KNOWN_STAGES = {stage.value for stage in ImportStage}


class ImportResult(BaseModel):
    """Final outcome of an import job."""
    imported: int = Field(0, ge=0, description="Transactions created")
    skipped: int = Field(0, ge=0, description="Rows skipped (duplicates, transfers, empty amounts)")
    errors: list[str] = Field(default_factory=list, description="Per-row error messages, in row order")

    @classmethod
    def from_progress(cls, progress: "JobProgress") -> "ImportResult":
        """Build a result from the counters of the last progress snapshot."""
        return cls(
            imported=progress.imported or 0,
            skipped=progress.skipped or 0,
            errors=list(progress.errors or []),
        )


class JobProgress(BaseModel):
    """Best-effort progress snapshot. Counters are not guaranteed monotonic."""
    current: int = Field(0, ge=0, description="Rows processed so far")
    total: int = Field(0, ge=0, description="Rows to process")
    percentage: int = Field(0, ge=0, le=100, description="Progress 0 - 100")
    stage: Optional[ImportStage] = Field(None, description="Current processing stage")
    imported: Optional[int] = Field(None, ge=0)
    skipped: Optional[int] = Field(None, ge=0)
    errors: Optional[list[str]] = None

    @model_validator(mode="before")
    @classmethod
    def _normalise(cls, data: Any) -> Any:
        # Snapshots are best-effort: clamp counters, forget stages we do not know
        if not isinstance(data, dict):
            return data
        data = dict(data)
        percentage = data.get("percentage")
        if isinstance(percentage, (int, float)) and not isinstance(percentage, bool):
            data["percentage"] = min(max(round(percentage), 0), 100)
        for counter in ("current", "total"):
            value = data.get(counter)
            if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
                data[counter] = 0
        stage = data.get("stage")
        if stage is not None and not isinstance(stage, ImportStage):
            if not (isinstance(stage, str) and stage in _KNOWN_STAGES):
                data["stage"] = None
        return data


class ImportJob(BaseModel):
    """Snapshot of a server-side import job."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Opaque job identifier")
    state: JobState
    progress: JobProgress = Field(default_factory=JobProgress)
    failed_reason: Optional[str] = Field(None, alias="failedReason")
    return_value: Optional[ImportResult] = Field(None, alias="returnValue")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        # Queue backends hand out numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("progress", mode="before")
    @classmethod
    def _coerce_progress(cls, value: Any) -> Any:
        # Before the worker reports structured progress the queue exposes a bare number
        if value is None:
            return {}
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return {"percentage": value}
        return value


class JobHandle(BaseModel):
    """Reference to a freshly created import job."""
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId", min_length=1)

    @field_validator("job_id", mode="before")
    @classmethod
    def _stringify_job_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value
