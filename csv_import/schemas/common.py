"""Shared schema types used across the client."""

from __future__ import annotations

import enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class JobState(str, enum.Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    DELAYED = "delayed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)


class ImportStage(str, enum.Enum):
    PARSING = "parsing"
    PREPARING = "preparing"
    PROCESSING = "processing"
    IMPORTING = "importing"
    COMPLETED = "completed"
    FAILED = "failed"
