"""Schema for local CSV validation outcomes."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ValidationOutcome(BaseModel):
    valid: bool
    error: Optional[str] = None
