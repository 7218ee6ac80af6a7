"""Response envelope shared by every import service endpoint."""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ApiErrorDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: Optional[str] = None
    message: Optional[str] = None
    status_code: Optional[int] = Field(None, alias="statusCode")


class ApiEnvelope(BaseModel):
    """``{success, data?, message?, error?}`` wrapper around every payload."""
    success: bool = False
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[Union[ApiErrorDetail, str]] = None

    def error_message(self) -> Optional[str]:
        """Server-provided error text, if any."""
        if isinstance(self.error, ApiErrorDetail) and self.error.message:
            return self.error.message
        if isinstance(self.error, str) and self.error:
            return self.error
        return self.message or None
