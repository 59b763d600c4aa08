"""Pydantic schemas used by the public FastAPI surface."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SessionStartRequest(BaseModel):
    """Request body for starting a watch session."""

    model_config = ConfigDict(extra="forbid")

    log_file: Optional[str] = Field(
        default=None,
        description="Log file to watch. Defaults to the stored setting.",
        max_length=1024,
    )
    output_file: Optional[str] = Field(
        default=None,
        description="Where the screenshot is written. Defaults to the stored setting.",
        max_length=1024,
    )
    trigger: Optional[str] = Field(
        default=None,
        description="Substring that fires a capture when it appears in an appended line.",
        min_length=1,
        max_length=500,
    )
    strategy: Optional[Literal["native", "polling"]] = Field(
        default=None,
        description="Use native filesystem notifications or timed polling.",
    )
    poll_interval: Optional[float] = Field(default=None, gt=0, le=10)

    @field_validator("log_file", "output_file", mode="before")
    @classmethod
    def _clean_optional(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, str):
            trimmed = value.strip()
            return trimmed or None
        return value


class SessionStats(BaseModel):
    """Counters reported by a running or finished session."""

    events_handled: int
    events_discarded: int
    lines_read: int
    triggers_matched: int
    callbacks_succeeded: int
    callbacks_failed: int
    read_errors: int


class ReportedError(BaseModel):
    """An error the session reported without stopping."""

    occurred_at: datetime
    kind: str
    message: str


class SessionStatus(BaseModel):
    """Current state of the seedshotter."""

    running: bool
    state: Optional[Literal["starting", "running", "stopping", "stopped"]]
    log_file: Optional[str]
    output_file: Optional[str]
    trigger: Optional[str]
    strategy: Optional[Literal["native", "polling"]]
    started_at: Optional[datetime]
    stop_requested: bool
    stats: Optional[SessionStats]
    errors: List[ReportedError]


class SettingsPayload(BaseModel):
    """Persisted settings as exposed over HTTP."""

    log_file: Optional[str] = Field(default=None, max_length=1024)
    output_file: str = Field(min_length=1, max_length=1024)
    label: str = Field(max_length=200)


class SettingsUpdate(BaseModel):
    """Partial update of the persisted settings."""

    model_config = ConfigDict(extra="forbid")

    log_file: Optional[str] = Field(default=None, max_length=1024)
    output_file: Optional[str] = Field(default=None, max_length=1024)
    label: Optional[str] = Field(default=None, max_length=200)


class ErrorMessage(BaseModel):
    """Consistent error envelope for API responses."""

    detail: str
