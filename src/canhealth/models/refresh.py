"""Force-refresh job models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from canhealth.models._base import CanHealthBaseModel


class RefreshStatus(CanHealthBaseModel):
    """Response of the force-refresh status endpoint."""

    refresh_running: bool = False

    @field_validator("refresh_running", mode="before")
    @classmethod
    def _coerce_running(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "running"}
        return bool(value)


class RefreshJobStatus(StrEnum):
    NOT_RUNNING = "not_running"
    RUNNING = "running"
    COMPLETED = "completed"


class RefreshJob(BaseModel):
    """Transient state of a force refresh.

    Owned by the sync controller and never persisted.
    """

    model_config = ConfigDict(frozen=True)

    status: RefreshJobStatus = RefreshJobStatus.NOT_RUNNING
    submitted_at: datetime | None = None
    completed_at: datetime | None = None
    attempts: int = 0
    """Status checks issued so far."""

    @property
    def is_running(self) -> bool:
        return self.status is RefreshJobStatus.RUNNING
