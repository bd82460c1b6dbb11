"""Fleet summary and listing page models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar

from pydantic import Field, field_validator

from canhealth.models._base import ApiTimestamp, CanHealthBaseModel
from canhealth.models.vehicle import VehicleRecord, parse_records
from canhealth.normalize import non_negative_int, safe_str


class SyncPhase(StrEnum):
    """Overall server sync phase."""

    READY = "Ready"
    INITIALIZING = "Initializing"

    @classmethod
    def _missing_(cls, value: object) -> SyncPhase:
        return cls.READY


class SummaryStats(CanHealthBaseModel):
    """Snapshot of the whole fleet, not just the current page."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {
        "cities": "regions",
        "silent_count": "non_communicating_count",
    }

    total_vehicles: int = 0
    communicating_count: int = 0
    non_communicating_count: int = 0
    no_api_response_count: int = 0
    no_api_integration_count: int = 0
    regions: tuple[str, ...] = ()
    timestamp: ApiTimestamp = None
    """Server freshness timestamp."""
    status: SyncPhase = SyncPhase.READY

    @field_validator(
        "total_vehicles",
        "communicating_count",
        "non_communicating_count",
        "no_api_response_count",
        "no_api_integration_count",
        mode="before",
    )
    @classmethod
    def _coerce_counts(cls, value: Any) -> int:
        return non_negative_int(value) or 0

    @field_validator("regions", mode="before")
    @classmethod
    def _coerce_regions(cls, value: Any) -> tuple[str, ...]:
        if not isinstance(value, (list, tuple)):
            return ()
        regions = (safe_str(item) for item in value)
        return tuple(sorted({region for region in regions if region}))

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_phase(cls, value: Any) -> SyncPhase:
        return SyncPhase(safe_str(value) or SyncPhase.READY.value)

    @property
    def is_initializing(self) -> bool:
        return self.status is SyncPhase.INITIALIZING


class ListingPage(CanHealthBaseModel):
    """One page of the primary listing endpoint."""

    items: list[VehicleRecord] = Field(default_factory=list)
    total: int = 0
    pages: int = 0
    summary: SummaryStats | None = None

    @field_validator("items", mode="before")
    @classmethod
    def _drop_malformed_items(cls, value: Any) -> Any:
        # Non-list envelopes still fail validation.
        if not isinstance(value, list):
            return value
        return parse_records(value)

    @field_validator("total", "pages", mode="before")
    @classmethod
    def _coerce_counts(cls, value: Any) -> int:
        return non_negative_int(value) or 0
