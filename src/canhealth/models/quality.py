"""Data quality window models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from canhealth.models._base import ApiTimestamp, CanHealthBaseModel
from canhealth.normalize import non_negative_int, safe_float, safe_str


class QualityItem(CanHealthBaseModel):
    """Reporting quality of one vehicle over the trailing window."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {
        "city": "region",
        "received": "observed",
        "received_count": "observed",
        "packet_count": "observed",
        "count": "observed",
        "expected_count": "expected",
        "score_pct": "score",
    }

    vehicle_id: str
    oem: str = ""
    region: str | None = None
    observed: int = 0
    """Packets received in the window."""
    expected: int = 0
    """Packets expected in the window."""
    score: float = 0.0
    """Observed / expected as a percentage (0-100), one decimal."""
    precise_score: float | None = Field(default=None, repr=False)
    """Unrounded score, when derived client-side."""

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def _vehicle_id_non_empty(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("vehicle_id must be non-empty")
        return text

    @field_validator("oem", mode="before")
    @classmethod
    def _coerce_oem(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("region", mode="before")
    @classmethod
    def _coerce_region(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("observed", "expected", mode="before")
    @classmethod
    def _coerce_counts(cls, value: Any) -> int:
        return non_negative_int(value) or 0

    @property
    def rating_score(self) -> float:
        """Score used for High/Mid/Low ratings; 79.96 stays below 80."""
        return self.precise_score if self.precise_score is not None else self.score

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> float:
        parsed = safe_float(value)
        if parsed is None:
            return 0.0
        return min(max(parsed, 0.0), 100.0)


class DataQualitySnapshot(BaseModel):
    """Result of one data quality query.

    Fetched once per filter change; paging over ``items`` is purely
    client-side.
    """

    model_config = ConfigDict(frozen=True)

    window_start: datetime | None = None
    window_end: datetime | None = None
    total: int = 0
    items: tuple[QualityItem, ...] = ()


class QualityBuckets(BaseModel):
    """Item counts per score bucket."""

    model_config = ConfigDict(frozen=True)

    high: int = 0
    mid: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.mid + self.low


class QualityWindowPayload(CanHealthBaseModel):
    """Envelope of the data quality endpoint, before scoring."""

    window_start: ApiTimestamp = None
    window_end: ApiTimestamp = None
    total: int | None = None
    items: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("total", mode="before")
    @classmethod
    def _coerce_total(cls, value: Any) -> int | None:
        return non_negative_int(value)

    @field_validator("items", mode="before")
    @classmethod
    def _coerce_items(cls, value: Any) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]
