"""Vehicle record model."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, ClassVar

from pydantic import Field, ValidationError, field_validator

from canhealth.models._base import ApiTimestamp, CanHealthBaseModel
from canhealth.normalize import non_negative_int, safe_str

_logger = logging.getLogger(__name__)


class VehicleRecord(CanHealthBaseModel):
    """One fleet vehicle as currently known to the server.

    ``vehicle_id`` is unique within a single listing page only; pages are
    independent server-side slices.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {
        "city": "region",
        "status_detail": "detail_status",
        "sub_status": "detail_status",
    }

    vehicle_id: str
    """Registration / vehicle identifier."""
    oem: str = ""
    """Telemetry provider name."""
    region: str | None = None
    """City the vehicle is grouped under, if known."""
    status: str = ""
    """Coarse server status (``"Communicating"`` / ``"Non-Communicating"``)."""
    detail_status: str | None = None
    """Finer server sub-status that overrides ``status`` for display."""
    days_inactive: int | None = None
    """Whole days since the last packet; meaningless for no-API vehicles."""
    last_updated: ApiTimestamp = None
    """Time of the last received packet."""
    details: dict[str, Any] = Field(default_factory=dict)
    """Opaque payload shown verbatim to the user."""

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def _vehicle_id_non_empty(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("vehicle_id must be non-empty")
        return text

    @field_validator("oem", "status", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("region", "detail_status", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("days_inactive", mode="before")
    @classmethod
    def _coerce_days(cls, value: Any) -> int | None:
        return non_negative_int(value)

    @field_validator("details", mode="before")
    @classmethod
    def _coerce_details(cls, value: Any) -> dict[str, Any]:
        return value if isinstance(value, dict) else {}


def parse_records(entries: Iterable[Any]) -> list[VehicleRecord]:
    """Validate *entries* one by one, dropping the ones that do not parse.

    Server order is preserved.  A single bad record never costs the rest of
    the page.
    """
    records: list[VehicleRecord] = []
    for entry in entries:
        if isinstance(entry, VehicleRecord):
            records.append(entry)
            continue
        try:
            records.append(VehicleRecord.model_validate(entry))
        except ValidationError:
            _logger.debug("Dropping malformed vehicle record: %s", entry, exc_info=True)
    return records
